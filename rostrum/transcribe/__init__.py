"""
rostrum.transcribe - Whisper transcription capability.

Turns a prepared 16kHz waveform into text with faster-whisper (default)
or a transformers speech recognition pipeline.
"""

from __future__ import annotations
