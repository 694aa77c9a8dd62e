"""
rostrum.extract - Audio preparation.

Decodes uploaded files and microphone recordings into 16kHz mono
waveforms for transcription.
"""

from __future__ import annotations
