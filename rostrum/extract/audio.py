"""
rostrum.extract.audio - FFmpeg audio decoding.

Decodes arbitrary audio bytes (an uploaded file or a finished microphone
recording) into a 16kHz mono float32 waveform. Only channel 0 is kept.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import numpy as np

from rostrum.exceptions import DecodeError, DependencyError
from rostrum.io import read_bytes
from rostrum.logging import get_logger
from rostrum.models import SAMPLE_RATE, Waveform

logger = get_logger(__name__)


def build_decode_command(ffmpeg: str = "ffmpeg", sample_rate: int = SAMPLE_RATE) -> list[str]:
    """FFmpeg command reading any container on stdin, writing f32le on stdout."""
    return [
        ffmpeg,
        "-hide_banner",
        "-loglevel",
        "error",
        "-i",
        "pipe:0",
        "-vn",
        "-af",
        "pan=mono|c0=c0",
        "-ar",
        str(sample_rate),
        "-acodec",
        "pcm_f32le",
        "-f",
        "f32le",
        "pipe:1",
    ]


def prepare_audio(raw_bytes: bytes) -> Waveform:
    """Decode audio bytes to a 16kHz mono waveform.

    Args:
        raw_bytes: Encoded audio in any format FFmpeg can read

    Returns:
        Waveform with float32 samples at 16kHz

    Raises:
        DecodeError: If the bytes are empty or not decodable audio
        DependencyError: If FFmpeg is not installed
    """
    if not raw_bytes:
        raise DecodeError("No audio data to decode")

    ffmpeg = shutil.which("ffmpeg")
    if not ffmpeg:
        raise DependencyError(
            "ffmpeg",
            "FFmpeg not found in PATH",
            "Install with: brew install ffmpeg (macOS) or apt install ffmpeg (Linux)",
        )

    logger.debug("Decoding %s of audio", format_size(len(raw_bytes)))

    try:
        proc = subprocess.run(
            build_decode_command(ffmpeg),
            input=raw_bytes,
            capture_output=True,
        )
    except OSError as e:
        raise DecodeError(f"Audio decoding failed: {e}") from e

    if proc.returncode != 0:
        stderr = proc.stderr.decode("utf-8", errors="replace").strip()
        raise DecodeError(f"FFmpeg could not decode audio: {stderr or 'unknown error'}")

    usable = len(proc.stdout) - len(proc.stdout) % 4
    samples = np.frombuffer(proc.stdout[:usable], dtype="<f4")
    if samples.size == 0:
        raise DecodeError("Decoded audio contains no samples")

    waveform = Waveform(samples=samples)
    logger.debug("Decoded %.2fs of audio", waveform.duration_seconds)
    return waveform


def prepare_audio_file(path: Path) -> Waveform:
    """Decode an audio file from disk; same path as recorded bytes.

    Raises:
        DecodeError: If the file is missing or not decodable
    """
    try:
        raw_bytes = read_bytes(path)
    except OSError as e:
        raise DecodeError(f"Cannot read audio file {path}: {e}") from e
    return prepare_audio(raw_bytes)


def format_size(size: int) -> str:
    """Format a byte count in human-readable form."""
    value = float(size)
    for unit in ["B", "KB", "MB", "GB"]:
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} TB"
