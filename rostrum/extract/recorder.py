"""
rostrum.extract.recorder - Microphone capture.

Records from the default input device with sounddevice and hands back
WAV bytes, which then go through the same decode path as an upload.
The input stream is owned by the recorder and is always closed on stop.
"""

from __future__ import annotations

import io
import threading
import time
from collections.abc import Callable
from typing import Any

import numpy as np

from rostrum.exceptions import MicrophonePermissionError, RecordingError
from rostrum.logging import get_logger
from rostrum.utils import format_duration

logger = get_logger(__name__)


def _default_stream_factory(**kwargs: Any) -> Any:
    import sounddevice as sd

    return sd.InputStream(**kwargs)


class MicrophoneRecorder:
    """Single-use microphone recording session."""

    def __init__(
        self,
        sample_rate: int = 16000,
        stream_factory: Callable[..., Any] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.sample_rate = sample_rate
        self._stream_factory = stream_factory or _default_stream_factory
        self._clock = clock
        self._stream: Any = None
        self._chunks: list[np.ndarray] = []
        self._chunks_lock = threading.Lock()
        self._started_at: float | None = None
        self._stopped_at: float | None = None

    @property
    def is_recording(self) -> bool:
        return self._stream is not None

    @property
    def elapsed(self) -> float:
        """Seconds since start (frozen once stopped)."""
        if self._started_at is None:
            return 0.0
        end = self._stopped_at if self._stopped_at is not None else self._clock()
        return max(0.0, end - self._started_at)

    @property
    def elapsed_display(self) -> str:
        return format_duration(self.elapsed)

    def _on_block(self, indata: np.ndarray, frames: int, time_info: Any, status: Any) -> None:
        if status:
            logger.debug("Input stream status: %s", status)
        with self._chunks_lock:
            self._chunks.append(np.array(indata[:, 0], dtype=np.float32))

    def start(self) -> None:
        """Open the microphone and start capturing.

        Raises:
            MicrophonePermissionError: If the device cannot be opened
            RecordingError: If this recorder is already recording
        """
        if self._stream is not None:
            raise RecordingError("Recording already in progress")

        with self._chunks_lock:
            self._chunks = []

        try:
            stream = self._stream_factory(
                samplerate=self.sample_rate,
                channels=1,
                dtype="float32",
                callback=self._on_block,
            )
        except Exception as e:
            raise MicrophonePermissionError(
                f"Error accessing microphone. Please allow permissions. ({e})"
            ) from e

        try:
            stream.start()
        except Exception as e:
            stream.close()
            raise MicrophonePermissionError(
                f"Error accessing microphone. Please allow permissions. ({e})"
            ) from e

        self._stream = stream
        self._started_at = self._clock()
        self._stopped_at = None
        logger.info("Recording started at %d Hz", self.sample_rate)

    def stop(self) -> bytes:
        """Stop capturing, release the device, and return WAV bytes.

        Raises:
            RecordingError: If not recording or nothing was captured
        """
        stream = self._stream
        if stream is None:
            raise RecordingError("Not recording")

        try:
            stream.stop()
        finally:
            self._stream = None
            self._stopped_at = self._clock()
            stream.close()

        with self._chunks_lock:
            chunks = self._chunks
            self._chunks = []

        logger.info("Recording stopped after %s", self.elapsed_display)

        if not chunks:
            raise RecordingError("No audio captured")

        return encode_wav(np.concatenate(chunks), self.sample_rate)

    def record(self, seconds: float, sleep: Callable[[float], None] = time.sleep) -> bytes:
        """Record for a fixed duration."""
        self.start()
        try:
            sleep(seconds)
        finally:
            audio = self.stop()
        return audio


def encode_wav(samples: np.ndarray, sample_rate: int) -> bytes:
    """Encode mono float samples as 16-bit PCM WAV bytes."""
    import soundfile as sf

    buffer = io.BytesIO()
    sf.write(buffer, samples, sample_rate, format="WAV", subtype="PCM_16")
    return buffer.getvalue()
