"""
rostrum.transcribe.engine - Whisper transcription engine.

Uses faster-whisper (default) or the transformers
``automatic-speech-recognition`` pipeline. The model is loaded lazily
and reused. Each waveform is transcribed in one call; long recordings
are not chunked.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from typing import Any

import numpy as np

from rostrum.capability import LazyCapability
from rostrum.config import DEFAULT_TRANSCRIBER_MODEL
from rostrum.exceptions import CapabilityExecutionError, CapabilityInitError
from rostrum.models import SAMPLE_RATE, Waveform

_WHITESPACE_RE = re.compile(r"\s+")


class Transcriber(LazyCapability):
    """Speech-to-text over a whole waveform.

    The loaded runtime is a callable taking float32 samples at 16kHz and
    returning either a string or a ``{"text": ...}`` mapping.
    """

    name = "transcriber"

    def __init__(
        self,
        model: str = DEFAULT_TRANSCRIBER_MODEL,
        backend: str = "faster",
        language: str | None = None,
        device: str = "cpu",
        loader: Callable[[], Any] | None = None,
    ) -> None:
        super().__init__(loader)
        self.model = model
        self.backend = backend
        self.language = language
        self.device = device

    def _load(self) -> Callable[[np.ndarray], Any]:
        if self.backend == "faster":
            return _load_faster(self.model, self.language, self.device)
        elif self.backend == "transformers":
            return _load_transformers(self.model, self.language, self.device)
        raise CapabilityInitError(self.name, f"Unknown backend: {self.backend}")

    def transcribe(self, waveform: Waveform) -> str:
        """Transcribe a prepared waveform.

        Args:
            waveform: 16kHz mono waveform

        Returns:
            Transcript text, whitespace normalized

        Raises:
            CapabilityInitError: If the model cannot be loaded
            CapabilityExecutionError: If inference fails
        """
        run = self.get()
        try:
            result = run(waveform.samples)
        except Exception as e:
            raise CapabilityExecutionError(self.name, f"Transcription failed: {e}") from e
        return _parse_transcript(result, self.name)


def _load_faster(model: str, language: str | None, device: str) -> Callable[[np.ndarray], str]:
    """Load faster-whisper and return a transcribe callable."""
    try:
        from faster_whisper import WhisperModel
    except ImportError as e:
        raise CapabilityInitError(
            "transcriber",
            "faster-whisper not installed. Install with: pip install faster-whisper",
        ) from e

    model_instance = WhisperModel(model, device=device, compute_type="auto")

    def run(samples: np.ndarray) -> str:
        kwargs: dict[str, Any] = {}
        if language:
            kwargs["language"] = language
        segments, _info = model_instance.transcribe(samples, **kwargs)
        return " ".join(segment.text.strip() for segment in segments)

    return run


def _load_transformers(
    model: str,
    language: str | None,
    device: str,
) -> Callable[[np.ndarray], Any]:
    """Load a transformers ASR pipeline and return a transcribe callable."""
    try:
        from transformers import pipeline
    except ImportError as e:
        raise CapabilityInitError(
            "transcriber",
            "transformers not installed. Install with: pip install transformers torch",
        ) from e

    model_name = model if "/" in model else f"openai/whisper-{model}"
    pipe = pipeline(
        "automatic-speech-recognition",
        model=model_name,
        device=0 if device == "cuda" else -1,
    )

    def run(samples: np.ndarray) -> Any:
        kwargs: dict[str, Any] = {}
        if language and not model_name.endswith(".en"):
            kwargs["generate_kwargs"] = {"language": language}
        return pipe({"raw": np.array(samples), "sampling_rate": SAMPLE_RATE}, **kwargs)

    return run


def _parse_transcript(result: Any, capability: str = "transcriber") -> str:
    """Normalize backend output into plain text."""
    if isinstance(result, dict):
        result = result.get("text")
    if not isinstance(result, str):
        raise CapabilityExecutionError(capability, f"Unexpected transcriber output: {result!r}")
    return _WHITESPACE_RE.sub(" ", result).strip()
