"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import numpy as np
import pytest

from rostrum.analyze.classifier import SentimentClassifier
from rostrum.dispatch import JobDispatcher
from rostrum.models import Waveform
from rostrum.transcribe.engine import Transcriber
from rostrum.worker import AnalysisWorker


class FakeSentimentPipeline:
    """Stands in for a transformers sentiment pipeline.

    Sentences containing a negative keyword are NEGATIVE, everything else
    POSITIVE. ``scores`` overrides confidences by sentence.
    """

    NEGATIVE_WORDS = ("terrible", "bad", "awful", "crisis", "sad")

    def __init__(self, scores: dict[str, float] | None = None, fail: Exception | None = None):
        self.scores = scores or {}
        self.fail = fail
        self.calls: list[list[str]] = []

    def __call__(self, batch: list[str]) -> list[dict[str, Any]]:
        self.calls.append(list(batch))
        if self.fail is not None:
            raise self.fail
        rows = []
        for sentence in batch:
            negative = any(w in sentence.lower() for w in self.NEGATIVE_WORDS)
            rows.append(
                {
                    "label": "NEGATIVE" if negative else "POSITIVE",
                    "score": self.scores.get(sentence, 0.9),
                }
            )
        return rows


class FakeTranscriberRuntime:
    def __init__(
        self, text: str = " Great news!  This is terrible. ", fail: Exception | None = None
    ):
        self.text = text
        self.fail = fail
        self.calls: list[np.ndarray] = []

    def __call__(self, samples: np.ndarray) -> dict[str, str]:
        self.calls.append(samples)
        if self.fail is not None:
            raise self.fail
        return {"text": self.text}


@pytest.fixture
def fake_pipeline() -> FakeSentimentPipeline:
    return FakeSentimentPipeline()


@pytest.fixture
def fake_runtime() -> FakeTranscriberRuntime:
    return FakeTranscriberRuntime()


@pytest.fixture
def classifier(fake_pipeline: FakeSentimentPipeline) -> SentimentClassifier:
    return SentimentClassifier(loader=lambda: fake_pipeline)


@pytest.fixture
def transcriber(fake_runtime: FakeTranscriberRuntime) -> Transcriber:
    return Transcriber(loader=lambda: fake_runtime)


@pytest.fixture
def waveform() -> Waveform:
    t = np.linspace(0, 1, 16000, endpoint=False)
    return Waveform(samples=0.1 * np.sin(2 * np.pi * 220 * t))


@pytest.fixture
def dispatcher(
    classifier: SentimentClassifier,
    transcriber: Transcriber,
) -> Iterator[JobDispatcher]:
    d = JobDispatcher(AnalysisWorker(classifier, transcriber))
    d.start()
    yield d
    d.shutdown(timeout=5)


@pytest.fixture
def sample_config_dict() -> dict:
    """Return a sample configuration dictionary."""
    return {
        "classifier_model": "distilbert-base-uncased-finetuned-sst-2-english",
        "transcriber_backend": "faster",
        "transcriber_model": "tiny.en",
        "device": "cpu",
        "max_units": 50,
        "neutral_threshold": 0.25,
    }


@pytest.fixture
def make_pipeline() -> type[FakeSentimentPipeline]:
    """Factory for pipelines with custom scores or failures."""
    return FakeSentimentPipeline


@pytest.fixture
def make_runtime() -> type[FakeTranscriberRuntime]:
    return FakeTranscriberRuntime
