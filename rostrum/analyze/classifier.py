"""
rostrum.analyze.classifier - Sentiment classifier capability.

Wraps a Hugging Face ``sentiment-analysis`` pipeline. The pipeline is
loaded on first use and reused for every later batch.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from rostrum.capability import LazyCapability
from rostrum.config import DEFAULT_CLASSIFIER_MODEL
from rostrum.exceptions import CapabilityExecutionError, CapabilityInitError
from rostrum.models import Classification, Label

MAX_CHARS_PER_UNIT = 512


class SentimentClassifier(LazyCapability):
    """Batched sentence sentiment classification."""

    name = "sentiment classifier"

    def __init__(
        self,
        model: str = DEFAULT_CLASSIFIER_MODEL,
        device: str = "cpu",
        loader: Callable[[], Any] | None = None,
    ) -> None:
        super().__init__(loader)
        self.model = model
        self.device = device

    def _load(self) -> Any:
        try:
            from transformers import pipeline
        except ImportError as e:
            raise CapabilityInitError(
                self.name,
                "transformers not installed. Install with: pip install transformers torch",
            ) from e

        kwargs: dict[str, Any] = {"model": self.model, "tokenizer": self.model}
        if self.device == "cuda":
            kwargs["device"] = 0
        elif self.device == "cpu":
            kwargs["device"] = -1

        return pipeline("sentiment-analysis", **kwargs)

    def classify(self, units: Sequence[str]) -> list[Classification]:
        """Classify all units in a single batched call.

        Args:
            units: Ordered sentence units

        Returns:
            One Classification per unit, in input order

        Raises:
            CapabilityInitError: If the pipeline cannot be loaded
            CapabilityExecutionError: If inference fails or returns
                malformed rows
        """
        if not units:
            return []

        pipe = self.get()

        batch = [u[:MAX_CHARS_PER_UNIT] for u in units]
        try:
            raw = pipe(batch)
        except Exception as e:
            raise CapabilityExecutionError(self.name, f"classification failed: {e}") from e

        if isinstance(raw, dict):
            raw = [raw]

        return [parse_classification(row, self.name) for row in raw]


def parse_classification(row: Any, capability: str = "sentiment classifier") -> Classification:
    """Convert one pipeline row ``{"label": ..., "score": ...}``.

    Labels match by prefix, case-insensitive (POSITIVE/pos, NEGATIVE/neg).
    """
    if not isinstance(row, dict) or "label" not in row or "score" not in row:
        raise CapabilityExecutionError(capability, f"malformed classifier output: {row!r}")

    label_text = str(row["label"]).strip().upper()
    if label_text.startswith("POS"):
        label = Label.POSITIVE
    elif label_text.startswith("NEG"):
        label = Label.NEGATIVE
    else:
        raise CapabilityExecutionError(capability, f"unexpected label: {row['label']!r}")

    try:
        confidence = float(row["score"])
    except (TypeError, ValueError) as e:
        raise CapabilityExecutionError(capability, f"non-numeric score: {row['score']!r}") from e

    if not 0.0 <= confidence <= 1.0:
        raise CapabilityExecutionError(capability, f"score out of range: {confidence}")

    return Classification(label=label, confidence=confidence)
