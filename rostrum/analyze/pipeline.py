"""
rostrum.analyze.pipeline - Segment → classify → aggregate.

Runs on the worker side of the dispatcher.
"""

from __future__ import annotations

from rostrum.analyze.aggregator import aggregate
from rostrum.analyze.classifier import SentimentClassifier
from rostrum.analyze.segmenter import MAX_UNITS, segment
from rostrum.logging import get_logger
from rostrum.models import AnalysisResult

logger = get_logger(__name__)


def analyze_text(
    text: str,
    classifier: SentimentClassifier,
    max_units: int = MAX_UNITS,
) -> AnalysisResult:
    """Score a speech's text.

    Args:
        text: Speech text
        classifier: Classifier capability (loaded on first use)
        max_units: Sentence cap for the batch

    Returns:
        AnalysisResult for the text

    Raises:
        InputValidationError: If text is blank
        CapabilityInitError: If the classifier cannot load
        CapabilityExecutionError: If classification fails
        AggregationError: If the classifier's output doesn't line up
    """
    units = segment(text, max_units=max_units)
    logger.debug("Classifying %d unit(s)", len(units))
    classifications = classifier.classify(units)
    result = aggregate(units, classifications)
    logger.debug(
        "Average score %.3f (%d positive, %d negative)",
        result.average_score,
        result.positive_count,
        result.negative_count,
    )
    return result
