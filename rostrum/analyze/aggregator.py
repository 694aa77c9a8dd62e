"""
rostrum.analyze.aggregator - Document score from sentence scores.

Every sentence counts equally regardless of length: no weighting,
smoothing, or recency bias.
"""

from __future__ import annotations

from collections.abc import Sequence

from rostrum.exceptions import AggregationError
from rostrum.models import AnalysisResult, Classification, Label, SentenceResult


def signed_score(classification: Classification) -> float:
    """+confidence for POSITIVE, -confidence for NEGATIVE."""
    if classification.label is Label.POSITIVE:
        return classification.confidence
    return -classification.confidence


def aggregate(
    units: Sequence[str],
    classifications: Sequence[Classification],
) -> AnalysisResult:
    """Reduce per-unit classifications to an AnalysisResult.

    Args:
        units: Segmented sentence units
        classifications: One classification per unit, same order

    Returns:
        AnalysisResult with mean signed score, label tallies, and details

    Raises:
        AggregationError: If there are no units or the counts differ
    """
    if not units:
        raise AggregationError("Cannot aggregate zero units")
    if len(classifications) != len(units):
        raise AggregationError(
            f"Classifier returned {len(classifications)} result(s) for {len(units)} unit(s)"
        )

    details = []
    positive_count = 0
    negative_count = 0
    total = 0.0

    for unit, classification in zip(units, classifications):
        score = signed_score(classification)
        if classification.label is Label.POSITIVE:
            positive_count += 1
        else:
            negative_count += 1
        total += score
        details.append(SentenceResult(text=unit, signed_score=score, label=classification.label))

    return AnalysisResult(
        average_score=total / len(units),
        positive_count=positive_count,
        negative_count=negative_count,
        details=tuple(details),
    )
