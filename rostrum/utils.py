"""
rostrum.utils - Shared utility functions.

Contains common functions used across multiple modules to avoid duplication.
"""

from __future__ import annotations

import datetime as dt

NEUTRAL_THRESHOLD = 0.2


def format_duration(seconds: float) -> str:
    """Format seconds as MM:SS, or HH:MM:SS past one hour.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted string, zero-padded minutes (e.g. "02:05")
    """
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def get_sentiment_class(score: float, threshold: float = NEUTRAL_THRESHOLD) -> str:
    """Get CSS class for a sentiment score badge.

    Args:
        score: Document score (-1.0 to 1.0)
        threshold: Band half-width treated as neutral

    Returns:
        CSS class name: "score-positive", "score-negative", or "score-neutral"
    """
    if score > threshold:
        return "score-positive"
    elif score < -threshold:
        return "score-negative"
    return "score-neutral"


def get_sentiment_label(score: float, threshold: float = NEUTRAL_THRESHOLD) -> str:
    """Human-readable band for a score: Positive, Negative, or Neutral."""
    if score > threshold:
        return "Positive"
    elif score < -threshold:
        return "Negative"
    return "Neutral"


def format_score(score: float, threshold: float = NEUTRAL_THRESHOLD) -> str:
    """Format a score with its band, e.g. "0.45 (Positive)"."""
    return f"{score:.2f} ({get_sentiment_label(score, threshold)})"


def parse_date(value: str | dt.date | None) -> dt.date | None:
    """Parse an ISO date (YYYY-MM-DD); dates pass through, None stays None.

    Raises:
        ValueError: If the string is not an ISO calendar date
    """
    if value is None or isinstance(value, dt.date):
        return value
    value = value.strip()
    if not value:
        return None
    return dt.date.fromisoformat(value)
