"""
rostrum.session - The ordered collection of analyzed speeches.

Speeches are kept sorted by date at all times; the trend chart's time
series is derived from that order.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterator, Mapping, Sequence
from typing import Any

from rostrum.models import DEFAULT_TITLE, AnalysisResult, Speech, TimePoint

DEMO_SPEECHES: list[dict[str, Any]] = [
    {"title": "Campaign Launch", "date": "2023-01-15", "score": 0.85},
    {"title": "Town Hall Meeting", "date": "2023-02-10", "score": 0.45},
    {"title": "Press Conference", "date": "2023-03-05", "score": -0.20},
    {"title": "Policy Speech", "date": "2023-04-20", "score": 0.60},
    {"title": "Crisis Response", "date": "2023-05-12", "score": -0.55},
    {"title": "Victory Rally", "date": "2023-06-30", "score": 0.95},
]


def create_speech(
    result: AnalysisResult,
    title: str | None = None,
    speech_date: dt.date | None = None,
    today: dt.date | None = None,
) -> Speech:
    """Build a Speech from a completed analysis.

    Blank titles become "Untitled Speech"; a missing date becomes today.
    """
    return Speech(
        title=(title or "").strip() or DEFAULT_TITLE,
        date=speech_date or today or dt.date.today(),
        score=result.average_score,
        details=result,
    )


class SessionState:
    """Date-ordered speeches for the lifetime of the process."""

    def __init__(self) -> None:
        self._speeches: list[Speech] = []

    def __len__(self) -> int:
        return len(self._speeches)

    def __iter__(self) -> Iterator[Speech]:
        return iter(tuple(self._speeches))

    @property
    def speeches(self) -> tuple[Speech, ...]:
        return tuple(self._speeches)

    def append(self, speech: Speech) -> Speech:
        """Add a speech and restore date order (stable for equal dates)."""
        self._speeches.append(speech)
        self._speeches.sort(key=lambda s: s.date)
        return speech

    def project_time_series(self) -> list[TimePoint]:
        """(date, score) per speech, in session order."""
        return [TimePoint(s.date, s.score) for s in self._speeches]

    def load_demo(
        self,
        seeds: Sequence[Mapping[str, Any]] | None = None,
        replace: bool = True,
    ) -> list[Speech]:
        """Install sample speeches.

        Args:
            seeds: Mappings with title, date, score; defaults to the
                built-in demo set
            replace: Drop existing speeches first

        Returns:
            The speeches that were added

        Raises:
            ValueError: If seeds is not a list of mappings or a seed is invalid
        """
        if seeds is None:
            seeds = DEMO_SPEECHES
        elif isinstance(seeds, Mapping) or not all(isinstance(s, Mapping) for s in seeds):
            raise ValueError("Seeds must be a list of {title, date, score} objects")

        added = [
            Speech(
                title=seed.get("title") or DEFAULT_TITLE,
                date=seed["date"],
                score=seed["score"],
                details=seed.get("details") or None,
            )
            for seed in seeds
        ]
        if replace:
            self._speeches = []
        self._speeches.extend(added)
        self._speeches.sort(key=lambda s: s.date)
        return added
