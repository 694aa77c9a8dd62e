"""
rostrum.reports.console - Rich terminal sinks.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from rostrum.models import Speech, TimePoint
from rostrum.utils import NEUTRAL_THRESHOLD, format_score, get_sentiment_label

EMPTY_STATE = "No speeches analyzed yet."

_BAND_STYLES = {"Positive": "green", "Negative": "red", "Neutral": "yellow"}


def build_speech_table(
    speeches: Sequence[Speech],
    threshold: float = NEUTRAL_THRESHOLD,
) -> Table:
    """Table of speeches in session order."""
    table = Table(title="Speeches")
    table.add_column("Title", style="cyan")
    table.add_column("Date", style="dim")
    table.add_column("Score", justify="right")
    table.add_column("Sentences", justify="right")

    for speech in speeches:
        style = _BAND_STYLES[get_sentiment_label(speech.score, threshold)]
        sentences = str(len(speech.details.details)) if speech.details else "-"
        table.add_row(
            speech.title,
            speech.date.isoformat(),
            f"[{style}]{format_score(speech.score, threshold)}[/{style}]",
            sentences,
        )
    return table


def score_bar(score: float, width: int = 20) -> str:
    """Signed bar centred on zero, e.g. ``"          |#####     "``."""
    half = width // 2
    filled = min(half, round(abs(score) * half))
    if score >= 0:
        return " " * half + "|" + "#" * filled + " " * (half - filled)
    return " " * (half - filled) + "#" * filled + "|" + " " * half


def build_trend_table(
    points: Sequence[TimePoint],
    threshold: float = NEUTRAL_THRESHOLD,
) -> Table:
    table = Table(title="Sentiment Trend")
    table.add_column("Date", style="dim")
    table.add_column("Score", justify="right")
    table.add_column("-1 … 0 … +1")

    for point in points:
        style = _BAND_STYLES[get_sentiment_label(point.score, threshold)]
        table.add_row(
            point.date.isoformat(),
            f"{point.score:+.2f}",
            f"[{style}]{score_bar(point.score)}[/{style}]",
        )
    return table


class ConsoleListSink:
    """Prints the speech list, or the empty state."""

    def __init__(self, console: Console | None = None, threshold: float = NEUTRAL_THRESHOLD):
        self.console = console or Console()
        self.threshold = threshold

    def render_speeches(self, speeches: Sequence[Speech]) -> None:
        if not speeches:
            self.console.print(f"[dim]{EMPTY_STATE}[/dim]")
            return
        self.console.print(build_speech_table(speeches, self.threshold))


class ConsoleTrendSink:
    """Prints the (date, score) series as a table with signed bars."""

    def __init__(self, console: Console | None = None, threshold: float = NEUTRAL_THRESHOLD):
        self.console = console or Console()
        self.threshold = threshold

    def render_trend(self, points: Sequence[TimePoint]) -> None:
        if not points:
            return
        self.console.print(build_trend_table(points, self.threshold))
