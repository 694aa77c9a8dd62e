"""
rostrum.reports.trend - Jinja2-based trend report.

Produces a self-contained HTML page: a Chart.js line chart of score over
date plus the speech list. The page is rewritten whenever the session
changes.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

from rostrum.io import write_text
from rostrum.models import Speech, TimePoint
from rostrum.utils import NEUTRAL_THRESHOLD, get_sentiment_class, get_sentiment_label


def build_chart_data(points: Sequence[TimePoint]) -> list[dict[str, Any]]:
    """Chart.js point list: ``[{"x": "2023-01-15", "y": 0.85}, ...]``."""
    return [{"x": p.date.isoformat(), "y": round(p.score, 4)} for p in points]


def build_speech_rows(
    speeches: Sequence[Speech],
    threshold: float = NEUTRAL_THRESHOLD,
) -> list[dict[str, Any]]:
    rows = []
    for speech in speeches:
        rows.append(
            {
                "title": speech.title,
                "date": speech.date.isoformat(),
                "display_date": speech.date.strftime("%b %d, %Y"),
                "score": speech.score,
                "score_display": f"{speech.score:.2f}",
                "sentiment_class": get_sentiment_class(speech.score, threshold),
                "sentiment_label": get_sentiment_label(speech.score, threshold),
                "positive_count": speech.details.positive_count if speech.details else None,
                "negative_count": speech.details.negative_count if speech.details else None,
            }
        )
    return rows


class TrendReport:
    """Jinja2 renderer for the trend page."""

    def __init__(self, template_dir: Path | None = None):
        if template_dir is None:
            template_dir = Path(__file__).parent / "templates"

        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(["html", "xml"]),
        )

    def render(
        self,
        speeches: Sequence[Speech],
        points: Sequence[TimePoint],
        threshold: float = NEUTRAL_THRESHOLD,
        template_name: str = "trend.html",
    ) -> str:
        """Render the page to a string.

        Args:
            speeches: Session speeches in order
            points: Time series projected from the same session
            threshold: Neutral band half-width
            template_name: Template file in the template dir

        Returns:
            HTML document
        """
        template = self.env.get_template(template_name)
        chart_json = json.dumps(build_chart_data(points))
        return template.render(
            speeches=build_speech_rows(speeches, threshold),
            chart_json=chart_json,
            generated_at=datetime.now().isoformat(timespec="seconds"),
        )

    def write(
        self,
        output_path: Path,
        speeches: Sequence[Speech],
        points: Sequence[TimePoint],
        threshold: float = NEUTRAL_THRESHOLD,
    ) -> Path:
        """Render and write the page atomically."""
        write_text(output_path, self.render(speeches, points, threshold))
        return output_path


class HtmlTrendSink:
    """List and chart sink backed by one HTML file.

    Registered as both sinks. A refresh renders speeches before the trend,
    so the list is held and the page is written once, with the points.
    """

    def __init__(
        self,
        output_path: Path,
        report: TrendReport | None = None,
        threshold: float = NEUTRAL_THRESHOLD,
    ) -> None:
        self.output_path = output_path
        self.report = report or TrendReport()
        self.threshold = threshold
        self._speeches: tuple[Speech, ...] = ()
        self._points: tuple[TimePoint, ...] = ()

    def render_speeches(self, speeches: Sequence[Speech]) -> None:
        self._speeches = tuple(speeches)

    def render_trend(self, points: Sequence[TimePoint]) -> None:
        self._points = tuple(points)
        self._write()

    def _write(self) -> None:
        self.report.write(self.output_path, self._speeches, self._points, self.threshold)
