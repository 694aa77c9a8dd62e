"""
rostrum.reports - List and trend sinks.

Console sinks render with Rich; the HTML sink writes a self-contained
Chart.js page through Jinja2.
"""

from __future__ import annotations

from rostrum.reports.console import ConsoleListSink, ConsoleTrendSink
from rostrum.reports.trend import HtmlTrendSink, TrendReport

__all__ = [
    "ConsoleListSink",
    "ConsoleTrendSink",
    "HtmlTrendSink",
    "TrendReport",
]
