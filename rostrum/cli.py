"""
rostrum.cli - Typer CLI entry point.

Each invocation is one tracking session: speeches analyzed during the
command are shown together, then discarded when the process exits.
"""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Any

import typer
import yaml
from rich.console import Console

from rostrum import __version__
from rostrum.config import CONFIG_FILENAME, RostrumConfig, create_default_config, write_config
from rostrum.controller import SpeechTracker, StatusMessage, build_tracker
from rostrum.exceptions import ConfigError, RostrumError
from rostrum.io import read_json, read_text
from rostrum.logging import configure_logging
from rostrum.models import JobKind
from rostrum.reports import ConsoleListSink, ConsoleTrendSink, HtmlTrendSink
from rostrum.utils import parse_date

app = typer.Typer(
    name="rostrum",
    help="Sentiment trend tracking for speeches.\n\n"
    "Analyzes speech text or audio sentence by sentence and charts how "
    "sentiment moves from one speech to the next.",
    add_completion=False,
)
console = Console()

TEXT_SUFFIXES = {".txt", ".md", ".text"}

_STATUS_STYLES = {"info": "dim", "success": "green", "error": "red"}


class _State:
    config_path: Path | None = None


state = _State()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"rostrum {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
    config: Path | None = typer.Option(
        None, "--config", "-c", help=f"Path to {CONFIG_FILENAME} (searched upward by default)"
    ),
) -> None:
    """Rostrum - sentiment trend tracking for speeches."""
    configure_logging(verbose)
    state.config_path = config


def load_cli_config() -> RostrumConfig:
    from rostrum.config import load_config

    try:
        return load_config(state.config_path)
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)


def print_status(message: StatusMessage) -> None:
    style = _STATUS_STYLES.get(message.level, "dim")
    console.print(f"[{style}]{message.text}[/{style}]")


def open_tracker(config: RostrumConfig, report: Path | None) -> SpeechTracker:
    """Tracker with an HTML sink when a report path is set."""
    report_path = report or config.report_path
    sinks: list[Any] = []
    if report_path is not None:
        sinks.append(HtmlTrendSink(report_path, threshold=config.neutral_threshold))
    return build_tracker(
        config,
        list_sinks=sinks,
        chart_sinks=sinks,
        on_status=print_status,
    )


def show_session(tracker: SpeechTracker, config: RostrumConfig) -> None:
    ConsoleListSink(console, config.neutral_threshold).render_speeches(tracker.session.speeches)
    ConsoleTrendSink(console, config.neutral_threshold).render_trend(
        tracker.session.project_time_series()
    )


def is_text_file(path: Path) -> bool:
    return path.suffix.lower() in TEXT_SUFFIXES


def run_transcription(tracker: SpeechTracker, audio: bytes | Path) -> str:
    """Transcribe and wait; raises RostrumError on failure."""
    if isinstance(audio, Path):
        tracker.transcribe_file(audio)
    else:
        tracker.transcribe_audio(audio)
    with console.status("Transcribing..."):
        tracker.wait(JobKind.TRANSCRIBE)
    if tracker.last_error is not None or tracker.transcript is None:
        raise RostrumError(tracker.last_error or "Transcription produced no text")
    return tracker.transcript


def run_analysis(
    tracker: SpeechTracker,
    text: str,
    title: str | None,
    speech_date: dt.date | None,
) -> bool:
    """Analyze and wait; returns False if the job failed."""
    tracker.analyze(text, title=title, speech_date=speech_date)
    with console.status("Analyzing..."):
        tracker.wait(JobKind.ANALYZE)
    return tracker.last_error is None


def parse_date_option(value: str | None) -> dt.date | None:
    try:
        return parse_date(value)
    except ValueError:
        console.print(f"[red]Error: Invalid date '{value}' (expected YYYY-MM-DD)[/red]")
        raise typer.Exit(1)


@app.command("init")
def init_config(
    path: Path = typer.Option(Path("."), "--path", "-d", help="Directory to write config in"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Write a default rostrum.yaml."""
    config_path = path / CONFIG_FILENAME
    if config_path.exists() and not force:
        console.print(f"[red]Error: '{config_path}' already exists[/red]")
        raise typer.Exit(1)

    write_config(create_default_config(), config_path)
    console.print(f"[green]✓[/green] Wrote {config_path}")


@app.command("analyze")
def analyze(
    files: list[Path] = typer.Argument(None, help="Text or audio files, one speech each"),
    text: str | None = typer.Option(None, "--text", "-t", help="Speech text to analyze"),
    title: str | None = typer.Option(None, "--title", help="Speech title"),
    date: str | None = typer.Option(None, "--date", help="Speech date (YYYY-MM-DD)"),
    demo: bool = typer.Option(False, "--demo", help="Start the session with demo speeches"),
    report: Path | None = typer.Option(None, "--report", "-r", help="Write an HTML trend report"),
) -> None:
    """Analyze speeches and show the sentiment trend.

    Text files are analyzed directly; audio files are transcribed first.
    """
    files = files or []
    if not files and text is None:
        console.print("[red]Error: Provide files or --text[/red]")
        raise typer.Exit(1)

    speech_date = parse_date_option(date)
    config = load_cli_config()
    failed = 0

    with open_tracker(config, report) as tracker:
        if demo:
            tracker.load_demo()

        inputs: list[tuple[str | None, Path | None]] = []
        if text is not None:
            inputs.append((text, None))
        inputs.extend((None, f) for f in files)

        for body, source in inputs:
            speech_title = title
            try:
                if source is not None:
                    if not source.exists():
                        raise RostrumError(f"File not found: {source}")
                    speech_title = title or source.stem
                    if is_text_file(source):
                        body = read_text(source)
                    else:
                        console.print(f"[cyan]Transcribing {source.name}...[/cyan]")
                        body = run_transcription(tracker, source)
                if not run_analysis(tracker, body or "", speech_title, speech_date):
                    failed += 1
            except RostrumError as e:
                console.print(f"[red]Error: {e}[/red]")
                failed += 1

        show_session(tracker, config)

    if report or config.report_path:
        console.print(f"[dim]Report: {report or config.report_path}[/dim]")

    if failed:
        raise typer.Exit(1)


@app.command("transcribe")
def transcribe(
    audio: Path = typer.Argument(..., help="Audio file to transcribe"),
) -> None:
    """Transcribe an audio file and print the text."""
    if not audio.exists():
        console.print(f"[red]Error: File not found: {audio}[/red]")
        raise typer.Exit(1)

    config = load_cli_config()
    with open_tracker(config, None) as tracker:
        try:
            transcript = run_transcription(tracker, audio)
        except RostrumError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    console.print(transcript)


@app.command("record")
def record(
    seconds: float = typer.Option(10.0, "--seconds", "-s", min=0.5, help="Recording length"),
    analyze_after: bool = typer.Option(
        False, "--analyze", "-a", help="Analyze the transcript after recording"
    ),
    title: str | None = typer.Option(None, "--title", help="Speech title"),
    report: Path | None = typer.Option(None, "--report", "-r", help="Write an HTML trend report"),
) -> None:
    """Record from the microphone, transcribe, and optionally analyze."""
    from rostrum.extract.recorder import MicrophoneRecorder

    config = load_cli_config()
    recorder = MicrophoneRecorder(sample_rate=config.recording_sample_rate)

    try:
        with console.status(f"Recording for {seconds:g}s..."):
            audio = recorder.record(seconds)
    except RostrumError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[dim]Recorded {recorder.elapsed_display}[/dim]")

    with open_tracker(config, report) as tracker:
        try:
            transcript = run_transcription(tracker, audio)
        except RostrumError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

        console.print(transcript)

        if analyze_after:
            if not run_analysis(tracker, transcript, title, None):
                raise typer.Exit(1)
            show_session(tracker, config)


@app.command("batch")
def batch(
    manifest: Path = typer.Argument(..., help="YAML list of speeches (title, date, text|audio)"),
    report: Path | None = typer.Option(None, "--report", "-r", help="Write an HTML trend report"),
) -> None:
    """Analyze a list of speeches described in a YAML manifest."""
    try:
        entries = load_manifest(manifest)
    except RostrumError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    config = load_cli_config()
    failed = 0

    with open_tracker(config, report) as tracker:
        for entry in entries:
            try:
                body = entry.get("text")
                if body is None:
                    audio_path = manifest.parent / entry["audio"]
                    console.print(f"[cyan]Transcribing {audio_path.name}...[/cyan]")
                    body = run_transcription(tracker, audio_path)
                if not run_analysis(tracker, body, entry.get("title"), entry.get("date")):
                    failed += 1
            except RostrumError as e:
                console.print(f"[red]Error ({entry.get('title') or 'untitled'}): {e}[/red]")
                failed += 1

        show_session(tracker, config)

    if failed:
        raise typer.Exit(1)


def load_manifest(path: Path) -> list[dict[str, Any]]:
    """Load and validate a batch manifest.

    Raises:
        RostrumError: If the file is missing or malformed
    """
    if not path.exists():
        raise RostrumError(f"File not found: {path}")

    try:
        raw = yaml.safe_load(read_text(path)) or []
    except yaml.YAMLError as e:
        raise RostrumError(f"Invalid YAML in {path}: {e}") from e

    if isinstance(raw, dict):
        raw = raw.get("speeches", [])
    if not isinstance(raw, list):
        raise RostrumError(f"Expected a list of speeches in {path}")

    entries = []
    for i, item in enumerate(raw, start=1):
        if not isinstance(item, dict) or ("text" not in item and "audio" not in item):
            raise RostrumError(f"Entry {i} needs 'text' or 'audio'")
        for key in ("text", "audio"):
            if key in item and not isinstance(item[key], str):
                raise RostrumError(f"Entry {i} has a non-text '{key}': {item[key]!r}")
        try:
            entry_date = parse_date(item.get("date"))
        except (TypeError, ValueError) as e:
            raise RostrumError(f"Entry {i} has an invalid date: {item.get('date')!r}") from e
        title = item.get("title")
        entries.append(
            {**item, "title": None if title is None else str(title), "date": entry_date}
        )
    return entries


@app.command("demo")
def demo(
    seed: Path | None = typer.Option(None, "--seed", help="JSON list of {title, date, score}"),
    report: Path | None = typer.Option(None, "--report", "-r", help="Write an HTML trend report"),
) -> None:
    """Load demo speeches and show the trend."""
    seeds = None
    if seed is not None:
        try:
            seeds = read_json(seed)
        except (OSError, ValueError) as e:
            console.print(f"[red]Error reading seed file: {e}[/red]")
            raise typer.Exit(1)

    config = load_cli_config()
    with open_tracker(config, report) as tracker:
        try:
            tracker.load_demo(seeds)
        except (KeyError, TypeError, ValueError) as e:
            console.print(f"[red]Error: invalid seed data: {e}[/red]")
            raise typer.Exit(1)
        show_session(tracker, config)


if __name__ == "__main__":
    app()
