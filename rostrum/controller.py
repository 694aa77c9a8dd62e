"""
rostrum.controller - Control context for a tracking session.

SpeechTracker validates input, prepares audio, submits jobs, and applies
responses: analysis results become Speeches in the session, transcripts
become text ready for analysis. Each job kind is either idle or busy;
a kind is busy from submission until its response is delivered.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from rostrum.analyze.classifier import SentimentClassifier
from rostrum.config import RostrumConfig
from rostrum.dispatch import JobDispatcher
from rostrum.exceptions import DecodeError, InputValidationError, JobInFlightError
from rostrum.extract.audio import prepare_audio
from rostrum.io import read_bytes
from rostrum.logging import get_logger
from rostrum.models import AnalysisJob, JobKind, JobResponse, Speech, TimePoint
from rostrum.session import SessionState, create_speech
from rostrum.transcribe.engine import Transcriber
from rostrum.worker import AnalysisWorker

logger = get_logger(__name__)


class KindState(str, Enum):
    IDLE = "idle"
    BUSY = "busy"


@dataclass(frozen=True)
class StatusMessage:
    text: str
    level: str = "info"


class ListSink(Protocol):
    def render_speeches(self, speeches: Sequence[Speech]) -> None: ...


class ChartSink(Protocol):
    def render_trend(self, points: Sequence[TimePoint]) -> None: ...


@dataclass(frozen=True)
class _PendingSpeech:
    title: str | None
    date: dt.date


class SpeechTracker:
    """Single-threaded controller over a dispatcher and a session."""

    def __init__(
        self,
        dispatcher: JobDispatcher,
        session: SessionState | None = None,
        list_sinks: Sequence[ListSink] = (),
        chart_sinks: Sequence[ChartSink] = (),
        on_status: Callable[[StatusMessage], None] | None = None,
        audio_preparer: Callable[[bytes], Any] = prepare_audio,
        today: Callable[[], dt.date] = dt.date.today,
    ) -> None:
        self.dispatcher = dispatcher
        self.session = session if session is not None else SessionState()
        self.list_sinks = list(list_sinks)
        self.chart_sinks = list(chart_sinks)
        self.on_status = on_status
        self._prepare_audio = audio_preparer
        self._today = today
        self._pending: dict[str, _PendingSpeech] = {}
        self.status: StatusMessage | None = None
        self.transcript: str | None = None
        self.last_error: str | None = None

        dispatcher.on_response(JobKind.ANALYZE, self._on_analyze)
        dispatcher.on_response(JobKind.TRANSCRIBE, self._on_transcribe)

    def __enter__(self) -> SpeechTracker:
        self.dispatcher.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispatcher.shutdown()

    def state(self, kind: JobKind) -> KindState:
        return KindState.BUSY if self.dispatcher.is_busy(kind) else KindState.IDLE

    def _set_status(self, text: str, level: str = "info") -> None:
        self.status = StatusMessage(text, level)
        if level == "error":
            logger.warning(text)
        else:
            logger.info(text)
        if self.on_status is not None:
            self.on_status(self.status)

    # Analysis

    def analyze(
        self,
        text: str,
        title: str | None = None,
        speech_date: dt.date | None = None,
    ) -> str:
        """Submit text for sentiment analysis.

        Title and date are captured now and applied when the result
        arrives.

        Returns:
            Job id

        Raises:
            InputValidationError: If the text is blank (nothing submitted)
            JobInFlightError: If an analysis is already running
        """
        text = (text or "").strip()
        if not text:
            self._set_status("Please enter some text.", "error")
            raise InputValidationError("Please enter some text.")

        job = AnalysisJob.analyze(text)
        self.dispatcher.submit(job)
        self._pending[job.id] = _PendingSpeech(title=title, date=speech_date or self._today())
        self._set_status("Analyzing... (This may take a moment for the first run)")
        return job.id

    def _on_analyze(self, response: JobResponse) -> None:
        pending = self._pending.pop(response.job_id, None)
        if not response.ok:
            self.last_error = response.error
            self._set_status(f"Error: {response.error}", "error")
            return

        speech = create_speech(
            response.result,
            title=pending.title if pending else None,
            speech_date=pending.date if pending else None,
            today=self._today(),
        )
        self.session.append(speech)
        self.last_error = None
        self.refresh()
        self._set_status("Analysis complete!", "success")

    # Transcription

    def transcribe_audio(self, raw_bytes: bytes) -> str:
        """Decode audio bytes and submit them for transcription.

        Returns:
            Job id

        Raises:
            DecodeError: If the audio cannot be decoded (nothing submitted)
            JobInFlightError: If a transcription is already running
        """
        self._set_status("Processing audio...")
        try:
            waveform = self._prepare_audio(raw_bytes)
        except DecodeError as e:
            self._set_status(f"Error processing audio: {e}", "error")
            raise

        job = AnalysisJob.transcribe(waveform)
        try:
            self.dispatcher.submit(job)
        except JobInFlightError as e:
            self._set_status(f"Transcription Error: {e}", "error")
            raise
        self._set_status("Transcribing... (This may take a moment)")
        return job.id

    def transcribe_file(self, path: Path) -> str:
        """Read an audio file and submit it for transcription."""
        try:
            raw_bytes = read_bytes(path)
        except OSError as e:
            self._set_status(f"Error processing audio: {e}", "error")
            raise DecodeError(f"Cannot read audio file {path}: {e}") from e
        return self.transcribe_audio(raw_bytes)

    def _on_transcribe(self, response: JobResponse) -> None:
        if not response.ok:
            self.last_error = response.error
            self._set_status(f"Transcription Error: {response.error}", "error")
            return

        self.transcript = response.result
        self.last_error = None
        self._set_status("Transcription complete! You can now analyze the text.", "success")

    # Session

    def load_demo(self, seeds: Sequence[dict[str, Any]] | None = None) -> None:
        self.session.load_demo(seeds)
        self.refresh()
        self._set_status("Demo data loaded!", "success")

    def refresh(self) -> None:
        """Push the current session to every sink, list sinks first."""
        speeches = self.session.speeches
        points = self.session.project_time_series()
        for list_sink in self.list_sinks:
            list_sink.render_speeches(speeches)
        for chart_sink in self.chart_sinks:
            chart_sink.render_trend(points)

    def poll(self, timeout: float | None = 0.0) -> int:
        return self.dispatcher.poll(timeout)

    def wait(self, kind: JobKind, timeout: float | None = None) -> bool:
        return self.dispatcher.wait(kind, timeout)


def build_tracker(
    config: RostrumConfig,
    list_sinks: Sequence[ListSink] = (),
    chart_sinks: Sequence[ChartSink] = (),
    on_status: Callable[[StatusMessage], None] | None = None,
    classifier: SentimentClassifier | None = None,
    transcriber: Transcriber | None = None,
) -> SpeechTracker:
    """Wire capabilities, worker, dispatcher and session from config."""
    classifier = classifier or SentimentClassifier(
        model=config.classifier_model,
        device=config.device,
    )
    transcriber = transcriber or Transcriber(
        model=config.transcriber_model,
        backend=config.transcriber_backend,
        language=config.transcriber_language,
        device=config.device,
    )
    worker = AnalysisWorker(classifier, transcriber, max_units=config.max_units)
    return SpeechTracker(
        JobDispatcher(worker),
        list_sinks=list_sinks,
        chart_sinks=chart_sinks,
        on_status=on_status,
    )
