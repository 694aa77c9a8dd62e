"""Tests for rostrum.cli module."""

from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path
from typing import Any

import numpy as np
import pytest
from typer.testing import CliRunner

from rostrum import __version__
from rostrum.analyze.classifier import SentimentClassifier
from rostrum.cli import app, load_manifest
from rostrum.config import CONFIG_FILENAME
from rostrum.controller import SpeechTracker
from rostrum.dispatch import JobDispatcher
from rostrum.exceptions import DecodeError, RostrumError
from rostrum.models import Waveform
from rostrum.transcribe.engine import Transcriber
from rostrum.worker import AnalysisWorker

runner = CliRunner()


def fake_preparer(raw: bytes) -> Waveform:
    if not raw.startswith(b"RIFF"):
        raise DecodeError("FFmpeg could not decode audio: Invalid data")
    return Waveform(samples=np.zeros(1600, dtype=np.float32))


@pytest.fixture
def use_fakes(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    transcriber: Transcriber,
) -> Callable[[SentimentClassifier], None]:
    """Route the CLI through fake models and a fake audio decoder."""
    monkeypatch.chdir(tmp_path)

    def install(classifier: SentimentClassifier) -> None:
        def fake_build_tracker(config: Any, list_sinks=(), chart_sinks=(), on_status=None):
            worker = AnalysisWorker(classifier, transcriber, max_units=config.max_units)
            return SpeechTracker(
                JobDispatcher(worker),
                list_sinks=list_sinks,
                chart_sinks=chart_sinks,
                on_status=on_status,
                audio_preparer=fake_preparer,
            )

        monkeypatch.setattr("rostrum.cli.build_tracker", fake_build_tracker)

    return install


@pytest.fixture
def fakes(
    use_fakes: Callable[[SentimentClassifier], None], classifier: SentimentClassifier
) -> None:
    use_fakes(classifier)


class TestMain:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_config(self, fakes: None, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--config", str(tmp_path / "nope.yaml"), "demo"])
        assert result.exit_code == 1
        assert "No config file" in result.output


class TestInit:
    def test_writes_config(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["init", "--path", str(tmp_path)])

        assert result.exit_code == 0
        assert (tmp_path / CONFIG_FILENAME).exists()

    def test_refuses_overwrite(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILENAME).write_text("max_units: 5\n")

        result = runner.invoke(app, ["init", "--path", str(tmp_path)])
        assert result.exit_code == 1
        assert "already exists" in result.output

        result = runner.invoke(app, ["init", "--path", str(tmp_path), "--force"])
        assert result.exit_code == 0
        assert "max_units: 100" in (tmp_path / CONFIG_FILENAME).read_text()


class TestDemo:
    def test_shows_demo(self, fakes: None) -> None:
        result = runner.invoke(app, ["demo"])

        assert result.exit_code == 0
        assert "Demo data loaded!" in result.output
        assert "Campaign Launch" in result.output

    def test_writes_report(self, fakes: None, tmp_path: Path) -> None:
        report = tmp_path / "trend.html"
        result = runner.invoke(app, ["demo", "--report", str(report)])

        assert result.exit_code == 0
        assert "Victory Rally" in report.read_text()

    def test_custom_seed(self, fakes: None, tmp_path: Path) -> None:
        seed = tmp_path / "seed.json"
        seed.write_text(json.dumps([{"title": "Opening", "date": "2022-09-01", "score": 0.3}]))

        result = runner.invoke(app, ["demo", "--seed", str(seed)])
        assert result.exit_code == 0
        assert "Opening" in result.output
        assert "Campaign Launch" not in result.output

    def test_bad_seed(self, fakes: None, tmp_path: Path) -> None:
        seed = tmp_path / "seed.json"
        seed.write_text(json.dumps([{"title": "x", "date": "2022-09-01", "score": 9}]))

        result = runner.invoke(app, ["demo", "--seed", str(seed)])
        assert result.exit_code == 1
        assert "invalid seed data" in result.output

    def test_seed_object_instead_of_list(self, fakes: None, tmp_path: Path) -> None:
        seed = tmp_path / "seed.json"
        seed.write_text(json.dumps({"title": "x", "date": "2022-09-01", "score": 0.3}))

        result = runner.invoke(app, ["demo", "--seed", str(seed)])
        assert result.exit_code == 1
        assert "invalid seed data" in result.output
        assert not isinstance(result.exception, AttributeError)


class TestAnalyze:
    def test_requires_input(self, fakes: None) -> None:
        result = runner.invoke(app, ["analyze"])
        assert result.exit_code == 1
        assert "Provide files or --text" in result.output

    def test_text(self, fakes: None) -> None:
        result = runner.invoke(
            app,
            [
                "analyze",
                "--text",
                "Great news! This is terrible.",
                "--title",
                "Brief",
                "--date",
                "2023-01-01",
            ],
        )

        assert result.exit_code == 0
        assert "Analysis complete!" in result.output
        assert "Brief" in result.output
        assert "2023-01-01" in result.output

    def test_blank_text(self, fakes: None) -> None:
        result = runner.invoke(app, ["analyze", "--text", "   "])
        assert result.exit_code == 1
        assert "Please enter some text." in result.output

    def test_invalid_date(self, fakes: None) -> None:
        result = runner.invoke(app, ["analyze", "--text", "Hi.", "--date", "01/02/2023"])
        assert result.exit_code == 1
        assert "Invalid date" in result.output

    def test_text_file_title_from_stem(self, fakes: None, tmp_path: Path) -> None:
        speech = tmp_path / "inaugural.txt"
        speech.write_text("We will prevail. Hope endures.")

        result = runner.invoke(app, ["analyze", str(speech)])
        assert result.exit_code == 0
        assert "inaugural" in result.output

    def test_audio_file_transcribed_first(self, fakes: None, tmp_path: Path) -> None:
        audio = tmp_path / "rally.wav"
        audio.write_bytes(b"RIFF fake")

        result = runner.invoke(app, ["analyze", str(audio)])
        assert result.exit_code == 0
        assert "Transcription complete!" in result.output
        assert "rally" in result.output

    def test_undecodable_audio(self, fakes: None, tmp_path: Path) -> None:
        audio = tmp_path / "broken.mp3"
        audio.write_bytes(b"garbage")

        result = runner.invoke(app, ["analyze", str(audio)])
        assert result.exit_code == 1
        assert "Error processing audio" in result.output

    def test_missing_file(self, fakes: None, tmp_path: Path) -> None:
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.txt")])
        assert result.exit_code == 1
        assert "File not found" in result.output

    def test_classifier_failure(
        self, use_fakes: Callable[[SentimentClassifier], None], make_pipeline: Any
    ) -> None:
        pipe = make_pipeline(fail=RuntimeError("model exploded"))
        use_fakes(SentimentClassifier(loader=lambda: pipe))

        result = runner.invoke(app, ["analyze", "--text", "Hello there."])
        assert result.exit_code == 1
        assert "model exploded" in result.output
        assert "No speeches analyzed yet." in result.output

    def test_demo_then_text(self, fakes: None) -> None:
        result = runner.invoke(
            app, ["analyze", "--demo", "--text", "Fine.", "--title", "Late", "--date", "2023-12-01"]
        )
        assert result.exit_code == 0
        assert "Campaign Launch" in result.output
        assert "Late" in result.output


class TestTranscribe:
    def test_prints_transcript(self, fakes: None, tmp_path: Path) -> None:
        audio = tmp_path / "clip.wav"
        audio.write_bytes(b"RIFF")

        result = runner.invoke(app, ["transcribe", str(audio)])
        assert result.exit_code == 0
        assert "Great news! This is terrible." in result.output

    def test_missing_audio(self, fakes: None, tmp_path: Path) -> None:
        result = runner.invoke(app, ["transcribe", str(tmp_path / "none.wav")])
        assert result.exit_code == 1


class TestBatch:
    def test_numeric_title(self, fakes: None, tmp_path: Path) -> None:
        manifest = tmp_path / "speeches.yaml"
        manifest.write_text("- title: 1984\n  date: 2023-01-01\n  text: Great news!\n")

        result = runner.invoke(app, ["batch", str(manifest)])

        assert result.exit_code == 0
        assert "Analysis complete!" in result.output
        assert "1984" in result.output

    def test_numeric_text_rejected(self, fakes: None, tmp_path: Path) -> None:
        manifest = tmp_path / "speeches.yaml"
        manifest.write_text("- title: Numbers\n  text: 42\n")

        result = runner.invoke(app, ["batch", str(manifest)])
        assert result.exit_code == 1
        assert "non-text 'text'" in result.output

    def test_mixed_manifest(self, fakes: None, tmp_path: Path) -> None:
        (tmp_path / "rally.wav").write_bytes(b"RIFF")
        manifest = tmp_path / "speeches.yaml"
        manifest.write_text(
            "speeches:\n"
            "  - title: Rally\n"
            "    date: 2023-03-01\n"
            "    audio: rally.wav\n"
            "  - title: Launch\n"
            "    date: 2023-01-01\n"
            "    text: A great day. A bad week.\n"
        )

        result = runner.invoke(app, ["batch", str(manifest)])

        assert result.exit_code == 0
        assert result.output.index("2023-01-01") < result.output.index("2023-03-01")

    def test_invalid_manifest(self, fakes: None, tmp_path: Path) -> None:
        manifest = tmp_path / "speeches.yaml"
        manifest.write_text("- title: Nothing\n")

        result = runner.invoke(app, ["batch", str(manifest)])
        assert result.exit_code == 1
        assert "needs 'text' or 'audio'" in result.output


class TestLoadManifest:
    def test_title_coerced_to_text(self, tmp_path: Path) -> None:
        path = tmp_path / "m.yaml"
        path.write_text("- title: 1984\n  text: Hello.\n- text: Untitled.\n")

        entries = load_manifest(path)
        assert entries[0]["title"] == "1984"
        assert entries[1]["title"] is None

    def test_audio_must_be_text(self, tmp_path: Path) -> None:
        path = tmp_path / "m.yaml"
        path.write_text("- audio: 7\n")
        with pytest.raises(RostrumError, match="non-text 'audio'"):
            load_manifest(path)

    def test_list_form(self, tmp_path: Path) -> None:
        path = tmp_path / "m.yaml"
        path.write_text("- text: Hello.\n  date: '2023-02-01'\n- text: Bye.\n")

        entries = load_manifest(path)
        assert entries[0]["date"].isoformat() == "2023-02-01"
        assert entries[1]["date"] is None

    def test_bad_date(self, tmp_path: Path) -> None:
        path = tmp_path / "m.yaml"
        path.write_text("- text: Hello.\n  date: yesterday\n")
        with pytest.raises(RostrumError, match="invalid date"):
            load_manifest(path)

    def test_not_a_list(self, tmp_path: Path) -> None:
        path = tmp_path / "m.yaml"
        path.write_text("42\n")
        with pytest.raises(RostrumError, match="Expected a list"):
            load_manifest(path)

    def test_missing(self, tmp_path: Path) -> None:
        with pytest.raises(RostrumError, match="File not found"):
            load_manifest(tmp_path / "none.yaml")
