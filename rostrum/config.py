"""
rostrum.config - YAML config loading and validation.

Handles locating rostrum.yaml, applying defaults, and validating all
parameters.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from rostrum.exceptions import ConfigError

CONFIG_FILENAME = "rostrum.yaml"

DEFAULT_CLASSIFIER_MODEL = "distilbert-base-uncased-finetuned-sst-2-english"
DEFAULT_TRANSCRIBER_MODEL = "tiny.en"


class RostrumConfig(BaseModel):
    """Resolved configuration for a Rostrum session."""

    classifier_model: str = DEFAULT_CLASSIFIER_MODEL

    transcriber_backend: str = "faster"
    transcriber_model: str = DEFAULT_TRANSCRIBER_MODEL
    transcriber_language: str | None = None

    device: str = "cpu"

    max_units: int = Field(default=100, ge=1, le=100)
    neutral_threshold: float = Field(default=0.2, ge=0.0, le=1.0)

    recording_sample_rate: int = Field(default=16000, gt=0)

    report_path: Path | None = None

    config_path: Path | None = None

    @field_validator("transcriber_backend")
    @classmethod
    def validate_transcriber_backend(cls, v: str) -> str:
        valid = {"faster", "transformers"}
        if v not in valid:
            raise ValueError(f"transcriber_backend must be one of: {valid}")
        return v

    @field_validator("device")
    @classmethod
    def validate_device(cls, v: str) -> str:
        valid = {"cpu", "cuda", "auto"}
        if v not in valid:
            raise ValueError(f"device must be one of: {valid}")
        return v


def find_config_file(start: Path | None = None) -> Path | None:
    """Find rostrum.yaml by walking up from the start directory."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.exists():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def load_config(path: Path | None = None) -> RostrumConfig:
    """Load and validate configuration.

    Args:
        path: Explicit config file; if None, search upward from the cwd and
            fall back to defaults when nothing is found

    Returns:
        Validated RostrumConfig

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid
    """
    if path is None:
        path = find_config_file()
        if path is None:
            return RostrumConfig()
    elif not path.exists():
        raise ConfigError(f"No config file found at {path}")

    try:
        with open(path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"Expected a mapping in {path}")

    raw_config["config_path"] = path

    try:
        return RostrumConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def create_default_config() -> dict[str, Any]:
    """Create a default config mapping for a new rostrum.yaml."""
    return {
        "classifier_model": DEFAULT_CLASSIFIER_MODEL,
        "transcriber_backend": "faster",
        "transcriber_model": DEFAULT_TRANSCRIBER_MODEL,
        "device": "cpu",
        "max_units": 100,
        "neutral_threshold": 0.2,
    }


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
