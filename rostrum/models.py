"""
rostrum.models - Immutable records passed through the pipeline.

Everything that crosses the control/worker boundary is a frozen pydantic
model, so neither side can mutate what the other holds.
"""

from __future__ import annotations

import datetime as dt
import uuid
from enum import Enum
from typing import Any, NamedTuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

SAMPLE_RATE = 16000
DEFAULT_TITLE = "Untitled Speech"


def new_id() -> str:
    return uuid.uuid4().hex


class JobKind(str, Enum):
    ANALYZE = "analyze"
    TRANSCRIBE = "transcribe"


class JobStatus(str, Enum):
    COMPLETE = "complete"
    ERROR = "error"


class Label(str, Enum):
    POSITIVE = "POSITIVE"
    NEGATIVE = "NEGATIVE"


class Classification(BaseModel):
    """One classifier row: label plus confidence."""

    model_config = ConfigDict(frozen=True)

    label: Label
    confidence: float = Field(ge=0.0, le=1.0)


class SentenceResult(BaseModel):
    """Signed score for a single segmented unit."""

    model_config = ConfigDict(frozen=True)

    text: str
    signed_score: float = Field(ge=-1.0, le=1.0)
    label: Label


class AnalysisResult(BaseModel):
    """Document-level sentiment derived from sentence results."""

    model_config = ConfigDict(frozen=True)

    average_score: float = Field(ge=-1.0, le=1.0)
    positive_count: int = Field(ge=0)
    negative_count: int = Field(ge=0)
    details: tuple[SentenceResult, ...] = ()

    @model_validator(mode="after")
    def check_counts(self) -> AnalysisResult:
        if self.positive_count + self.negative_count != len(self.details):
            raise ValueError("positive_count + negative_count must equal the number of details")
        if self.details:
            mean = sum(d.signed_score for d in self.details) / len(self.details)
            if abs(mean - self.average_score) > 1e-9:
                raise ValueError("average_score must be the mean of detail scores")
        return self


class Waveform(BaseModel):
    """Decoded mono audio at the fixed transcription rate."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    samples: np.ndarray
    sample_rate: int = SAMPLE_RATE
    channels: int = 1

    @field_validator("samples", mode="before")
    @classmethod
    def validate_samples(cls, v: Any) -> np.ndarray:
        arr = np.array(v, dtype=np.float32).reshape(-1)
        arr.setflags(write=False)
        return arr

    @field_validator("sample_rate")
    @classmethod
    def validate_sample_rate(cls, v: int) -> int:
        if v != SAMPLE_RATE:
            raise ValueError(f"sample_rate must be {SAMPLE_RATE}")
        return v

    @field_validator("channels")
    @classmethod
    def validate_channels(cls, v: int) -> int:
        if v != 1:
            raise ValueError("channels must be 1")
        return v

    @property
    def duration_seconds(self) -> float:
        return len(self.samples) / self.sample_rate


class AnalysisJob(BaseModel):
    """A unit of work for the worker context."""

    model_config = ConfigDict(frozen=True)

    kind: JobKind
    payload: str | Waveform
    id: str = Field(default_factory=new_id)
    submitted_at: dt.datetime = Field(default_factory=dt.datetime.now)

    @model_validator(mode="after")
    def check_payload(self) -> AnalysisJob:
        if self.kind is JobKind.ANALYZE and not isinstance(self.payload, str):
            raise ValueError("analyze jobs take text")
        if self.kind is JobKind.TRANSCRIBE and not isinstance(self.payload, Waveform):
            raise ValueError("transcribe jobs take a waveform")
        return self

    @classmethod
    def analyze(cls, text: str) -> AnalysisJob:
        return cls(kind=JobKind.ANALYZE, payload=text)

    @classmethod
    def transcribe(cls, waveform: Waveform) -> AnalysisJob:
        return cls(kind=JobKind.TRANSCRIBE, payload=waveform)


class JobResponse(BaseModel):
    """Worker → control message."""

    model_config = ConfigDict(frozen=True)

    status: JobStatus
    kind: JobKind
    job_id: str
    result: AnalysisResult | str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is JobStatus.COMPLETE

    @classmethod
    def complete(cls, job: AnalysisJob, result: AnalysisResult | str) -> JobResponse:
        return cls(status=JobStatus.COMPLETE, kind=job.kind, job_id=job.id, result=result)

    @classmethod
    def failed(cls, job: AnalysisJob, error: str) -> JobResponse:
        return cls(status=JobStatus.ERROR, kind=job.kind, job_id=job.id, error=error)


class Speech(BaseModel):
    """An analyzed speech in the session."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    title: str = DEFAULT_TITLE
    date: dt.date
    score: float = Field(ge=-1.0, le=1.0)
    details: AnalysisResult | None = None


class TimePoint(NamedTuple):
    date: dt.date
    score: float
