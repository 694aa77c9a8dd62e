"""
rostrum.worker - Job handler for the worker context.

Runs analyze and transcribe jobs against the capabilities and turns
every outcome, success or failure, into a JobResponse. Nothing raised
here reaches the control context as an exception.
"""

from __future__ import annotations

from rostrum.analyze.classifier import SentimentClassifier
from rostrum.analyze.pipeline import analyze_text
from rostrum.analyze.segmenter import MAX_UNITS
from rostrum.exceptions import RostrumError
from rostrum.logging import get_logger
from rostrum.models import AnalysisJob, JobKind, JobResponse
from rostrum.transcribe.engine import Transcriber

logger = get_logger(__name__)


class AnalysisWorker:
    """Callable job handler owning the classifier and transcriber."""

    def __init__(
        self,
        classifier: SentimentClassifier,
        transcriber: Transcriber,
        max_units: int = MAX_UNITS,
    ) -> None:
        self.classifier = classifier
        self.transcriber = transcriber
        self.max_units = max_units

    def __call__(self, job: AnalysisJob) -> JobResponse:
        logger.debug("Worker running %s job %s", job.kind.value, job.id)
        try:
            if job.kind is JobKind.ANALYZE:
                result = analyze_text(job.payload, self.classifier, self.max_units)
            else:
                result = self.transcriber.transcribe(job.payload)
        except RostrumError as e:
            logger.warning("%s job %s failed: %s", job.kind.value, job.id, e)
            return JobResponse.failed(job, str(e))
        except Exception as e:
            logger.exception("%s job %s crashed", job.kind.value, job.id)
            return JobResponse.failed(job, str(e) or type(e).__name__)

        return JobResponse.complete(job, result)
