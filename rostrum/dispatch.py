"""
rostrum.dispatch - Control/worker job dispatcher.

One worker thread executes jobs serially from a FIFO queue. Responses
travel back on a second queue and are only delivered when the control
context calls ``poll()``, so listeners always run on the control thread.

Responses are matched to jobs by id. A kind with a job in flight rejects
new submissions until its response has been delivered.
"""

from __future__ import annotations

import queue
import threading
import time
from collections.abc import Callable

from rostrum.exceptions import DispatchError, JobInFlightError
from rostrum.logging import get_logger
from rostrum.models import AnalysisJob, JobKind, JobResponse

logger = get_logger(__name__)

JobHandler = Callable[[AnalysisJob], JobResponse]
ResponseListener = Callable[[JobResponse], None]

_STOP = object()


class JobDispatcher:
    """Fire-and-forget job submission with id-correlated responses."""

    def __init__(self, handler: JobHandler, name: str = "rostrum-worker") -> None:
        self._handler = handler
        self._name = name
        self._jobs: queue.Queue = queue.Queue()
        self._responses: queue.Queue[JobResponse] = queue.Queue()
        self._in_flight: dict[str, AnalysisJob] = {}
        self._busy: dict[JobKind, str] = {}
        self._listeners: dict[JobKind, list[ResponseListener]] = {kind: [] for kind in JobKind}
        self._thread: threading.Thread | None = None

    def __enter__(self) -> JobDispatcher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the worker thread (idempotent)."""
        if self.is_running:
            return
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()

    def shutdown(self, timeout: float | None = None) -> None:
        """Stop the worker after the jobs already queued have run."""
        if self._thread is None:
            return
        self._jobs.put(_STOP)
        self._thread.join(timeout)
        self._thread = None

    def on_response(self, kind: JobKind, listener: ResponseListener) -> None:
        """Register a listener for responses of one kind."""
        self._listeners[kind].append(listener)

    def is_busy(self, kind: JobKind) -> bool:
        return kind in self._busy

    def in_flight(self) -> list[AnalysisJob]:
        return list(self._in_flight.values())

    def submit(self, job: AnalysisJob) -> str:
        """Queue a job for the worker and return its id immediately.

        Raises:
            JobInFlightError: If a job of the same kind is still in flight
            DispatchError: If the worker is not running
        """
        if not self.is_running:
            raise DispatchError("Worker is not running")

        pending = self._busy.get(job.kind)
        if pending is not None:
            raise JobInFlightError(job.kind.value, pending)

        self._in_flight[job.id] = job
        self._busy[job.kind] = job.id
        self._jobs.put(job)
        logger.debug("Submitted %s job %s", job.kind.value, job.id)
        return job.id

    def poll(self, timeout: float | None = 0.0) -> int:
        """Deliver completed responses to listeners.

        Args:
            timeout: Seconds to wait for the first response; 0 returns at
                once, None waits indefinitely

        Returns:
            Number of responses delivered
        """
        delivered = 0
        block = timeout is None or timeout > 0
        while True:
            try:
                response = self._responses.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                break
            block = False
            if self._deliver(response):
                delivered += 1
        return delivered

    def wait(self, kind: JobKind, timeout: float | None = None, interval: float = 0.05) -> bool:
        """Pump responses until the kind is idle.

        Returns:
            True if the kind became idle, False on timeout
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        while self.is_busy(kind):
            remaining = interval
            if deadline is not None:
                remaining = min(interval, deadline - time.monotonic())
                if remaining <= 0:
                    return False
            self.poll(timeout=remaining)
        return True

    def _deliver(self, response: JobResponse) -> bool:
        job = self._in_flight.pop(response.job_id, None)
        if job is None:
            logger.warning(
                "Dropping %s response for unknown job %s", response.kind.value, response.job_id
            )
            return False

        if self._busy.get(job.kind) == job.id:
            del self._busy[job.kind]

        logger.debug("Completed %s job %s: %s", job.kind.value, job.id, response.status.value)
        for listener in list(self._listeners[job.kind]):
            listener(response)
        return True

    def _run(self) -> None:
        while True:
            job = self._jobs.get()
            if job is _STOP:
                break
            try:
                response = self._handler(job)
            except Exception as e:
                logger.exception("Job handler raised for %s job %s", job.kind.value, job.id)
                response = JobResponse.failed(job, str(e) or type(e).__name__)
            self._responses.put(response)
