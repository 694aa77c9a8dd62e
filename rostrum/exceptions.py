"""
rostrum.exceptions - Custom exception classes.

All Rostrum-specific exceptions inherit from RostrumError.
"""


class RostrumError(Exception):
    """Base exception for all Rostrum errors."""

    pass


class ConfigError(RostrumError):
    """Configuration loading or validation error."""

    pass


class InputValidationError(RostrumError):
    """Input rejected before any job is dispatched (e.g. blank text)."""

    pass


class DecodeError(RostrumError):
    """Audio bytes could not be decoded to PCM."""

    pass


class CapabilityError(RostrumError):
    """Classifier or transcriber capability failure."""

    def __init__(self, capability: str, message: str):
        self.capability = capability
        self.message = message
        super().__init__(f"{capability}: {message}")


class CapabilityInitError(CapabilityError):
    """Capability failed to load."""

    pass


class CapabilityExecutionError(CapabilityError):
    """Capability loaded but the inference call failed."""

    pass


class AggregationError(RostrumError):
    """Per-sentence results cannot be reduced to a document score."""

    pass


class DispatchError(RostrumError):
    """Job could not be handed to the worker."""

    pass


class JobInFlightError(DispatchError):
    """A job of the same kind is still running."""

    def __init__(self, kind: str, job_id: str):
        self.kind = kind
        self.job_id = job_id
        super().__init__(f"A '{kind}' job is already in flight ({job_id})")


class MicrophonePermissionError(RostrumError):
    """Microphone could not be opened (permission denied or no device)."""

    pass


class RecordingError(RostrumError):
    """Recording produced no usable audio."""

    pass


class DependencyError(RostrumError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")
