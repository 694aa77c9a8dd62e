"""
rostrum.capability - Lazily loaded model capabilities.

A capability wraps an expensive runtime (a classification pipeline, a
speech recognition model) behind a load-once, call-many interface. The
first call pays the load cost; later calls reuse the loaded instance.
Loading is serialized with a lock so concurrent first calls load once.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Any

from rostrum.exceptions import CapabilityInitError
from rostrum.logging import get_logger

logger = get_logger(__name__)


class LazyCapability:
    """Load-once wrapper around a model runtime.

    Subclasses implement ``_load()``; callers may instead inject a
    ``loader`` callable, which takes precedence.
    """

    name = "capability"

    def __init__(self, loader: Callable[[], Any] | None = None) -> None:
        self._loader = loader
        self._instance: Any = None
        self._lock = threading.Lock()
        self._load_count = 0

    @property
    def is_loaded(self) -> bool:
        return self._instance is not None

    @property
    def load_count(self) -> int:
        """Number of successful loads (0 or 1 in normal operation)."""
        return self._load_count

    def _load(self) -> Any:
        raise NotImplementedError

    def get(self) -> Any:
        """Return the loaded runtime, loading it on first use.

        Raises:
            CapabilityInitError: If loading fails; the capability stays
                unloaded and the next call tries again
        """
        instance = self._instance
        if instance is not None:
            return instance

        with self._lock:
            if self._instance is None:
                logger.info("Loading %s...", self.name)
                started = time.monotonic()
                try:
                    loaded = self._loader() if self._loader is not None else self._load()
                except CapabilityInitError:
                    raise
                except Exception as e:
                    logger.error("Failed to load %s: %s", self.name, e)
                    raise CapabilityInitError(self.name, f"failed to load: {e}") from e
                if loaded is None:
                    raise CapabilityInitError(self.name, "loader returned nothing")
                self._instance = loaded
                self._load_count += 1
                logger.info("%s loaded in %.1fs.", self.name, time.monotonic() - started)
            return self._instance
