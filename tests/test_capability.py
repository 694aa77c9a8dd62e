"""Tests for rostrum.capability module."""

from __future__ import annotations

import threading
import time

import pytest

from rostrum.capability import LazyCapability
from rostrum.exceptions import CapabilityInitError


class TestLazyCapability:
    def test_not_loaded_until_first_get(self) -> None:
        cap = LazyCapability(loader=lambda: "model")
        assert not cap.is_loaded
        assert cap.get() == "model"
        assert cap.is_loaded

    def test_reuses_instance(self) -> None:
        cap = LazyCapability(loader=object)
        assert cap.get() is cap.get()
        assert cap.load_count == 1

    def test_concurrent_first_calls_load_once(self) -> None:
        calls = []

        def slow_loader() -> str:
            calls.append(threading.get_ident())
            time.sleep(0.05)
            return "model"

        cap = LazyCapability(loader=slow_loader)
        barrier = threading.Barrier(8)
        results = []

        def worker() -> None:
            barrier.wait()
            results.append(cap.get())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(calls) == 1
        assert results == ["model"] * 8

    def test_failed_load_can_be_retried(self) -> None:
        attempts = []

        def flaky_loader() -> str:
            attempts.append(1)
            if len(attempts) == 1:
                raise ConnectionError("hub unreachable")
            return "model"

        cap = LazyCapability(loader=flaky_loader)

        with pytest.raises(CapabilityInitError, match="hub unreachable"):
            cap.get()
        assert not cap.is_loaded

        assert cap.get() == "model"
        assert len(attempts) == 2

    def test_loader_returning_none_is_error(self) -> None:
        cap = LazyCapability(loader=lambda: None)
        with pytest.raises(CapabilityInitError):
            cap.get()

    def test_base_class_requires_loader(self) -> None:
        with pytest.raises(CapabilityInitError):
            LazyCapability().get()

    def test_init_error_from_loader_passes_through(self) -> None:
        err = CapabilityInitError("thing", "missing package")

        def loader() -> None:
            raise err

        with pytest.raises(CapabilityInitError) as exc_info:
            LazyCapability(loader=loader).get()
        assert exc_info.value is err
