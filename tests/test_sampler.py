"""Tests for BackgroundSampler threading behaviour.

Validates last-write-wins polling, tolerance of failing sources and clean
shutdown of the worker thread.
"""

from __future__ import annotations

import itertools
import threading
import time

import pytest

from capture.sampler import BackgroundSampler
from exceptions import WorkerShutdownError


def wait_until(predicate, timeout_s: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout_s
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestPolling:
    """Test the non-blocking poll."""

    def test_poll_before_any_sample_returns_none(self):
        with BackgroundSampler(1, lambda: None) as sampler:
            assert sampler.poll() is None

    def test_last_write_wins(self):
        """Polling after several samples returns the last non-absent one."""
        source = itertools.chain([1, 2, 3], itertools.repeat(None))

        with BackgroundSampler(200, source) as sampler:
            time.sleep(0.2)
            assert sampler.poll() == 3

    def test_absent_samples_keep_previous_value(self):
        """Ticks producing None do not overwrite the latest value."""
        source = itertools.chain([7], itertools.repeat(None))

        with BackgroundSampler(200, source) as sampler:
            assert wait_until(lambda: sampler.poll() == 7)
            time.sleep(0.05)
            assert sampler.poll() == 7
            assert sampler.latest == 7

    def test_callable_source(self):
        counter = itertools.count(1)

        with BackgroundSampler(100, lambda: next(counter)) as sampler:
            assert wait_until(lambda: (sampler.poll() or 0) >= 3)


class TestFailures:
    """Test tolerance of failing sources."""

    def test_failing_source_does_not_kill_worker(self):
        """A raising source yields absent values and sampling continues."""
        calls = itertools.count()

        def flaky():
            n = next(calls)
            if n % 2 == 0:
                raise IOError("bus error")
            return n

        with BackgroundSampler(100, flaky) as sampler:
            assert wait_until(lambda: sampler.failures >= 3)
            assert sampler.is_running()
            assert wait_until(lambda: sampler.poll() is not None)
            assert sampler.poll() % 2 == 1

    def test_exhausted_iterator_stops_sampling(self):
        """An exhausted source ends the worker; the last value stays available."""
        sampler = BackgroundSampler(200, iter([1, 2]))
        try:
            assert wait_until(lambda: not sampler.is_running())
            assert sampler.poll() == 2
        finally:
            sampler.close()


class TestLifecycle:
    """Test starting and stopping the worker."""

    def test_invalid_rate_rejected(self):
        with pytest.raises(ValueError):
            BackgroundSampler(0, lambda: 1)

    def test_invalid_source_rejected(self):
        with pytest.raises(TypeError):
            BackgroundSampler(1, 42)

    def test_close_joins_worker(self):
        sampler = BackgroundSampler(50, lambda: 1, name="test-sampler")
        assert sampler.is_running()

        sampler.close()

        assert not sampler.is_running()
        # Closing twice is harmless
        sampler.close()

    def test_worker_is_daemon_and_named(self):
        with BackgroundSampler(10, lambda: 1, name="imu-sampler"):
            threads = [t for t in threading.enumerate() if t.name == "imu-sampler"]
            assert len(threads) == 1
            assert threads[0].daemon

    def test_autostart_disabled(self):
        sampler = BackgroundSampler(10, lambda: 1, autostart=False)
        assert not sampler.is_running()
        sampler.close()

    def test_stuck_source_raises_on_close(self):
        """A source blocked past the join timeout is reported as fatal."""
        release = threading.Event()
        entered = threading.Event()

        def blocking():
            entered.set()
            release.wait(5.0)
            return 1

        sampler = BackgroundSampler(100, blocking, name="stuck", join_timeout_s=0.1)
        try:
            assert entered.wait(1.0)
            with pytest.raises(WorkerShutdownError) as excinfo:
                sampler.close()
            assert excinfo.value.worker_name == "stuck"
        finally:
            release.set()
