"""Background sampling of pull-based sensors at a fixed rate."""

from __future__ import annotations

import queue
import threading
import time
from typing import Callable, Generic, Iterator, Optional, TypeVar, Union

from exceptions import WorkerShutdownError
from log_config.logger import get_logger

from .game_loop import FixedRateLoop

logger = get_logger(__name__)

T = TypeVar("T")

Source = Union[Iterator[Optional[T]], Callable[[], Optional[T]]]


class BackgroundSampler(Generic[T]):
    """Pulls an inner source on a dedicated thread and exposes the latest value.

    The worker thread runs a :class:`FixedRateLoop` at ``sample_rate`` Hz,
    pulls the source once per tick and pushes the (possibly absent) result
    into a channel. A source that raises yields an absent result for that
    tick; an exhausted iterator ends sampling.

    :meth:`poll` never blocks: it drains the channel, keeps the last
    non-absent value and returns it, or the previous value when nothing new
    arrived, or ``None`` when no value ever arrived.

    Use as a context manager (or call :meth:`close`) so the worker is always
    stopped and joined. A worker that cannot be joined raises
    :class:`WorkerShutdownError`.

    Example:
        with BackgroundSampler(10, gps_fixes) as sampler:
            for _ in FixedRateLoop.from_fps(20):
                fix = sampler.poll()
    """

    def __init__(
        self,
        sample_rate: float,
        source: Source,
        name: str = "sampler",
        join_timeout_s: float = 2.0,
        autostart: bool = True,
    ) -> None:
        if sample_rate <= 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate}")

        self._sample_rate = sample_rate
        self._pull = self._as_pull(source)
        self._name = name
        self._join_timeout_s = join_timeout_s

        self._stop_event = threading.Event()
        self._channel: queue.Queue[Optional[T]] = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._state: Optional[T] = None

        # Failure tracking (worker thread only)
        self._failures = 0
        self._last_failure_log_time = 0.0

        if autostart:
            self.start()

    @staticmethod
    def _as_pull(source: Source) -> Callable[[], Optional[T]]:
        if hasattr(source, "__next__"):
            return lambda: next(source)  # type: ignore[arg-type]
        if callable(source):
            return source
        raise TypeError(f"source must be an iterator or a callable, got {type(source).__name__}")

    @property
    def name(self) -> str:
        return self._name

    @property
    def latest(self) -> Optional[T]:
        """Value returned by the last :meth:`poll`."""
        return self._state

    @property
    def failures(self) -> int:
        return self._failures

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the sampling thread."""
        if self._thread is not None:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._sample_loop, name=self._name, daemon=True)
        self._thread.start()
        logger.debug(f"Sampler '{self._name}' started at {self._sample_rate}Hz")

    def poll(self) -> Optional[T]:
        """Return the freshest sample without blocking."""
        while True:
            try:
                sample = self._channel.get_nowait()
            except queue.Empty:
                break
            if sample is not None:
                self._state = sample
        return self._state

    def close(self) -> None:
        """Signal the sampling thread to stop and join it.

        Raises:
            WorkerShutdownError: If the thread is still alive after the join timeout
        """
        thread = self._thread
        if thread is None:
            return

        self._stop_event.set()
        thread.join(timeout=self._join_timeout_s)
        if thread.is_alive():
            logger.critical(
                f"Sampler '{self._name}' did not stop within {self._join_timeout_s}s; "
                "the inner source is probably stuck in a blocking call"
            )
            raise WorkerShutdownError(
                f"Sampler '{self._name}': could not terminate the worker thread",
                worker_name=self._name,
            )

        self._thread = None
        logger.debug(f"Sampler '{self._name}' stopped")

    def __enter__(self) -> "BackgroundSampler[T]":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _sample_loop(self) -> None:
        loop = FixedRateLoop.from_fps(self._sample_rate, stop_event=self._stop_event, name=f"sampler '{self._name}'")
        for _ in loop:
            try:
                sample = self._pull()
            except StopIteration:
                logger.info(f"Sampler '{self._name}': source exhausted, sampling stopped")
                return
            except Exception as e:
                sample = None
                self._record_failure(e)

            self._channel.put(sample)

    def _record_failure(self, error: Exception) -> None:
        self._failures += 1

        # Log at most once per 5 seconds
        now = time.monotonic()
        if now - self._last_failure_log_time > 5.0:
            self._last_failure_log_time = now
            logger.warning(
                f"Sampler '{self._name}': source read failed ({self._failures} failures so far): "
                f"{error.__class__.__name__}: {error}"
            )


__all__ = ["BackgroundSampler"]
