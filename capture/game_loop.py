"""Fixed-rate loop for control and sampling threads."""

from __future__ import annotations

import threading
import time
from typing import Callable, Iterator, Optional

from log_config.logger import get_logger

logger = get_logger(__name__)


class FixedRateLoop:
    """Iterator that yields once per frame at a fixed rate.

    Each ``next()`` waits until the current frame's period has elapsed. A
    frame that overran its period is not skipped: a warning with the lag is
    logged and the next frame starts immediately.

    If a ``stop_event`` is given, waiting is interruptible and iteration
    ends once the event is set.
    """

    def __init__(
        self,
        frame_duration_s: float,
        stop_event: Optional[threading.Event] = None,
        clock: Callable[[], float] = time.monotonic,
        name: str = "loop",
    ) -> None:
        if frame_duration_s <= 0:
            raise ValueError(f"frame_duration_s must be positive, got {frame_duration_s}")
        self.frame_duration_s = frame_duration_s
        self.name = name
        self._stop_event = stop_event
        self._clock = clock
        self._frame_start = clock()
        self.lagged_frames = 0

    @classmethod
    def from_fps(
        cls,
        fps: float,
        stop_event: Optional[threading.Event] = None,
        name: str = "loop",
    ) -> "FixedRateLoop":
        if fps <= 0:
            raise ValueError(f"fps must be positive, got {fps}")
        return cls(1.0 / fps, stop_event=stop_event, name=name)

    def __iter__(self) -> Iterator[None]:
        return self

    def __next__(self) -> None:
        if self._stopped():
            raise StopIteration

        end_time = self._frame_start + self.frame_duration_s
        now = self._clock()
        if now <= end_time:
            self._wait(end_time - now)
            if self._stopped():
                raise StopIteration
        else:
            self.lagged_frames += 1
            logger.warning(f"The {self.name} is lagging behind by {(now - end_time) * 1000.0:.1f}ms")

        self._frame_start = self._clock()
        return None

    def _stopped(self) -> bool:
        return self._stop_event is not None and self._stop_event.is_set()

    def _wait(self, seconds: float) -> None:
        if self._stop_event is not None:
            self._stop_event.wait(seconds)
        else:
            time.sleep(seconds)


__all__ = ["FixedRateLoop"]
