"""Positioning receiver fed with differential-correction data fetched off-thread."""

from __future__ import annotations

import time
from typing import Callable, Optional, Sequence, TypeVar

from exceptions import RequesterClosedError
from log_config.logger import get_logger

from .requester import AsyncRequester
from .sensor_device import CorrectableReceiver, SensorDevice

logger = get_logger(__name__)

R = TypeVar("R")


class CorrectedReceiver(SensorDevice[R]):
    """Wraps a receiver and keeps it supplied with correction payloads.

    ``fetch_correction(reading)`` runs on an :class:`AsyncRequester` and
    returns the payloads to forward (for instance the bytes a correction
    caster sends for the reported position). On every read that produced a
    reading, the payloads completed so far are applied to the receiver and a
    new request is submitted once ``correction_interval_s`` has passed since
    the previous one. The first reading always triggers a request.

    The correction protocol is opaque here: payloads are passed through
    unchanged.
    """

    def __init__(
        self,
        receiver: CorrectableReceiver[R],
        fetch_correction: Callable[[R], Sequence[bytes]],
        correction_interval_s: float = 2.0,
        clock: Callable[[], float] = time.monotonic,
        join_timeout_s: float = 2.0,
    ) -> None:
        self._receiver = receiver
        self._interval_s = correction_interval_s
        self._clock = clock
        self._last_request_time: Optional[float] = None
        self._requester: AsyncRequester[R, Sequence[bytes]] = AsyncRequester(
            fetch_correction,
            name="correction-requester",
            join_timeout_s=join_timeout_s,
        )
        self.applied_payloads = 0

    def read(self) -> Optional[R]:
        reading = self._receiver.read()
        if reading is None:
            return None

        self._apply_available_corrections()
        self._request_correction(reading)
        return reading

    def close(self) -> None:
        try:
            self._requester.close()
        finally:
            self._receiver.close()

    def _apply_available_corrections(self) -> None:
        for payloads in self._requester.drain_responses():
            if payloads is None:
                continue
            for payload in payloads:
                try:
                    self._receiver.apply_correction(payload)
                    self.applied_payloads += 1
                except Exception as e:
                    logger.error(f"Failed to apply correction payload ({len(payload)} bytes): {e}")

    def _request_correction(self, reading: R) -> None:
        now = self._clock()
        if self._last_request_time is not None and now - self._last_request_time < self._interval_s:
            return

        try:
            self._requester.submit(reading)
            self._last_request_time = now
        except RequesterClosedError as e:
            logger.error(f"Cannot request correction data: {e}")


__all__ = ["CorrectedReceiver"]
