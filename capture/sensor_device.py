"""Sensor abstractions for pull-based capture backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Generic, Optional, Tuple, TypeVar

T = TypeVar("T")
U = TypeVar("U")


class SensorDevice(ABC, Generic[T]):
    """A device that is pulled for its latest reading.

    ``read()`` returns ``None`` when no reading is available; sensors that
    fail silently are expected to do exactly that.
    """

    @abstractmethod
    def read(self) -> Optional[T]:
        """Return the current reading, or None if there is none."""

    def close(self) -> None:
        """Release the device."""
        return None

    def __call__(self) -> Optional[T]:
        return self.read()

    def __enter__(self) -> "SensorDevice[T]":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class CorrectableReceiver(SensorDevice[T]):
    """A positioning receiver that accepts differential-correction payloads."""

    @abstractmethod
    def apply_correction(self, payload: bytes) -> None:
        """Forward an opaque correction payload to the receiver."""


def close_source(source: Callable[..., object]) -> None:
    """Close a wrapped source if it is a device; plain callables are left alone."""
    if isinstance(source, SensorDevice):
        source.close()


class CombinedSensor(SensorDevice[Tuple[T, U]]):
    """Reads two sources and yields a pair only when both produced a value."""

    def __init__(self, first: Callable[[], Optional[T]], second: Callable[[], Optional[U]]) -> None:
        self._first = first
        self._second = second

    def read(self) -> Optional[Tuple[T, U]]:
        first = self._first()
        if first is None:
            return None
        second = self._second()
        if second is None:
            return None
        return first, second

    def close(self) -> None:
        try:
            close_source(self._first)
        finally:
            close_source(self._second)


class MappedSensor(SensorDevice[U]):
    """Applies a conversion to every reading of an inner source."""

    def __init__(self, source: Callable[[], Optional[T]], convert: Callable[[T], U]) -> None:
        self._source = source
        self._convert = convert

    def read(self) -> Optional[U]:
        reading = self._source()
        if reading is None:
            return None
        return self._convert(reading)

    def close(self) -> None:
        close_source(self._source)


__all__ = ["CombinedSensor", "CorrectableReceiver", "MappedSensor", "SensorDevice", "close_source"]
