"""Simulated sensor backends for pipeline testing."""

from __future__ import annotations

import struct
import time
from typing import Callable, List, Optional, Tuple

import numpy as np

from contracts import Cartesian2D

from track.sim import figure_eight

from .sensor_device import CorrectableReceiver, SensorDevice

# Leading byte of an RTCM 3 frame
RTCM_PREAMBLE = b"\xd3"


def simulated_heading(t_s: float) -> float:
    """Heading (radians) of the simulated rover: a slow constant turn."""
    return 0.1 * t_s


class SimulatedReceiver(CorrectableReceiver[Cartesian2D]):
    """Receiver whose fixes tighten once corrections have been applied."""

    def __init__(
        self,
        raw_noise: float = 2.0,
        corrected_noise: float = 0.05,
        seed: int = 7,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._raw_noise = raw_noise
        self._corrected_noise = corrected_noise
        self._rng = np.random.default_rng(seed)
        self._clock = clock
        self._start = clock()
        self.corrections: List[bytes] = []
        self.closed = False

    def read(self) -> Optional[Cartesian2D]:
        truth = figure_eight(self._clock() - self._start).position
        noise = self._corrected_noise if self.corrections else self._raw_noise
        dx, dy = self._rng.uniform(-noise, noise, size=2)
        return Cartesian2D(truth.x + dx, truth.y + dy)

    def apply_correction(self, payload: bytes) -> None:
        self.corrections.append(bytes(payload))

    def close(self) -> None:
        self.closed = True


def simulated_corrections(fix: Cartesian2D) -> List[bytes]:
    """Stand-in for a correction caster: one frame echoing the reported fix."""
    body = struct.pack("<dd", fix.x, fix.y)
    return [RTCM_PREAMBLE + struct.pack(">H", len(body)) + body]


class SimulatedCompass(SensorDevice[float]):
    """Heading along the figure-eight run, with Gaussian noise."""

    def __init__(
        self,
        noise_rad: float = 0.01,
        seed: int = 11,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._noise_rad = noise_rad
        self._rng = np.random.default_rng(seed)
        self._clock = clock
        self._start = clock()

    def read(self) -> Optional[float]:
        heading = simulated_heading(self._clock() - self._start)
        return heading + float(self._rng.normal(0.0, self._noise_rad)) if self._noise_rad else heading


class SimulatedFlowSensor(SensorDevice[Tuple[float, float]]):
    """Body-frame displacement (mm) since the previous read.

    The ground-truth displacement is rotated into the body frame of
    :func:`simulated_heading`, the inverse of
    :func:`capture.velocity.rotate_to_global`.
    """

    def __init__(
        self,
        noise_mm: float = 0.5,
        seed: int = 13,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._noise_mm = noise_mm
        self._rng = np.random.default_rng(seed)
        self._clock = clock
        self._start = clock()
        self._last_position = figure_eight(0.0).position

    def read(self) -> Optional[Tuple[float, float]]:
        elapsed = self._clock() - self._start
        position = figure_eight(elapsed).position
        gx = (position.x - self._last_position.x) * 1000.0
        gy = (position.y - self._last_position.y) * 1000.0
        self._last_position = position

        heading = simulated_heading(elapsed)
        cos_h, sin_h = np.cos(heading), np.sin(heading)
        nx, ny = self._rng.normal(0.0, self._noise_mm, size=2) if self._noise_mm else (0.0, 0.0)
        return float(gx * cos_h - gy * sin_h + nx), float(gx * sin_h + gy * cos_h + ny)


__all__ = [
    "SimulatedCompass",
    "SimulatedFlowSensor",
    "SimulatedReceiver",
    "simulated_corrections",
    "simulated_heading",
]
