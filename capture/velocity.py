"""Dead-reckoning velocity from a compass heading and optical-flow displacement."""

from __future__ import annotations

import math
import time
from typing import Callable, Optional, Tuple

from contracts import Velocity2D

from .sensor_device import SensorDevice, close_source


def rotate_to_global(local: Velocity2D, heading_rad: float) -> Velocity2D:
    """Rotate a body-frame velocity into the global frame."""
    cos_h = math.cos(heading_rad)
    sin_h = math.sin(heading_rad)
    return Velocity2D(
        vx=local.vx * cos_h + local.vy * sin_h,
        vy=-local.vx * sin_h + local.vy * cos_h,
    )


class OrientedVelocity(SensorDevice[Velocity2D]):
    """Global-frame velocity from heading (radians) and displacement (mm).

    The displacement source reports the distance travelled in the body frame
    since its previous read; the elapsed time is measured between successful
    reads of this sensor.
    """

    def __init__(
        self,
        heading: Callable[[], Optional[float]],
        displacement_mm: Callable[[], Optional[Tuple[float, float]]],
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._heading = heading
        self._displacement_mm = displacement_mm
        self._clock = clock
        self._last_time = clock()

    def read(self) -> Optional[Velocity2D]:
        heading = self._heading()
        displacement = self._displacement_mm()
        if heading is None or displacement is None:
            return None

        now = self._clock()
        elapsed = now - self._last_time
        self._last_time = now
        if elapsed <= 0:
            return None

        dx_mm, dy_mm = displacement
        local = Velocity2D(dx_mm * 0.001 / elapsed, dy_mm * 0.001 / elapsed)
        return rotate_to_global(local, heading)

    def close(self) -> None:
        try:
            close_source(self._heading)
        finally:
            close_source(self._displacement_mm)


__all__ = ["OrientedVelocity", "rotate_to_global"]
