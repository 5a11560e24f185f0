"""Linear motion and measurement models for the Kalman filter."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np


class MotionModel(ABC):
    """Maps an elapsed duration (seconds) to transition and process-noise matrices."""

    @property
    @abstractmethod
    def state_dim(self) -> int:
        """Dimension of the state vector."""

    @abstractmethod
    def transition_matrix(self, dt: float) -> np.ndarray:
        """Return the ``(SD, SD)`` transition matrix for ``dt`` seconds."""

    @abstractmethod
    def transition_error(self, dt: float) -> np.ndarray:
        """Return the ``(SD, SD)`` process-noise covariance for ``dt`` seconds."""


class MeasurementModel(ABC):
    """Projects the state into measurement space."""

    @property
    @abstractmethod
    def measurement_dim(self) -> int:
        """Dimension of the measurement vector."""

    @abstractmethod
    def measurement_matrix(self) -> np.ndarray:
        """Return the ``(MD, SD)`` measurement matrix."""

    @abstractmethod
    def measurement_error(self) -> np.ndarray:
        """Return the ``(MD, MD)`` measurement-noise covariance."""


class ConstantVelocity(MotionModel):
    """Constant-velocity model over the state ``(x, y, vx, vy)``.

    ``drift`` scales the process noise (piecewise white acceleration)::

        F(dt) = | 1 0 dt 0  |      Q(dt) = q * | dt^4/4  0       dt^3/2  0      |
                | 0 1 0  dt |                  | 0       dt^4/4  0       dt^3/2 |
                | 0 0 1  0  |                  | dt^3/2  0       dt^2    0      |
                | 0 0 0  1  |                  | 0       dt^3/2  0       dt^2   |
    """

    def __init__(self, drift: float) -> None:
        self.drift = float(drift)

    @property
    def state_dim(self) -> int:
        return 4

    def transition_matrix(self, dt: float) -> np.ndarray:
        dt = max(0.0, float(dt))
        return np.array(
            [
                [1.0, 0.0, dt, 0.0],
                [0.0, 1.0, 0.0, dt],
                [0.0, 0.0, 1.0, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )

    def transition_error(self, dt: float) -> np.ndarray:
        dt = max(0.0, float(dt))
        pow4 = dt**4 / 4.0
        pow3 = dt**3 / 2.0
        pow2 = dt**2
        return self.drift * np.array(
            [
                [pow4, 0.0, pow3, 0.0],
                [0.0, pow4, 0.0, pow3],
                [pow3, 0.0, pow2, 0.0],
                [0.0, pow3, 0.0, pow2],
            ]
        )

    def __repr__(self) -> str:
        return f"ConstantVelocity(drift={self.drift})"


class PositionMeasurementModel(MeasurementModel):
    """Observes only the position components ``(x, y)`` of the state."""

    def __init__(self, error_x: float, error_y: float, state_dim: int = 4) -> None:
        if state_dim < 2:
            raise ValueError(f"state_dim must be at least 2, got {state_dim}")
        self.error_x = float(error_x)
        self.error_y = float(error_y)
        self._state_dim = state_dim

    @property
    def measurement_dim(self) -> int:
        return 2

    def measurement_matrix(self) -> np.ndarray:
        return np.eye(2, self._state_dim)

    def measurement_error(self) -> np.ndarray:
        return np.diag([self.error_x, self.error_y])

    def __repr__(self) -> str:
        return f"PositionMeasurementModel(error_x={self.error_x}, error_y={self.error_y})"


class MeasureAllModel(MeasurementModel):
    """Observes every state component, with independent per-component noise."""

    def __init__(self, diagonal: Sequence[float]) -> None:
        diagonal = np.asarray(diagonal, dtype=float).reshape(-1)
        if diagonal.size == 0:
            raise ValueError("diagonal must not be empty")
        self._error = np.diag(diagonal)

    @property
    def measurement_dim(self) -> int:
        return self._error.shape[0]

    def measurement_matrix(self) -> np.ndarray:
        return np.eye(self.measurement_dim)

    def measurement_error(self) -> np.ndarray:
        return self._error.copy()

    def __repr__(self) -> str:
        return f"MeasureAllModel(diagonal={np.diag(self._error).tolist()})"


__all__ = [
    "MotionModel",
    "MeasurementModel",
    "ConstantVelocity",
    "PositionMeasurementModel",
    "MeasureAllModel",
]
