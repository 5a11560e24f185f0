"""Core data contracts for state estimation and sensor conversion."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True, eq=False)
class GaussianState:
    """State estimate as mean vector and covariance matrix.

    Instances are treated as immutable values: every predict/update/smooth
    step produces a new one.
    """

    mean: np.ndarray
    covariance: np.ndarray

    def __post_init__(self) -> None:
        mean = np.array(self.mean, dtype=float).reshape(-1)
        covariance = np.array(self.covariance, dtype=float)
        if covariance.shape != (mean.size, mean.size):
            raise ValueError(
                f"Covariance shape {covariance.shape} does not match state dimension {mean.size}"
            )
        mean.setflags(write=False)
        covariance.setflags(write=False)
        object.__setattr__(self, "mean", mean)
        object.__setattr__(self, "covariance", covariance)

    @property
    def dim(self) -> int:
        return int(self.mean.size)

    @classmethod
    def from_diagonal(cls, mean, diagonal) -> "GaussianState":
        return cls(np.asarray(mean, dtype=float), np.diag(np.asarray(diagonal, dtype=float)))


@dataclass(eq=False)
class Waypoint:
    """One entry of a track.

    ``measurement`` is the raw observation (zeros for the seed waypoint),
    ``prediction`` the pre-update state and ``estimate`` the post-update
    state, replaced by the smoothed state once the track is smoothed.
    """

    timestamp: float
    measurement: np.ndarray
    prediction: GaussianState
    estimate: GaussianState


@dataclass(frozen=True)
class Cartesian2D:
    x: float
    y: float

    def to_vector(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)


@dataclass(frozen=True)
class Velocity2D:
    vx: float
    vy: float

    def to_vector(self) -> np.ndarray:
        return np.array([self.vx, self.vy], dtype=float)


@dataclass(frozen=True)
class KinematicState:
    position: Cartesian2D
    velocity: Velocity2D

    def to_vector(self) -> np.ndarray:
        """Return ``(x, y, vx, vy)``."""
        return np.concatenate([self.position.to_vector(), self.velocity.to_vector()])

    @classmethod
    def from_pair(cls, pair: Tuple[Cartesian2D, Velocity2D]) -> "KinematicState":
        position, velocity = pair
        return cls(position=position, velocity=velocity)
