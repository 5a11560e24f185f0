"""Shared data contracts for state estimation."""

from .types import (
    Cartesian2D,
    GaussianState,
    KinematicState,
    Velocity2D,
    Waypoint,
)

__all__ = [
    "Cartesian2D",
    "GaussianState",
    "KinematicState",
    "Velocity2D",
    "Waypoint",
]
