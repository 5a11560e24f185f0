"""Factories for the tracks the robot runs."""

from __future__ import annotations

from typing import Optional

import numpy as np

from configs.settings import ModelConfig
from contracts import GaussianState, KinematicState

from .kalman_track import KalmanTrack
from .models import ConstantVelocity, MeasureAllModel, PositionMeasurementModel


def initial_state_from(kinematic: KinematicState, config: ModelConfig) -> GaussianState:
    return GaussianState(kinematic.to_vector(), np.diag(config.initial_covariance))


def build_position_track(
    initial: KinematicState,
    config: ModelConfig,
    timestamp: Optional[float] = None,
) -> KalmanTrack:
    """Track fed with ``(x, y)`` position fixes only."""
    return KalmanTrack(
        initial_state_from(initial, config),
        ConstantVelocity(config.drift),
        PositionMeasurementModel(config.position_error, config.position_error),
        timestamp=timestamp,
    )


def build_measure_all_track(
    initial: KinematicState,
    config: ModelConfig,
    timestamp: Optional[float] = None,
) -> KalmanTrack:
    """Track fed with full ``(x, y, vx, vy)`` kinematic measurements."""
    return KalmanTrack(
        initial_state_from(initial, config),
        ConstantVelocity(config.drift),
        MeasureAllModel(
            [config.position_error, config.position_error, config.velocity_error, config.velocity_error]
        ),
        timestamp=timestamp,
    )


__all__ = ["build_measure_all_track", "build_position_track", "initial_state_from"]
