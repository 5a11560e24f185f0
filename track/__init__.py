"""State estimation: models, Kalman filter and smoothed tracks."""

from .kalman import KalmanFilter
from .kalman_track import KalmanTrack
from .models import (
    ConstantVelocity,
    MeasureAllModel,
    MeasurementModel,
    MotionModel,
    PositionMeasurementModel,
)

__all__ = [
    "ConstantVelocity",
    "KalmanFilter",
    "KalmanTrack",
    "MeasureAllModel",
    "MeasurementModel",
    "MotionModel",
    "PositionMeasurementModel",
]
