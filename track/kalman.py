"""Linear Kalman filter predict/update steps."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import numpy as np

from contracts import GaussianState, Waypoint
from exceptions import NotInitializedError, NumericalError, OutOfOrderMeasurementError

from .models import MeasurementModel, MotionModel

if TYPE_CHECKING:
    from .kalman_track import KalmanTrack


def invert(matrix: np.ndarray, what: str = "matrix") -> np.ndarray:
    """Invert ``matrix`` or raise NumericalError.

    Args:
        matrix: Square matrix to invert
        what: Name used in the error message

    Raises:
        NumericalError: If the matrix is singular or the inverse is not finite
    """
    try:
        inverse = np.linalg.inv(matrix)
    except np.linalg.LinAlgError as e:
        raise NumericalError(f"Cannot invert {what}: {e}") from e
    if not np.all(np.isfinite(inverse)):
        raise NumericalError(f"Cannot invert {what}: inverse is not finite")
    return inverse


class KalmanFilter:
    """Stateless Kalman filter over a motion and a measurement model.

    The filter keeps no history; the track owns the waypoints and hands the
    latest one in through :meth:`estimate`.
    """

    def __init__(self, motion_model: MotionModel, measurement_model: MeasurementModel) -> None:
        self.motion_model = motion_model
        self.measurement_model = measurement_model

    @property
    def state_dim(self) -> int:
        return self.motion_model.state_dim

    @property
    def measurement_dim(self) -> int:
        return self.measurement_model.measurement_dim

    def predict(self, prior: GaussianState, dt: float) -> GaussianState:
        """Propagate ``prior`` forward by ``dt`` seconds."""
        transition = self.motion_model.transition_matrix(dt)
        error = self.motion_model.transition_error(dt)
        return GaussianState(
            transition @ prior.mean,
            transition @ prior.covariance @ transition.T + error,
        )

    def update(self, prediction: GaussianState, measurement: np.ndarray) -> GaussianState:
        """Correct ``prediction`` with ``measurement``.

        Raises:
            NumericalError: If the innovation covariance is not invertible
            ValueError: If the measurement has the wrong dimension
        """
        measurement = np.asarray(measurement, dtype=float).reshape(-1)
        if measurement.size != self.measurement_dim:
            raise ValueError(
                f"Expected measurement of dimension {self.measurement_dim}, got {measurement.size}"
            )

        projection = self.measurement_model.measurement_matrix()
        noise = self.measurement_model.measurement_error()

        innovation = measurement - projection @ prediction.mean
        innovation_covariance = projection @ prediction.covariance @ projection.T + noise
        gain = prediction.covariance @ projection.T @ invert(innovation_covariance, "innovation covariance")

        return GaussianState(
            prediction.mean + gain @ innovation,
            prediction.covariance - gain @ innovation_covariance @ gain.T,
        )

    def estimate(
        self,
        track: "KalmanTrack",
        measurement: np.ndarray,
        timestamp: float,
    ) -> Waypoint:
        """Predict from the track's latest waypoint to ``timestamp`` and update.

        Returns:
            The new waypoint (not yet appended to the track)

        Raises:
            NotInitializedError: If the track has no waypoint
            OutOfOrderMeasurementError: If ``timestamp`` precedes the latest waypoint
            NumericalError: If the update step fails
        """
        latest: Optional[Waypoint] = track.latest if len(track) else None
        if latest is None:
            raise NotInitializedError("A track needs a seed waypoint before measurements can be added")

        dt = timestamp - latest.timestamp
        if dt < 0:
            raise OutOfOrderMeasurementError(
                f"Measurement at {timestamp:.6f}s is older than latest waypoint at {latest.timestamp:.6f}s",
                timestamp=timestamp,
                latest=latest.timestamp,
            )

        measurement = np.asarray(measurement, dtype=float).reshape(-1)
        prediction = self.predict(latest.estimate, dt)
        estimate = self.update(prediction, measurement)
        return Waypoint(
            timestamp=timestamp,
            measurement=measurement,
            prediction=prediction,
            estimate=estimate,
        )


__all__ = ["KalmanFilter", "invert"]
