"""Kalman-filtered track with a backward (Rauch-Tung-Striebel) smoothing pass."""

from __future__ import annotations

import time
from typing import Any, Iterator, List, Optional, Tuple

import numpy as np

from contracts import GaussianState, Waypoint
from exceptions import TrackAlreadySmoothedError
from log_config.logger import get_logger, log_performance

from .kalman import KalmanFilter, invert
from .models import MeasurementModel, MotionModel

logger = get_logger(__name__)


def as_measurement_vector(measurement: Any) -> np.ndarray:
    """Convert a measurement to a flat float vector.

    Accepts arrays, sequences and objects exposing ``to_vector()``.
    """
    to_vector = getattr(measurement, "to_vector", None)
    if callable(to_vector):
        measurement = to_vector()
    return np.asarray(measurement, dtype=float).reshape(-1)


class KalmanTrack:
    """Ordered history of filtered waypoints, oldest first.

    The track is created with exactly one seed waypoint whose prediction and
    estimate are both the initial state. Every accepted measurement appends
    one waypoint; the history never shrinks except through :meth:`reset`.

    The track has a single writer (the control loop) and does no locking.
    """

    def __init__(
        self,
        initial_state: GaussianState,
        motion_model: MotionModel,
        measurement_model: MeasurementModel,
        timestamp: Optional[float] = None,
    ) -> None:
        if initial_state.dim != motion_model.state_dim:
            raise ValueError(
                f"Initial state has dimension {initial_state.dim}, "
                f"motion model expects {motion_model.state_dim}"
            )
        self._filter = KalmanFilter(motion_model, measurement_model)
        self._waypoints: List[Waypoint] = []
        self._smoothed = False
        self.reset(initial_state, timestamp)

    @property
    def motion_model(self) -> MotionModel:
        return self._filter.motion_model

    @property
    def measurement_model(self) -> MeasurementModel:
        return self._filter.measurement_model

    @property
    def waypoints(self) -> Tuple[Waypoint, ...]:
        return tuple(self._waypoints)

    @property
    def latest(self) -> Waypoint:
        return self._waypoints[-1]

    @property
    def is_smoothed(self) -> bool:
        return self._smoothed

    def __len__(self) -> int:
        return len(self._waypoints)

    def __iter__(self) -> Iterator[Waypoint]:
        return iter(tuple(self._waypoints))

    def reset(self, initial_state: GaussianState, timestamp: Optional[float] = None) -> None:
        """Replace the history with a single seed waypoint."""
        if timestamp is None:
            timestamp = time.monotonic()
        seed = Waypoint(
            timestamp=float(timestamp),
            measurement=np.zeros(self._filter.measurement_dim),
            prediction=initial_state,
            estimate=initial_state,
        )
        self._waypoints = [seed]
        self._smoothed = False

    def new_measurement(self, measurement: Any, timestamp: Optional[float] = None) -> Waypoint:
        """Filter ``measurement`` and append the resulting waypoint.

        Args:
            measurement: Vector (or object with ``to_vector()``) of the
                measurement model's dimension
            timestamp: Measurement time in seconds on the same clock as the
                seed (default: ``time.monotonic()``)

        Returns:
            The appended waypoint

        Raises:
            TrackAlreadySmoothedError: If the track was already smoothed
            NumericalError: If the update step fails
            OutOfOrderMeasurementError: If the measurement is older than the latest waypoint

        On any failure the track is left unchanged.
        """
        if self._smoothed:
            raise TrackAlreadySmoothedError("Cannot extend a smoothed track; reset it first")
        if timestamp is None:
            timestamp = time.monotonic()

        waypoint = self._filter.estimate(self, as_measurement_vector(measurement), float(timestamp))
        self._waypoints.append(waypoint)
        return waypoint

    def smooth(self) -> None:
        """Run one backward RTS pass over the whole history.

        Every estimate except the last is replaced by its smoothed value;
        predictions and measurements are untouched. A track can only be
        smoothed once, since the pass assumes filtered (not smoothed)
        estimates as input.

        Raises:
            TrackAlreadySmoothedError: If the track was already smoothed
            NumericalError: If a predicted covariance is not invertible; the
                track is left unchanged
        """
        if self._smoothed:
            raise TrackAlreadySmoothedError("Track has already been smoothed")

        started = time.perf_counter()
        smoothed: List[GaussianState] = [wp.estimate for wp in self._waypoints]

        for i in range(len(self._waypoints) - 2, -1, -1):
            current = self._waypoints[i]
            following = self._waypoints[i + 1]
            dt = following.timestamp - current.timestamp
            transition = self.motion_model.transition_matrix(dt)

            gain = (
                current.estimate.covariance
                @ transition.T
                @ invert(following.prediction.covariance, f"predicted covariance of waypoint {i + 1}")
            )
            smoothed[i] = GaussianState(
                current.estimate.mean + gain @ (smoothed[i + 1].mean - following.prediction.mean),
                current.estimate.covariance
                + gain @ (smoothed[i + 1].covariance - following.prediction.covariance) @ gain.T,
            )

        for waypoint, state in zip(self._waypoints, smoothed):
            waypoint.estimate = state
        self._smoothed = True

        log_performance(
            f"smoothing {len(self._waypoints)} waypoints",
            (time.perf_counter() - started) * 1000.0,
        )

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Return ``(timestamps, means, covariances, measurements)`` stacked per waypoint."""
        timestamps = np.array([wp.timestamp for wp in self._waypoints])
        means = np.stack([wp.estimate.mean for wp in self._waypoints])
        covariances = np.stack([wp.estimate.covariance for wp in self._waypoints])
        measurements = np.stack([wp.measurement for wp in self._waypoints])
        return timestamps, means, covariances, measurements


__all__ = ["KalmanTrack", "as_measurement_vector"]
