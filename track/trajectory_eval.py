"""Evaluation helpers for filtered and smoothed tracks."""

from __future__ import annotations

from typing import Optional, Sequence

import numpy as np

from contracts import KinematicState

from log_config.logger import get_logger

from .kalman_track import KalmanTrack

logger = get_logger(__name__)


def position_errors(track: KalmanTrack, ground_truth: Sequence[KinematicState]) -> np.ndarray:
    """Per-waypoint absolute ``(x, y)`` error against ground truth, paired in order."""
    count = min(len(track), len(ground_truth))
    if count == 0:
        return np.zeros((0, 2))
    estimated = np.stack([wp.estimate.mean[:2] for wp in track.waypoints[:count]])
    truth = np.stack([state.position.to_vector() for state in ground_truth[:count]])
    return np.abs(estimated - truth)


def max_position_error(track: KalmanTrack, ground_truth: Sequence[KinematicState]) -> float:
    """Largest single-axis position error over the paired waypoints."""
    errors = position_errors(track, ground_truth)
    return float(errors.max()) if errors.size else 0.0


def rms_position_error(track: KalmanTrack, ground_truth: Sequence[KinematicState]) -> Optional[float]:
    errors = position_errors(track, ground_truth)
    if not errors.size:
        return None
    return float(np.sqrt(np.mean(np.sum(errors**2, axis=1))))


def log_track_summary(
    track: KalmanTrack,
    ground_truth: Optional[Sequence[KinematicState]] = None,
) -> None:
    waypoints = track.waypoints
    duration_s = waypoints[-1].timestamp - waypoints[0].timestamp
    trace = float(np.trace(waypoints[-1].estimate.covariance))
    rms = rms_position_error(track, ground_truth) if ground_truth is not None else None
    logger.info(
        f"track.summary waypoints={len(waypoints)} duration_s={duration_s:.2f} "
        f"smoothed={track.is_smoothed} final_cov_trace={trace:.4f} "
        f"rms_error={f'{rms:.4f}' if rms is not None else 'n/a'}"
    )


__all__ = ["log_track_summary", "max_position_error", "position_errors", "rms_position_error"]
