"""Track export for plotting and offline analysis."""

from __future__ import annotations

import csv
from pathlib import Path

from log_config.logger import get_logger

from .kalman_track import KalmanTrack

logger = get_logger(__name__)


def write_track_csv(path: Path, track: KalmanTrack) -> None:
    """Write one row per waypoint: timestamp, raw measurement, estimate mean
    and the diagonal of the estimate covariance.

    Args:
        path: Output CSV file path (parent directories are created)
        track: Track to export
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    measurement_dim = track.measurement_model.measurement_dim
    state_dim = track.motion_model.state_dim

    with path.open("w", newline="") as handle:
        writer = csv.writer(handle)
        writer.writerow(
            ["timestamp_s"]
            + [f"measurement_{i}" for i in range(measurement_dim)]
            + [f"mean_{i}" for i in range(state_dim)]
            + [f"variance_{i}" for i in range(state_dim)]
        )
        for waypoint in track.waypoints:
            writer.writerow(
                [f"{waypoint.timestamp:.6f}"]
                + [f"{value:.6f}" for value in waypoint.measurement]
                + [f"{value:.6f}" for value in waypoint.estimate.mean]
                + [f"{value:.6f}" for value in waypoint.estimate.covariance.diagonal()]
            )

    logger.info(f"Wrote {len(track)} waypoints to {path}")


__all__ = ["write_track_csv"]
