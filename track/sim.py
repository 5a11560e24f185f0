"""Synthetic figure-eight trajectory for tests and simulated runs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from contracts import Cartesian2D, KinematicState, Velocity2D


@dataclass(frozen=True)
class SimConfig:
    dt_s: float = 0.1
    total_time_s: float = 10.0
    noise: float = 0.1
    seed: int = 7


def figure_eight(t_s: float) -> KinematicState:
    """Ground truth at ``t_s``: position ``(sin t, sin 2t)``."""
    return KinematicState(
        position=Cartesian2D(float(np.sin(t_s)), float(np.sin(2.0 * t_s))),
        velocity=Velocity2D(float(np.cos(t_s)), float(2.0 * np.cos(2.0 * t_s))),
    )


def sample_times(config: SimConfig) -> np.ndarray:
    steps = int(round(config.total_time_s / config.dt_s))
    return np.arange(steps + 1) * config.dt_s


def simulate_figure_eight(config: SimConfig) -> Tuple[List[KinematicState], List[Tuple[float, np.ndarray]]]:
    """Return ground truth and noisy position fixes.

    The first sample (t=0) is only part of the ground truth; it is the
    point a track is seeded at. Fixes carry uniform noise in
    ``[-noise, noise]`` per axis.
    """
    rng = np.random.default_rng(config.seed)
    times = sample_times(config)
    truth = [figure_eight(float(t_s)) for t_s in times]
    fixes: List[Tuple[float, np.ndarray]] = []
    for t_s, state in zip(times[1:], truth[1:]):
        noise = rng.uniform(-config.noise, config.noise, size=2)
        fixes.append((float(t_s), state.position.to_vector() + noise))
    return truth, fixes


__all__ = ["SimConfig", "figure_eight", "sample_times", "simulate_figure_eight"]
