"""End-to-end tracking of a noisy figure-eight trajectory."""

from __future__ import annotations

import numpy as np
import pytest

from contracts import GaussianState
from track.kalman_track import KalmanTrack
from track.models import ConstantVelocity, PositionMeasurementModel
from track.sim import SimConfig, figure_eight, sample_times, simulate_figure_eight
from track.trajectory_eval import log_track_summary, max_position_error, rms_position_error


@pytest.fixture
def scenario():
    config = SimConfig(dt_s=0.1, total_time_s=10.0, noise=0.1, seed=7)
    truth, fixes = simulate_figure_eight(config)
    track = KalmanTrack(
        GaussianState.from_diagonal(np.zeros(4), [3.0, 3.0, 0.0, 0.0]),
        ConstantVelocity(drift=0.05),
        PositionMeasurementModel(0.1, 0.1),
        timestamp=0.0,
    )
    for timestamp, fix in fixes:
        track.new_measurement(fix, timestamp=timestamp)
    return truth, track


class TestFigureEight:
    """Filter and smooth a figure-eight and compare against ground truth."""

    def test_one_waypoint_per_sample(self, scenario):
        truth, track = scenario
        assert len(track) == len(truth) == 101

    def test_filtered_track_stays_close(self, scenario):
        truth, track = scenario
        assert max_position_error(track, truth) <= 1.5

    def test_smoothed_track_stays_close(self, scenario):
        truth, track = scenario
        track.smooth()

        assert max_position_error(track, truth) <= 1.5

    def test_smoothing_does_not_worsen_rms_error(self, scenario):
        truth, track = scenario
        filtered_rms = rms_position_error(track, truth)

        track.smooth()

        assert rms_position_error(track, truth) <= filtered_rms
        log_track_summary(track, truth)


class TestSimulation:
    def test_ground_truth_shape(self):
        state = figure_eight(np.pi / 4)

        assert state.position.x == pytest.approx(np.sqrt(0.5))
        assert state.position.y == pytest.approx(1.0)
        assert state.velocity.vy == pytest.approx(0.0, abs=1e-12)

    def test_fixes_start_after_seed(self):
        config = SimConfig(total_time_s=1.0)
        truth, fixes = simulate_figure_eight(config)

        assert len(sample_times(config)) == 11
        assert len(fixes) == 10
        assert fixes[0][0] == pytest.approx(0.1)

    def test_noise_is_bounded(self):
        config = SimConfig(noise=0.1)
        truth, fixes = simulate_figure_eight(config)

        for state, (_, fix) in zip(truth[1:], fixes):
            assert np.all(np.abs(fix - state.position.to_vector()) <= 0.1)

    def test_same_seed_same_fixes(self):
        _, first = simulate_figure_eight(SimConfig(seed=3))
        _, second = simulate_figure_eight(SimConfig(seed=3))

        np.testing.assert_array_equal(first[-1][1], second[-1][1])
