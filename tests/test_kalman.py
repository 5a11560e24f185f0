"""Tests for the Kalman filter predict/update steps."""

from __future__ import annotations

import numpy as np
import pytest

from contracts import GaussianState
from exceptions import NotInitializedError, NumericalError, OutOfOrderMeasurementError
from track.kalman import KalmanFilter, invert
from track.kalman_track import KalmanTrack
from track.models import ConstantVelocity, MeasureAllModel, PositionMeasurementModel


@pytest.fixture
def kalman_filter():
    return KalmanFilter(ConstantVelocity(drift=0.05), PositionMeasurementModel(0.1, 0.1))


@pytest.fixture
def prior():
    return GaussianState([0.0, 0.0, 1.0, 0.5], np.diag([1.0, 1.0, 0.5, 0.5]))


class TestPredict:
    """Test the predict step."""

    def test_zero_dt_keeps_mean(self, kalman_filter, prior):
        """Predicting over zero seconds leaves the mean untouched."""
        prediction = kalman_filter.predict(prior, 0.0)

        np.testing.assert_array_equal(prediction.mean, prior.mean)
        np.testing.assert_allclose(prediction.covariance, prior.covariance)

    def test_predict_moves_mean(self, kalman_filter, prior):
        prediction = kalman_filter.predict(prior, 2.0)
        np.testing.assert_allclose(prediction.mean, [2.0, 1.0, 1.0, 0.5])

    def test_predict_grows_uncertainty(self, kalman_filter, prior):
        """Predicted covariance is never smaller than the prior."""
        prediction = kalman_filter.predict(prior, 1.0)
        assert np.trace(prediction.covariance) > np.trace(prior.covariance)

    def test_predict_does_not_mutate_prior(self, kalman_filter, prior):
        """Predict is pure: the prior is unchanged and stays read-only."""
        mean_before = prior.mean.copy()
        covariance_before = prior.covariance.copy()

        kalman_filter.predict(prior, 1.0)

        np.testing.assert_array_equal(prior.mean, mean_before)
        np.testing.assert_array_equal(prior.covariance, covariance_before)
        with pytest.raises(ValueError):
            prior.mean[0] = 5.0

    def test_predict_is_idempotent(self, kalman_filter, prior):
        """Predicting twice from the same prior gives identical results."""
        first = kalman_filter.predict(prior, 0.3)
        second = kalman_filter.predict(prior, 0.3)

        np.testing.assert_array_equal(first.mean, second.mean)
        np.testing.assert_array_equal(first.covariance, second.covariance)


class TestUpdate:
    """Test the update step."""

    def test_update_does_not_increase_uncertainty(self, kalman_filter, prior):
        """Updating never increases the covariance trace."""
        prediction = kalman_filter.predict(prior, 0.1)
        estimate = kalman_filter.update(prediction, [0.2, 0.1])

        assert np.trace(estimate.covariance) <= np.trace(prediction.covariance)

    def test_update_keeps_covariance_symmetric(self, kalman_filter, prior):
        prediction = kalman_filter.predict(prior, 0.1)
        estimate = kalman_filter.update(prediction, [0.2, 0.1])

        np.testing.assert_allclose(estimate.covariance, estimate.covariance.T, atol=1e-12)

    def test_update_pulls_mean_towards_measurement(self, kalman_filter, prior):
        prediction = kalman_filter.predict(prior, 0.0)
        estimate = kalman_filter.update(prediction, [1.0, -1.0])

        assert 0.0 < estimate.mean[0] <= 1.0
        assert -1.0 <= estimate.mean[1] < 0.0

    def test_measurement_equal_to_prediction_keeps_mean(self, kalman_filter, prior):
        """A zero innovation leaves the mean where the prediction put it."""
        prediction = kalman_filter.predict(prior, 1.0)
        estimate = kalman_filter.update(prediction, prediction.mean[:2])

        np.testing.assert_allclose(estimate.mean, prediction.mean)

    def test_wrong_measurement_dimension_raises(self, kalman_filter, prior):
        with pytest.raises(ValueError, match="dimension"):
            kalman_filter.update(prior, [1.0, 2.0, 3.0])

    def test_singular_innovation_covariance_raises(self):
        """Zero measurement noise on a zero-uncertainty state cannot be inverted."""
        kf = KalmanFilter(ConstantVelocity(0.0), MeasureAllModel([0.0, 0.0, 0.0, 0.0]))
        certain = GaussianState(np.zeros(4), np.zeros((4, 4)))

        with pytest.raises(NumericalError, match="innovation covariance"):
            kf.update(certain, np.zeros(4))


class TestEstimate:
    """Test estimating against a track's latest waypoint."""

    def test_estimate_returns_prediction_and_estimate(self, prior):
        track = KalmanTrack(prior, ConstantVelocity(0.05), PositionMeasurementModel(0.1, 0.1), timestamp=0.0)
        kf = KalmanFilter(track.motion_model, track.measurement_model)

        waypoint = kf.estimate(track, np.array([0.1, 0.05]), 0.1)

        assert waypoint.timestamp == 0.1
        np.testing.assert_allclose(waypoint.prediction.mean, [0.1, 0.05, 1.0, 0.5])
        np.testing.assert_array_equal(waypoint.measurement, [0.1, 0.05])
        # Not appended by the filter
        assert len(track) == 1

    def test_older_timestamp_raises(self, prior):
        track = KalmanTrack(prior, ConstantVelocity(0.05), PositionMeasurementModel(0.1, 0.1), timestamp=5.0)
        kf = KalmanFilter(track.motion_model, track.measurement_model)

        with pytest.raises(OutOfOrderMeasurementError) as excinfo:
            kf.estimate(track, np.zeros(2), 4.0)

        assert excinfo.value.timestamp == 4.0
        assert excinfo.value.latest == 5.0

    def test_empty_track_raises(self, kalman_filter):
        class EmptyTrack:
            def __len__(self):
                return 0

        with pytest.raises(NotInitializedError):
            kalman_filter.estimate(EmptyTrack(), np.zeros(2), 1.0)


class TestInvert:
    """Test the guarded matrix inverse."""

    def test_inverts_regular_matrix(self):
        matrix = np.array([[2.0, 0.0], [0.0, 4.0]])
        np.testing.assert_allclose(invert(matrix), [[0.5, 0.0], [0.0, 0.25]])

    def test_singular_matrix_raises(self):
        with pytest.raises(NumericalError, match="test matrix"):
            invert(np.zeros((2, 2)), "test matrix")
