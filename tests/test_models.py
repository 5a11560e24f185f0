"""Tests for the motion and measurement models."""

from __future__ import annotations

import numpy as np
import pytest

from track.models import ConstantVelocity, MeasureAllModel, PositionMeasurementModel


class TestConstantVelocity:
    """Test the constant-velocity motion model."""

    def test_transition_matrix_moves_position_by_velocity(self):
        """Position advances by velocity times dt, velocity is unchanged."""
        model = ConstantVelocity(drift=0.1)
        state = np.array([1.0, 2.0, 3.0, -4.0])

        moved = model.transition_matrix(0.5) @ state

        np.testing.assert_allclose(moved, [2.5, 0.0, 3.0, -4.0])

    def test_zero_dt_is_identity_without_noise(self):
        """A zero-length step neither moves the state nor adds noise."""
        model = ConstantVelocity(drift=0.3)

        np.testing.assert_array_equal(model.transition_matrix(0.0), np.eye(4))
        np.testing.assert_array_equal(model.transition_error(0.0), np.zeros((4, 4)))

    def test_negative_dt_is_clamped_to_zero(self):
        """Negative durations behave like zero."""
        model = ConstantVelocity(drift=0.3)

        np.testing.assert_array_equal(model.transition_matrix(-1.0), np.eye(4))
        np.testing.assert_array_equal(model.transition_error(-1.0), np.zeros((4, 4)))

    def test_transition_error_layout(self):
        """Process noise follows the piecewise white acceleration layout."""
        model = ConstantVelocity(drift=2.0)
        q = model.transition_error(2.0)

        # dt^4/4 = 4, dt^3/2 = 4, dt^2 = 4, scaled by drift
        assert q[0, 0] == pytest.approx(8.0)
        assert q[1, 1] == pytest.approx(8.0)
        assert q[0, 2] == pytest.approx(8.0)
        assert q[2, 0] == pytest.approx(8.0)
        assert q[2, 2] == pytest.approx(8.0)
        assert q[3, 3] == pytest.approx(8.0)
        assert q[0, 1] == 0.0
        assert q[0, 3] == 0.0
        np.testing.assert_allclose(q, q.T)

    def test_state_dim(self):
        assert ConstantVelocity(0.1).state_dim == 4


class TestPositionMeasurementModel:
    """Test the position-only measurement model."""

    def test_projects_position(self):
        """The measurement matrix picks x and y out of the state."""
        model = PositionMeasurementModel(0.1, 0.2)
        projected = model.measurement_matrix() @ np.array([1.0, 2.0, 3.0, 4.0])

        np.testing.assert_array_equal(projected, [1.0, 2.0])
        assert model.measurement_dim == 2

    def test_measurement_error_is_diagonal(self):
        model = PositionMeasurementModel(0.1, 0.2)
        np.testing.assert_array_equal(model.measurement_error(), np.diag([0.1, 0.2]))

    def test_rejects_tiny_state(self):
        with pytest.raises(ValueError):
            PositionMeasurementModel(0.1, 0.1, state_dim=1)


class TestMeasureAllModel:
    """Test the full-state measurement model."""

    def test_identity_projection(self):
        model = MeasureAllModel([1.0, 2.0, 3.0, 4.0])

        assert model.measurement_dim == 4
        np.testing.assert_array_equal(model.measurement_matrix(), np.eye(4))
        np.testing.assert_array_equal(model.measurement_error(), np.diag([1.0, 2.0, 3.0, 4.0]))

    def test_measurement_error_is_a_copy(self):
        """Callers cannot mutate the model through the returned matrix."""
        model = MeasureAllModel([1.0, 1.0])
        model.measurement_error()[0, 0] = 99.0

        assert model.measurement_error()[0, 0] == 1.0

    def test_rejects_empty_diagonal(self):
        with pytest.raises(ValueError):
            MeasureAllModel([])
