"""
geotrack Kalman Filter Test Suite

Test ID | Description                        | Reference                  | Tolerance
--------|------------------------------------|----------------------------|------------
1       | Initial state                      | diag(σp², σp², σv², σv²)   | Exact
2       | CV prediction                      | x = x0 + v*dt              | Exact
3       | Process noise                      | DWNA + random walk         | ±1e-12
4       | Measurement update                 | Kalman gain, Joseph form   | Symmetric PSD
5       | Outlier gating / degenerate S      | Mahalanobis d²             | State untouched
6       | Adaptive measurement noise         | R' = R(1 + c d²)           | Ordering
7       | Estimate extraction                | Speed / compass heading    | ±1e-9

References:
    - Bar-Shalom (2001). "Estimation with Applications to Tracking"
    - Bucy & Joseph (1968). "Filtering for Stochastic Processes"
"""

import math
import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geotrack.tracking.config import TrackerConfig
from geotrack.tracking.kalman import KalmanState, LinearKalmanFilter, UpdateOutcome


@pytest.fixture
def kf():
    """Filter with default configuration"""
    return LinearKalmanFilter(TrackerConfig())


def _state(x, P=None):
    if P is None:
        P = np.diag([25.0, 25.0, 4.0, 4.0])
    return KalmanState(x=np.array(x, dtype=np.float64), P=np.array(P, dtype=np.float64))


def _assert_symmetric_psd(P):
    assert np.allclose(P, P.T, rtol=0, atol=1e-9)
    assert np.all(np.diag(P) >= 0)
    assert np.min(np.linalg.eigvalsh((P + P.T) / 2)) >= -1e-9


# =============================================================================
# TEST 1: Initial State
# =============================================================================


class TestInitialize:
    def test_zero_velocity_diagonal_covariance(self, kf):
        state = kf.initialize()
        assert np.array_equal(state.x, np.zeros(4))
        assert np.array_equal(state.P, np.diag([400.0, 400.0, 16.0, 16.0]))

    def test_uses_configured_uncertainty(self):
        kf = LinearKalmanFilter(
            TrackerConfig(initial_uncertainty_meters=3.0, initial_speed_uncertainty_mps=0.5)
        )
        assert np.allclose(np.diag(kf.initialize().P), [9.0, 9.0, 0.25, 0.25])


# =============================================================================
# TEST 2: Prediction
# =============================================================================


class TestPredict:
    def test_constant_velocity_mean(self, kf):
        predicted = kf.predict(_state([0.0, 0.0, 2.0, 1.0]), dt=2.0)
        assert np.allclose(predicted.x, [4.0, 2.0, 2.0, 1.0])

    def test_zero_dt_is_skipped(self, kf):
        state = _state([1.0, 2.0, 3.0, 4.0])
        assert kf.predict(state, dt=0.0) is state

    def test_covariance_grows(self, kf):
        state = _state([0.0, 0.0, 0.0, 0.0])
        predicted = kf.predict(state, dt=1.0)
        assert np.all(np.diag(predicted.P) > np.diag(state.P))
        _assert_symmetric_psd(predicted.P)

    def test_input_not_mutated(self, kf):
        state = _state([0.0, 0.0, 1.0, 1.0])
        before = state.copy()
        kf.predict(state, dt=1.0)
        assert np.array_equal(state.x, before.x)
        assert np.array_equal(state.P, before.P)

    def test_position_velocity_coupling(self, kf):
        """F P F^T moves velocity variance into the position block"""
        P = np.diag([0.0, 0.0, 4.0, 4.0])
        predicted = kf.predict(_state([0, 0, 0, 0], P), dt=1.0)
        assert predicted.P[0, 2] > 0
        assert predicted.P[0, 0] > 4.0


# =============================================================================
# TEST 3: Process Noise
# =============================================================================


class TestProcessNoise:
    def test_structure(self):
        kf = LinearKalmanFilter(
            TrackerConfig(process_noise_position_meters=2.0, process_noise_acceleration_mps2=3.0)
        )
        dt = 2.0
        Q = kf._get_process_noise(dt)
        accel_var = 9.0

        assert Q[0, 0] == pytest.approx(dt**4 / 4 * accel_var + 4.0 * dt)
        assert Q[0, 2] == pytest.approx(dt**3 / 2 * accel_var)
        assert Q[2, 2] == pytest.approx(dt**2 * accel_var)
        assert Q[0, 1] == 0.0
        assert np.allclose(Q, Q.T)

    def test_floor_applies_to_same_timestamp(self, kf):
        """dt below the floor behaves as the floor inside Q"""
        assert np.array_equal(kf._get_process_noise(0.0), kf._get_process_noise(1e-3))
        assert kf._get_process_noise(0.0)[0, 0] > 0

    def test_floor_is_configurable(self):
        kf = LinearKalmanFilter(TrackerConfig(min_process_noise_dt_seconds=0.5))
        assert np.array_equal(kf._get_process_noise(0.1), kf._get_process_noise(0.5))


# =============================================================================
# TEST 4: Measurement Update
# =============================================================================


class TestUpdate:
    def test_moves_toward_measurement(self, kf):
        state = kf.initialize()
        updated, outcome = kf.update(state, (10.0, -5.0), measurement_variance=36.0)

        assert outcome is UpdateOutcome.FUSED
        assert 0.0 < updated.x[0] < 10.0
        assert -5.0 < updated.x[1] < 0.0
        assert np.all(np.diag(updated.P)[:2] < np.diag(state.P)[:2])

    def test_textbook_gain_without_adaptation(self):
        """With c = 0, K = P / (P + R) for a diagonal prior"""
        kf = LinearKalmanFilter(TrackerConfig(innovation_variance_scale=0.0))
        state = kf.initialize()
        updated, _ = kf.update(state, (10.0, 0.0), measurement_variance=100.0)
        assert updated.x[0] == pytest.approx(10.0 * 400.0 / 500.0)
        assert updated.P[0, 0] == pytest.approx(400.0 * 100.0 / 500.0)

    def test_zero_innovation_keeps_mean(self, kf):
        state = kf.initialize()
        updated, outcome = kf.update(state, (0.0, 0.0), measurement_variance=36.0)
        assert outcome is UpdateOutcome.FUSED
        assert np.array_equal(updated.x, np.zeros(4))

    def test_covariance_stays_symmetric_psd(self, kf):
        rng = np.random.default_rng(7)
        state = kf.initialize()
        truth = np.array([0.0, 0.0])
        velocity = np.array([1.5, -0.7])

        for _ in range(300):
            dt = float(rng.uniform(0.0, 3.0))
            truth = truth + velocity * dt
            state = kf.predict(state, dt)
            z = truth + rng.normal(0.0, 3.0, size=2)
            if rng.random() < 0.05:
                z = z + 500.0  # gross outlier
            state, _ = kf.update(state, z, measurement_variance=float(rng.uniform(0.5, 40.0)))
            _assert_symmetric_psd(state.P)


# =============================================================================
# TEST 5: Gating and Degenerate Innovation Covariance
# =============================================================================


class TestGating:
    def test_outlier_rejected_without_change(self, kf):
        state = _state([0.0, 0.0, 0.0, 0.0], np.diag([4.0, 4.0, 1.0, 1.0]))
        before = state.copy()

        updated, outcome = kf.update(state, (1000.0, 0.0), measurement_variance=4.0)

        assert outcome is UpdateOutcome.REJECTED_OUTLIER
        assert updated is state
        assert np.array_equal(state.x, before.x)
        assert np.array_equal(state.P, before.P)

    def test_explicit_threshold_overrides_config(self, kf):
        state = kf.initialize()
        # d² = 900 / 436 ≈ 2.06
        _, accepted = kf.update(state, (30.0, 0.0), measurement_variance=36.0)
        _, rejected = kf.update(state, (30.0, 0.0), 36.0, outlier_threshold=2.0)
        assert accepted is UpdateOutcome.FUSED
        assert rejected is UpdateOutcome.REJECTED_OUTLIER

    def test_degenerate_innovation_covariance(self, kf):
        state = _state([0.0, 0.0, 0.0, 0.0], np.zeros((4, 4)))
        updated, outcome = kf.update(state, (1.0, 1.0), measurement_variance=0.0)
        assert outcome is UpdateOutcome.DEGENERATE
        assert updated is state


# =============================================================================
# TEST 6: Adaptive Measurement Noise
# =============================================================================


class TestAdaptiveNoise:
    def test_large_innovations_trusted_less(self):
        plain = LinearKalmanFilter(TrackerConfig(innovation_variance_scale=0.0))
        adaptive = LinearKalmanFilter(TrackerConfig(innovation_variance_scale=0.35))
        state = plain.initialize()

        plain_state, _ = plain.update(state, (40.0, 0.0), measurement_variance=36.0)
        adaptive_state, _ = adaptive.update(state, (40.0, 0.0), measurement_variance=36.0)

        assert 0.0 < adaptive_state.x[0] < plain_state.x[0]
        assert adaptive_state.P[0, 0] > plain_state.P[0, 0]


# =============================================================================
# TEST 7: Estimate Extraction
# =============================================================================


class TestEstimate:
    @pytest.mark.parametrize(
        "velocity,expected",
        [
            ((0.0, 1.0), 0.0),
            ((1.0, 0.0), 90.0),
            ((0.0, -1.0), 180.0),
            ((-1.0, 0.0), 270.0),
            ((1.0, 1.0), 45.0),
        ],
    )
    def test_compass_heading(self, kf, velocity, expected):
        state = _state([0.0, 0.0, velocity[0], velocity[1]])
        assert kf.get_heading(state) == pytest.approx(expected)

    def test_heading_absent_when_slow(self, kf):
        state = _state([0.0, 0.0, 0.1, 0.1])
        assert kf.get_heading(state) is None

    def test_estimate_fields(self, kf):
        state = _state([0.0, 0.0, 3.0, 4.0])
        estimate = kf.estimate(state, (13.0, 52.0), timestamp_millis=1234)

        assert estimate.timestamp_millis == 1234
        assert estimate.position == pytest.approx((13.0, 52.0))
        assert estimate.east_velocity_mps == 3.0
        assert estimate.north_velocity_mps == 4.0
        assert estimate.speed_mps == pytest.approx(5.0)
        assert estimate.heading_degrees == pytest.approx(math.degrees(math.atan2(3.0, 4.0)))

    def test_estimate_position_offset(self, kf):
        state = _state([0.0, 1000.0, 0.0, 0.0])
        estimate = kf.estimate(state, (13.0, 52.0), timestamp_millis=0)
        assert estimate.longitude == pytest.approx(13.0)
        assert estimate.latitude > 52.0
        assert estimate.is_stationary
