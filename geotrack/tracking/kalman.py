"""
Linear Kalman Filter for Geographic Position Tracking

Implements a Constant Velocity (CV) motion model in a local tangent plane
with Mahalanobis outlier gating, innovation-adaptive measurement noise and a
Joseph-form covariance update.

State Vector: [x, y, vx, vy]^T
    - x, y: East/north offset from the track origin (meters)
    - vx, vy: East/north velocity components (m/s)

Reference:
    - Bar-Shalom, Y. "Estimation with Applications to Tracking and Navigation", 2001
    - Bucy, R. & Joseph, P. "Filtering for Stochastic Processes with
      Applications to Guidance", 1968
    - Mehra, R. "On the Identification of Variances and Adaptive Kalman
      Filtering", IEEE TAC, 1970
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

import numpy as np

from ..geo.constants import RADIANS_TO_DEGREES
from ..geo.projection import unproject
from .config import TrackerConfig
from .models import Estimate

MIN_INNOVATION_DETERMINANT = 1e-12


class UpdateOutcome(Enum):
    """Result of a measurement update."""

    FUSED = "fused"  # Measurement applied
    REJECTED_OUTLIER = "rejected_outlier"  # Gated out, state untouched
    DEGENERATE = "degenerate"  # Singular innovation covariance, state untouched


@dataclass
class KalmanState:
    """
    State container for Kalman Filter.

    Attributes:
        x: State vector [x, y, vx, vy]
        P: State covariance matrix (4x4)
    """

    x: np.ndarray  # State vector
    P: np.ndarray  # Covariance matrix

    def copy(self) -> "KalmanState":
        return KalmanState(x=self.x.copy(), P=self.P.copy())


class LinearKalmanFilter:
    """
    Linear Kalman Filter for 2D geo tracking in local tangent meters.

    Uses Constant Velocity (CV) motion model:
        x_{k+1} = x_k + vx * dt
        y_{k+1} = y_k + vy * dt
        vx_{k+1} = vx_k (constant)
        vy_{k+1} = vy_k (constant)

    Measurement model:
        z = [x, y] (position only)

    Example:
        >>> kf = LinearKalmanFilter(TrackerConfig())
        >>> state = kf.initialize()
        >>> predicted = kf.predict(state, dt=1.0)
        >>> updated, outcome = kf.update(predicted, (3.0, 4.0), measurement_variance=36.0)
    """

    def __init__(self, config: Optional[TrackerConfig] = None) -> None:
        """
        Initialize Kalman Filter.

        Args:
            config: Tracker configuration supplying process noise, adaptive
                    scaling and initial uncertainty
        """
        self.config = config or TrackerConfig()

        # Measurement matrix H: We only observe position [x, y]
        # z = H * x  where x = [x, y, vx, vy]
        self.H = np.array([[1, 0, 0, 0], [0, 1, 0, 0]], dtype=np.float64)

    def initialize(self, position: Tuple[float, float] = (0.0, 0.0)) -> KalmanState:
        """
        Initialize a new track state at rest.

        Args:
            position: Initial local position (x, y) in meters

        Returns:
            KalmanState with zero velocity and diagonal covariance
        """
        position_var = self.config.initial_uncertainty_meters**2
        velocity_var = self.config.initial_speed_uncertainty_mps**2

        x = np.array([position[0], position[1], 0.0, 0.0], dtype=np.float64)
        P = np.diag([position_var, position_var, velocity_var, velocity_var]).astype(np.float64)

        return KalmanState(x=x, P=P)

    def _get_transition_matrix(self, dt: float) -> np.ndarray:
        """
        Get state transition matrix F for time step dt.

        Constant velocity model:
        | 1  0  dt  0 |
        | 0  1  0  dt |
        | 0  0  1   0 |
        | 0  0  0   1 |
        """
        return np.array(
            [[1, 0, dt, 0], [0, 1, 0, dt], [0, 0, 1, 0], [0, 0, 0, 1]], dtype=np.float64
        )

    def _get_process_noise(self, dt: float) -> np.ndarray:
        """
        Get process noise covariance Q for time step dt.

        Discrete white noise acceleration model plus a position random walk:
        Q = q_a^2 * G * G^T + q_p^2 * dt * diag(1, 1, 0, 0)

        where G = [dt^2/2, dt^2/2, dt, dt]^T per axis.

        dt is floored at min_process_noise_dt_seconds so that samples sharing
        a timestamp still inflate the covariance.
        """
        dt = max(self.config.min_process_noise_dt_seconds, dt)
        dt2 = dt * dt
        dt3 = dt2 * dt
        dt4 = dt3 * dt

        accel_var = self.config.process_noise_acceleration_mps2**2
        random_walk_var = self.config.process_noise_position_meters**2 * dt

        Q = np.array(
            [
                [dt4 / 4, 0, dt3 / 2, 0],
                [0, dt4 / 4, 0, dt3 / 2],
                [dt3 / 2, 0, dt2, 0],
                [0, dt3 / 2, 0, dt2],
            ],
            dtype=np.float64,
        ) * accel_var

        Q[0, 0] += random_walk_var
        Q[1, 1] += random_walk_var

        return Q

    def predict(self, state: KalmanState, dt: float) -> KalmanState:
        """
        Predict state to next time step.

        Prediction equations:
            x_pred = F * x
            P_pred = F * P * F^T + Q

        Args:
            state: Current state
            dt: Time step (seconds); dt <= 0 returns the state unchanged

        Returns:
            Predicted state
        """
        if dt <= 0:
            return state

        F = self._get_transition_matrix(dt)
        Q = self._get_process_noise(dt)

        # State prediction (Euler: position += velocity * dt)
        x_pred = F @ state.x

        # Covariance prediction
        P_pred = F @ state.P @ F.T + Q

        return KalmanState(x=x_pred, P=P_pred)

    def update(
        self,
        state: KalmanState,
        measurement: Sequence[float],
        measurement_variance: float,
        outlier_threshold: Optional[float] = None,
    ) -> Tuple[KalmanState, UpdateOutcome]:
        """
        Update state with a gated, adaptively weighted measurement.

        Update equations:
            S = H * P * H^T + R    (innovation covariance)
            y = z - H * x          (innovation)
            d² = y^T * S^-1 * y    (squared Mahalanobis distance)
            R' = R * (1 + c * d²)  (adaptive inflation)
            K = P * H^T * S'^-1    (Kalman gain)
            x_new = x + K * y
            P_new = (I - K*H) * P * (I - K*H)^T + K * R' * K^T   (Joseph form)

        Never raises on numerical trouble: a degenerate S or a gated-out
        measurement returns the input state object untouched.

        Args:
            state: Predicted state
            measurement: Position measurement (x, y) in local meters
            measurement_variance: Measurement variance (m²) before inflation
            outlier_threshold: Gate on d²; defaults to the config threshold

        Returns:
            (updated state, outcome)
        """
        if outlier_threshold is None:
            outlier_threshold = self.config.outlier_mahalanobis_threshold

        z = np.asarray(measurement, dtype=np.float64)
        P = state.P

        # Innovation covariance
        S = P[:2, :2] + np.eye(2) * measurement_variance
        det = _determinant_2x2(S)
        if det < MIN_INNOVATION_DETERMINANT:
            return state, UpdateOutcome.DEGENERATE
        S_inv = _inverse_2x2(S, det)

        # Innovation (measurement residual)
        y = z - self.H @ state.x
        d2 = float(y @ S_inv @ y)

        # Outlier gating
        if d2 > outlier_threshold:
            return state, UpdateOutcome.REJECTED_OUTLIER

        # Trust larger (but accepted) innovations less
        scale = 1.0 + self.config.innovation_variance_scale * max(d2, 0.0)
        R_var = measurement_variance * scale
        if scale != 1.0:
            S = P[:2, :2] + np.eye(2) * R_var
            det = _determinant_2x2(S)
            if det < MIN_INNOVATION_DETERMINANT:
                return state, UpdateOutcome.DEGENERATE
            S_inv = _inverse_2x2(S, det)

        # Kalman gain (P * H^T selects the first two columns)
        K = P[:, :2] @ S_inv

        # State update
        x_new = state.x + K @ y

        # Covariance update (Joseph form for numerical stability)
        I_KH = np.eye(4) - K @ self.H
        P_new = I_KH @ P @ I_KH.T + (K * R_var) @ K.T

        return KalmanState(x=x_new, P=P_new), UpdateOutcome.FUSED

    def get_position(self, state: KalmanState) -> Tuple[float, float]:
        """Extract local position from state."""
        return (float(state.x[0]), float(state.x[1]))

    def get_velocity(self, state: KalmanState) -> Tuple[float, float]:
        """Extract velocity from state."""
        return (float(state.x[2]), float(state.x[3]))

    def get_speed(self, state: KalmanState) -> float:
        """Calculate speed from state."""
        return math.hypot(state.x[2], state.x[3])

    def get_heading(self, state: KalmanState) -> Optional[float]:
        """
        Calculate heading (degrees, 0 = North, CW positive).

        Returns None below min_speed_for_direction_mps. atan2 takes east
        before north because bearings are measured from north.
        """
        if self.get_speed(state) < self.config.min_speed_for_direction_mps:
            return None
        heading = math.atan2(state.x[2], state.x[3]) * RADIANS_TO_DEGREES
        return (heading + 360.0) % 360.0

    def estimate(
        self, state: KalmanState, origin: Tuple[float, float], timestamp_millis: int
    ) -> Estimate:
        """
        Externally visible view of a state.

        Args:
            state: Filter state in local meters
            origin: Track origin (longitude, latitude)
            timestamp_millis: Timestamp to stamp the estimate with

        Returns:
            Estimate with geographic position, velocity, speed and heading
        """
        east, north = self.get_position(state)
        ve, vn = self.get_velocity(state)
        return Estimate(
            timestamp_millis=timestamp_millis,
            position=unproject(origin, east, north),
            east_velocity_mps=ve,
            north_velocity_mps=vn,
            speed_mps=self.get_speed(state),
            heading_degrees=self.get_heading(state),
        )


def _determinant_2x2(m: np.ndarray) -> float:
    return float(m[0, 0] * m[1, 1] - m[0, 1] * m[1, 0])


def _inverse_2x2(m: np.ndarray, det: float) -> np.ndarray:
    return np.array([[m[1, 1], -m[0, 1]], [-m[1, 0], m[0, 0]]], dtype=np.float64) / det
