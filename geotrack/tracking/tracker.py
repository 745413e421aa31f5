"""
Geo Tracker

Smooths noisy, irregularly timed [longitude, latitude] observations for
many independently identified objects into position, velocity and heading
estimates.

Per-observation pipeline:
    1. Validate arguments (usage errors raise ValueError before any mutation)
    2. Fetch or create the track; its first position becomes the origin
    3. Project the observation into local tangent meters
    4. Predict forward by the elapsed time (skipped when dt == 0)
    5. Gate, reweight and fuse the measurement (or reject it)
    6. Extract the estimate, append it to the history and prune

Track Lifecycle:
    created on first record() -> updated on each record() -> remove()/clear()
"""

import logging
import math
import numbers
from typing import List, Optional, Sequence, Set

from ..geo.geometry import normalize, validate_position
from ..geo.projection import project
from .config import MeasurementProfile, TrackerConfig, resolve_measurement_settings
from .kalman import LinearKalmanFilter, UpdateOutcome
from .models import Estimate, Sample
from .retention import RetentionManager
from .store import TrackStore, validate_track_id

logger = logging.getLogger(__name__)


class GeoTracker:
    """
    Kalman tracker for position streams keyed by object id.

    Features:
        - 2D constant-velocity state in local tangent meters
        - Monotonic timestamp enforcement per tracked id
        - Adaptive measurement variance and Mahalanobis outlier rejection
        - Retention window with aggressive pruning for fast-moving tracks

    Not internally synchronized per id: calls for one id must be applied in
    timestamp order by a single writer at a time.

    Example:
        >>> tracker = GeoTracker(get_preset("ble"))
        >>> estimate = tracker.record("asset-1", [13.0, 52.0], 0)
        >>> estimate = tracker.record("asset-1", [13.0001, 52.0], 1000, accuracy_meters=3.0)
        >>> print(f"{estimate.speed_mps:.1f} m/s")
    """

    def __init__(self, config: Optional[TrackerConfig] = None) -> None:
        """
        Initialize tracker.

        Args:
            config: Tracker configuration; defaults to TrackerConfig()
        """
        self._config = config or TrackerConfig()
        self.kf = LinearKalmanFilter(self._config)
        self.retention = RetentionManager(self._config)
        self._store = TrackStore(self.kf)

    @property
    def config(self) -> TrackerConfig:
        return self._config

    @property
    def store(self) -> TrackStore:
        return self._store

    def record(
        self,
        track_id: str,
        position: Sequence[float],
        timestamp_millis: int,
        accuracy_meters: Optional[float] = None,
        profile: Optional[MeasurementProfile] = None,
    ) -> Estimate:
        """
        Record a new observation for a tracked object.

        Args:
            track_id: Stable object identifier
            position: Observed [longitude, latitude] (altitude ignored)
            timestamp_millis: Epoch milliseconds, non-decreasing per id
            accuracy_meters: Optional sample-specific 1-sigma accuracy
            profile: Optional sample-specific measurement profile

        Returns:
            Filtered estimate after processing this observation

        Raises:
            ValueError: On blank id, malformed position, negative or
                out-of-order timestamp, non-positive accuracy or an
                inconsistent profile. The track is left unchanged.
        """
        validate_track_id(track_id)
        lon, lat = validate_position(position)
        _validate_timestamp(timestamp_millis)
        if accuracy_meters is not None and not (
            isinstance(accuracy_meters, numbers.Real)
            and not isinstance(accuracy_meters, bool)
            and math.isfinite(accuracy_meters)
            and accuracy_meters > 0
        ):
            raise ValueError(f"accuracy_meters must be a finite number > 0, got {accuracy_meters!r}")
        settings = resolve_measurement_settings(self._config, profile)

        measured = normalize((lon, lat))

        existing = self._store.get(track_id)
        if existing is not None and timestamp_millis < existing.last_timestamp_millis:
            raise ValueError(
                f"timestamp_millis must be monotonic per id. id={track_id} "
                f"last={existing.last_timestamp_millis} got={timestamp_millis}"
            )

        track = self._store.get_or_create(track_id, measured, timestamp_millis)

        # Time update
        delta_millis = timestamp_millis - track.last_timestamp_millis
        if delta_millis > 0:
            track.filter_state = self.kf.predict(track.filter_state, delta_millis / 1000.0)
        track.last_timestamp_millis = timestamp_millis

        # Measurement update
        measurement = project(track.origin, measured)
        track.filter_state, outcome = self.kf.update(
            track.filter_state,
            measurement,
            settings.variance(accuracy_meters),
            settings.outlier_threshold,
        )
        accepted = outcome is UpdateOutcome.FUSED
        if not accepted:
            logger.debug(
                f"Track {track_id!r}: measurement at t={timestamp_millis} not fused "
                f"({outcome.value})"
            )

        estimate = self.kf.estimate(track.filter_state, track.origin, timestamp_millis)
        track.samples.append(
            Sample(
                timestamp_millis=timestamp_millis,
                measured_position=measured,
                accuracy_meters=accuracy_meters,
                estimate=estimate,
                accepted=accepted,
            )
        )
        self.retention.apply(
            track,
            timestamp_millis,
            allow_arming=accepted or self._config.rejected_measurements_arm_pruning,
        )
        return estimate

    def estimate_for(self, track_id: str) -> Optional[Estimate]:
        """Most recent estimate for the given id, or None if the id is unknown."""
        return self._store.estimate_for(track_id)

    def sample_count(self, track_id: str) -> int:
        """Number of retained samples for the given id."""
        return self._store.sample_count(track_id)

    def samples(self, track_id: str) -> List[Sample]:
        """Snapshot of retained samples for the given id."""
        return self._store.samples(track_id)

    def tracked_ids(self) -> Set[str]:
        """Currently tracked ids."""
        return self._store.tracked_ids()

    def remove(self, track_id: str) -> bool:
        """Remove all state for one id."""
        return self._store.remove(track_id)

    def clear(self) -> None:
        """Remove all tracked ids and state."""
        self._store.clear()


def _validate_timestamp(timestamp_millis: int) -> None:
    if isinstance(timestamp_millis, bool) or not isinstance(timestamp_millis, numbers.Integral):
        raise ValueError(f"timestamp_millis must be an integer, got {timestamp_millis!r}")
    if timestamp_millis < 0:
        raise ValueError(f"timestamp_millis must be >= 0, got {timestamp_millis}")
