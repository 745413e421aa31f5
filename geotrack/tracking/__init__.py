"""
Tracking Module

Per-id Kalman tracking of geographic position streams.

Components:
    - GeoTracker: record() facade over the pipeline below
    - LinearKalmanFilter: Constant Velocity Kalman Filter with gating
    - TrackStore: id -> Track ownership
    - RetentionManager: Motion-adaptive history pruning
    - TrackerConfig / MeasurementProfile: Tunables and named presets

Example:
    >>> from geotrack.tracking import GeoTracker
    >>> tracker = GeoTracker()
    >>> estimate = tracker.record("t1", [13.0, 52.0], 0)
"""

from .config import (
    MeasurementProfile,
    ResolvedMeasurementSettings,
    TrackerConfig,
    get_preset,
    get_preset_names,
    get_profile_preset,
    get_profile_preset_names,
    resolve_measurement_settings,
)
from .kalman import KalmanState, LinearKalmanFilter, UpdateOutcome
from .models import Estimate, Sample
from .retention import RetentionManager
from .store import Track, TrackStore
from .tracker import GeoTracker

__all__ = [
    "GeoTracker",
    "LinearKalmanFilter",
    "KalmanState",
    "UpdateOutcome",
    "TrackStore",
    "Track",
    "RetentionManager",
    "TrackerConfig",
    "MeasurementProfile",
    "ResolvedMeasurementSettings",
    "resolve_measurement_settings",
    "get_preset",
    "get_preset_names",
    "get_profile_preset",
    "get_profile_preset_names",
    "Estimate",
    "Sample",
]
