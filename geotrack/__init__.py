"""
geotrack Source Package

Kalman smoothing of noisy geographic position streams:
- Constant-velocity filter in a local tangent plane
- Mahalanobis outlier gating and adaptive measurement noise
- Motion-adaptive history retention per track
- Presets for GPS, BLE and UWB positioning
"""

from geotrack.geo import LocalTangentProjector, distance, normalize, translate
from geotrack.io import ConfigLoader, load_config
from geotrack.tracking import (
    Estimate,
    GeoTracker,
    MeasurementProfile,
    Sample,
    TrackerConfig,
    get_preset,
    get_preset_names,
    get_profile_preset,
)

__version__ = "1.0.0"
__author__ = "geotrack Contributors"

__all__ = [
    # Tracking
    "GeoTracker",
    "TrackerConfig",
    "MeasurementProfile",
    "Estimate",
    "Sample",
    "get_preset",
    "get_preset_names",
    "get_profile_preset",
    # Geometry
    "distance",
    "translate",
    "normalize",
    "LocalTangentProjector",
    # Config files
    "ConfigLoader",
    "load_config",
]
