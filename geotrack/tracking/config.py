"""
Tracker Configuration and Measurement Profiles

Immutable, validated tunables for the geo tracker plus named presets for
common positioning technologies.

Two layers:
    - TrackerConfig: global filter, gating and retention parameters
    - MeasurementProfile: optional per-sample override of measurement trust
      and outlier gating, merged field by field over the config at the
      point of use

Typical 1-sigma horizontal accuracy of the preset sensor classes:
    - GPS (outdoor, vehicle): 3-10 m, occasional multipath jumps of 50 m+
    - GPS (indoor / urban canyon): 5-30 m
    - BLE trilateration: 1-5 m with intermittent jumps
    - UWB ranging: 0.1-0.5 m

Reference:
    - Groves, P. "Principles of GNSS, Inertial, and Multisensor Integrated
      Navigation Systems", 2nd Ed., 2013
    - Zafari, F. et al. "A Survey of Indoor Localization Systems and
      Technologies", IEEE Comm. Surveys & Tutorials, 2019
"""

import math
import numbers
from dataclasses import asdict, dataclass, fields, replace
from typing import Dict, List, Optional

# =============================================================================
# GLOBAL TRACKER CONFIGURATION
# =============================================================================


@dataclass(frozen=True)
class TrackerConfig:
    """
    Global tracking and filtering configuration.

    The state model is constant velocity in local tangent plane meters:
    x = [east, north, v_east, v_north].

    Attributes:
        time_window_millis: Sample history retained under normal movement [ms]
        fast_movement_window_millis: Shorter retention while moving fast [ms]
        high_speed_threshold_mps: Speed that arms aggressive pruning [m/s]
        substantial_movement_meters: Displacement across the retained history
            that arms aggressive pruning [m]
        process_noise_position_meters: Random-walk position noise per √s [m]
        process_noise_acceleration_mps2: White acceleration noise [m/s²]
        base_measurement_noise_meters: Default 1-sigma measurement error [m]
        min_measurement_noise_meters: Lower clamp on measurement error [m]
        max_measurement_noise_meters: Upper clamp on measurement error [m]
        outlier_mahalanobis_threshold: Squared Mahalanobis distance above
            which a measurement is rejected
        innovation_variance_scale: Inflation of measurement variance per unit
            of squared Mahalanobis distance
        initial_uncertainty_meters: 1-sigma position uncertainty of a new track [m]
        initial_speed_uncertainty_mps: 1-sigma velocity uncertainty of a new track [m/s]
        min_speed_for_direction_mps: Below this speed heading is undefined [m/s]
        min_process_noise_dt_seconds: Floor on the elapsed time used for the
            process noise only, so back-to-back samples still inject some
            uncertainty [s]
        rejected_measurements_arm_pruning: Whether a sample whose measurement
            was gated out may still arm aggressive pruning
    """

    time_window_millis: int = 45_000
    fast_movement_window_millis: int = 10_000
    high_speed_threshold_mps: float = 4.0
    substantial_movement_meters: float = 25.0
    process_noise_position_meters: float = 1.8
    process_noise_acceleration_mps2: float = 0.9
    base_measurement_noise_meters: float = 6.0
    min_measurement_noise_meters: float = 0.8
    max_measurement_noise_meters: float = 35.0
    outlier_mahalanobis_threshold: float = 16.0
    innovation_variance_scale: float = 0.35
    initial_uncertainty_meters: float = 20.0
    initial_speed_uncertainty_mps: float = 4.0
    min_speed_for_direction_mps: float = 0.25
    min_process_noise_dt_seconds: float = 1e-3
    rejected_measurements_arm_pruning: bool = True

    def __post_init__(self) -> None:
        """Validate parameter types, ranges and mutual consistency."""
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name.endswith("_millis"):
                _require_integer(f.name, value)
            elif f.name == "rejected_measurements_arm_pruning":
                _require(isinstance(value, bool), f"{f.name} must be a bool, got {value!r}")
            else:
                _require_number(f.name, value)

        _require(self.time_window_millis > 0, "time_window_millis must be > 0")
        _require(
            0 < self.fast_movement_window_millis <= self.time_window_millis,
            "fast_movement_window_millis must be > 0 and <= time_window_millis",
        )
        _require(self.high_speed_threshold_mps > 0, "high_speed_threshold_mps must be > 0")
        _require(self.substantial_movement_meters > 0, "substantial_movement_meters must be > 0")
        _require(
            self.process_noise_position_meters > 0, "process_noise_position_meters must be > 0"
        )
        _require(
            self.process_noise_acceleration_mps2 > 0,
            "process_noise_acceleration_mps2 must be > 0",
        )
        _require(
            self.base_measurement_noise_meters > 0, "base_measurement_noise_meters must be > 0"
        )
        _require(self.min_measurement_noise_meters > 0, "min_measurement_noise_meters must be > 0")
        _require(
            self.max_measurement_noise_meters >= self.min_measurement_noise_meters,
            "max_measurement_noise_meters must be >= min_measurement_noise_meters",
        )
        _require(
            self.outlier_mahalanobis_threshold > 0, "outlier_mahalanobis_threshold must be > 0"
        )
        _require(self.innovation_variance_scale >= 0, "innovation_variance_scale must be >= 0")
        _require(self.initial_uncertainty_meters > 0, "initial_uncertainty_meters must be > 0")
        _require(
            self.initial_speed_uncertainty_mps > 0, "initial_speed_uncertainty_mps must be > 0"
        )
        _require(self.min_speed_for_direction_mps >= 0, "min_speed_for_direction_mps must be >= 0")
        _require(self.min_process_noise_dt_seconds > 0, "min_process_noise_dt_seconds must be > 0")

    def with_overrides(self, **changes) -> "TrackerConfig":
        """Return a validated copy with the given fields replaced."""
        return replace(self, **changes)

    def to_dict(self) -> Dict:
        """Convert config to dictionary for logging/serialization."""
        return asdict(self)


# =============================================================================
# PER-SAMPLE MEASUREMENT PROFILE
# =============================================================================


@dataclass(frozen=True)
class ResolvedMeasurementSettings:
    """Measurement settings after merging a profile over the config."""

    base_noise_meters: float
    min_noise_meters: float
    max_noise_meters: float
    outlier_threshold: float

    def variance(self, accuracy_meters: Optional[float] = None) -> float:
        """
        Measurement variance for one sample.

        The explicit accuracy hint wins over the base noise; either is
        clamped to [min, max] before squaring.
        """
        stddev = accuracy_meters if accuracy_meters is not None else self.base_noise_meters
        stddev = min(max(stddev, self.min_noise_meters), self.max_noise_meters)
        return stddev * stddev


@dataclass(frozen=True)
class MeasurementProfile:
    """
    Optional per-sample measurement tuning.

    Use this when one track receives mixed sensor updates (e.g. GPS + BLE +
    UWB). Fields left as None fall back to the tracker configuration.
    """

    base_measurement_noise_meters: Optional[float] = None
    min_measurement_noise_meters: Optional[float] = None
    max_measurement_noise_meters: Optional[float] = None
    outlier_mahalanobis_threshold: Optional[float] = None

    def __post_init__(self) -> None:
        for name in (
            "base_measurement_noise_meters",
            "min_measurement_noise_meters",
            "max_measurement_noise_meters",
            "outlier_mahalanobis_threshold",
        ):
            value = getattr(self, name)
            if value is not None:
                _require_number(name, value)
                _require(value > 0, f"{name} must be > 0")

        if self.min_measurement_noise_meters is not None and self.max_measurement_noise_meters is not None:
            _require(
                self.max_measurement_noise_meters >= self.min_measurement_noise_meters,
                "max_measurement_noise_meters must be >= min_measurement_noise_meters",
            )

    def resolve(self, config: TrackerConfig) -> ResolvedMeasurementSettings:
        """
        Merge this profile over the configuration defaults.

        Raises:
            ValueError: If the merged min noise exceeds the merged max noise
        """
        return _merge(config, self)


def resolve_measurement_settings(
    config: TrackerConfig, profile: Optional[MeasurementProfile] = None
) -> ResolvedMeasurementSettings:
    """Measurement settings for one sample, with or without a profile."""
    if profile is None:
        return ResolvedMeasurementSettings(
            base_noise_meters=config.base_measurement_noise_meters,
            min_noise_meters=config.min_measurement_noise_meters,
            max_noise_meters=config.max_measurement_noise_meters,
            outlier_threshold=config.outlier_mahalanobis_threshold,
        )
    return profile.resolve(config)


def _merge(config: TrackerConfig, profile: MeasurementProfile) -> ResolvedMeasurementSettings:
    def pick(override: Optional[float], default: float) -> float:
        return default if override is None else override

    settings = ResolvedMeasurementSettings(
        base_noise_meters=pick(
            profile.base_measurement_noise_meters, config.base_measurement_noise_meters
        ),
        min_noise_meters=pick(
            profile.min_measurement_noise_meters, config.min_measurement_noise_meters
        ),
        max_noise_meters=pick(
            profile.max_measurement_noise_meters, config.max_measurement_noise_meters
        ),
        outlier_threshold=pick(
            profile.outlier_mahalanobis_threshold, config.outlier_mahalanobis_threshold
        ),
    )
    _require(
        settings.max_noise_meters >= settings.min_noise_meters,
        f"merged measurement noise range is empty: min={settings.min_noise_meters} "
        f"max={settings.max_noise_meters}",
    )
    return settings


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(message)


def _require_number(name: str, value) -> None:
    _require(
        isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value),
        f"{name} must be a finite number, got {value!r}",
    )


def _require_integer(name: str, value) -> None:
    _require(
        isinstance(value, numbers.Integral) and not isinstance(value, bool),
        f"{name} must be an integer, got {value!r}",
    )


# =============================================================================
# HARDCODED PRESETS
# =============================================================================

TRACKER_PRESETS: Dict[str, TrackerConfig] = {
    # Fast outdoor vehicle movement with GPS quality updates
    "gps_outdoor_vehicle": TrackerConfig(
        time_window_millis=120_000,
        fast_movement_window_millis=20_000,
        high_speed_threshold_mps=18.0,  # ~65 km/h
        substantial_movement_meters=150.0,
        process_noise_position_meters=4.0,
        process_noise_acceleration_mps2=2.2,
        base_measurement_noise_meters=10.0,
        min_measurement_noise_meters=3.0,
        max_measurement_noise_meters=60.0,
        outlier_mahalanobis_threshold=20.0,
        innovation_variance_scale=0.25,
        initial_uncertainty_meters=40.0,
        initial_speed_uncertainty_mps=12.0,
        min_speed_for_direction_mps=1.0,
    ),
    # Indoor, low-speed movement with occasional GPS-like jumps
    "gps_indoor_slow": TrackerConfig(
        time_window_millis=45_000,
        fast_movement_window_millis=10_000,
        high_speed_threshold_mps=4.0,  # running pace
        substantial_movement_meters=25.0,
        process_noise_position_meters=1.8,
        process_noise_acceleration_mps2=0.9,
        base_measurement_noise_meters=6.0,
        min_measurement_noise_meters=0.8,
        max_measurement_noise_meters=35.0,
        outlier_mahalanobis_threshold=16.0,
        innovation_variance_scale=0.35,
        initial_uncertainty_meters=20.0,
        initial_speed_uncertainty_mps=4.0,
        min_speed_for_direction_mps=0.25,
    ),
    # BLE-based location streams indoors
    "ble": TrackerConfig(
        time_window_millis=30_000,
        fast_movement_window_millis=8_000,
        high_speed_threshold_mps=3.0,
        substantial_movement_meters=18.0,
        process_noise_position_meters=2.2,
        process_noise_acceleration_mps2=1.0,
        base_measurement_noise_meters=5.0,
        min_measurement_noise_meters=1.2,
        max_measurement_noise_meters=18.0,
        outlier_mahalanobis_threshold=12.0,
        innovation_variance_scale=0.45,
        initial_uncertainty_meters=15.0,
        initial_speed_uncertainty_mps=3.0,
        min_speed_for_direction_mps=0.2,
    ),
    # Low-latency, high-precision UWB positioning
    "uwb": TrackerConfig(
        time_window_millis=20_000,
        fast_movement_window_millis=5_000,
        high_speed_threshold_mps=3.0,
        substantial_movement_meters=12.0,
        process_noise_position_meters=0.9,
        process_noise_acceleration_mps2=0.7,
        base_measurement_noise_meters=1.0,
        min_measurement_noise_meters=0.2,
        max_measurement_noise_meters=4.0,
        outlier_mahalanobis_threshold=9.0,
        innovation_variance_scale=0.2,
        initial_uncertainty_meters=6.0,
        initial_speed_uncertainty_mps=2.0,
        min_speed_for_direction_mps=0.1,
    ),
}

PROFILE_PRESETS: Dict[str, MeasurementProfile] = {
    # Outdoor GPS with faster motion and larger raw error spread
    "gps_outdoor_vehicle": MeasurementProfile(
        base_measurement_noise_meters=10.0,
        min_measurement_noise_meters=3.0,
        max_measurement_noise_meters=60.0,
        outlier_mahalanobis_threshold=20.0,
    ),
    # Indoor GPS-like updates with lower motion and moderate jitter
    "gps_indoor_slow": MeasurementProfile(
        base_measurement_noise_meters=6.0,
        min_measurement_noise_meters=0.8,
        max_measurement_noise_meters=35.0,
        outlier_mahalanobis_threshold=16.0,
    ),
    # BLE trilateration / proximity positioning with intermittent jumps
    "ble": MeasurementProfile(
        base_measurement_noise_meters=5.0,
        min_measurement_noise_meters=1.2,
        max_measurement_noise_meters=18.0,
        outlier_mahalanobis_threshold=12.0,
    ),
    # UWB ranging with low noise and tight outlier gating
    "uwb": MeasurementProfile(
        base_measurement_noise_meters=1.0,
        min_measurement_noise_meters=0.2,
        max_measurement_noise_meters=4.0,
        outlier_mahalanobis_threshold=9.0,
    ),
}


def get_preset(name: str) -> Optional[TrackerConfig]:
    """
    Get a tracker config preset by name.

    Args:
        name: Preset name (e.g., "gps_outdoor_vehicle")

    Returns:
        TrackerConfig instance or None if not found
    """
    return TRACKER_PRESETS.get(name)


def get_preset_names() -> List[str]:
    """Get list of available tracker preset names."""
    return list(TRACKER_PRESETS.keys())


def get_profile_preset(name: str) -> Optional[MeasurementProfile]:
    """Get a measurement profile preset by name, or None if not found."""
    return PROFILE_PRESETS.get(name)


def get_profile_preset_names() -> List[str]:
    """Get list of available measurement profile preset names."""
    return list(PROFILE_PRESETS.keys())
