"""
Tracker Config Loader

YAML-based configuration parser for geotrack.

Loads a TrackerConfig and any number of named MeasurementProfiles from a
YAML file. Both sections may start from a named preset and override
individual fields.

File layout:
    tracker:
      preset: ble                  # optional base preset
      time_window_millis: 30000
    profiles:
      anchor_uwb:
        preset: uwb                # optional base profile preset
        outlier_mahalanobis_threshold: 7.5

Usage:
    loader = ConfigLoader('config/warehouse.yaml')
    tracker = GeoTracker(loader.get_config())
"""

import logging
import os
from dataclasses import asdict, fields
from typing import Any, Dict, Optional

import yaml

from ..tracking.config import (
    MeasurementProfile,
    TrackerConfig,
    get_preset,
    get_preset_names,
    get_profile_preset,
    get_profile_preset_names,
)

logger = logging.getLogger(__name__)

_TRACKER_FIELDS = {f.name for f in fields(TrackerConfig)}
_PROFILE_FIELDS = {f.name for f in fields(MeasurementProfile)}


class ConfigLoader:
    """
    Loads tracker configuration from YAML files.

    Usage:
        loader = ConfigLoader('config/warehouse.yaml')
        config = loader.get_config()
        ble = loader.get_profile('ble_beacons')
    """

    def __init__(self, filepath: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            filepath: Path to YAML config file (optional)
        """
        self.filepath = filepath
        self.data: Dict[str, Any] = {}
        self._config: Optional[TrackerConfig] = None
        self._profiles: Dict[str, MeasurementProfile] = {}

        if filepath:
            self.load(filepath)

    def load(self, filepath: str) -> bool:
        """
        Load configuration from YAML file.

        Args:
            filepath: Path to YAML config file

        Returns:
            True if loaded successfully

        Raises:
            FileNotFoundError: If file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            ValueError: On unknown keys, unknown presets or invalid values
        """
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Config file not found: {filepath}")

        self.filepath = filepath

        with open(filepath, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)

        self.load_dict(data or {})
        logger.info(f"Loaded tracker config from {filepath} ({len(self._profiles)} profiles)")
        return True

    def load_dict(self, data: Dict[str, Any]) -> None:
        """Parse an already-decoded configuration mapping."""
        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        unknown = set(data) - {"tracker", "profiles"}
        if unknown:
            raise ValueError(f"Unknown config sections: {sorted(unknown)}")

        self.data = data
        self._config = self._parse_tracker()
        self._profiles = self._parse_profiles()

    def _parse_tracker(self) -> TrackerConfig:
        """Parse the tracker section into a TrackerConfig."""
        section = _mapping(self.data.get("tracker"), "tracker")
        preset_name = section.pop("preset", None)

        base = TrackerConfig()
        if preset_name is not None:
            base = get_preset(preset_name) if isinstance(preset_name, str) else None
            if base is None:
                raise ValueError(
                    f"Unknown tracker preset {preset_name!r}; "
                    f"available: {get_preset_names()}"
                )

        _check_keys(section, _TRACKER_FIELDS, "tracker")
        return base.with_overrides(**section)

    def _parse_profiles(self) -> Dict[str, MeasurementProfile]:
        """Parse named measurement profiles."""
        profiles = {}

        for name, raw in _mapping(self.data.get("profiles"), "profiles").items():
            section = _mapping(raw, f"profiles.{name}")
            preset_name = section.pop("preset", None)

            values: Dict[str, Any] = {}
            if preset_name is not None:
                preset = get_profile_preset(preset_name) if isinstance(preset_name, str) else None
                if preset is None:
                    raise ValueError(
                        f"Unknown profile preset {preset_name!r} in profile {name!r}; "
                        f"available: {get_profile_preset_names()}"
                    )
                values.update(asdict(preset))

            _check_keys(section, _PROFILE_FIELDS, f"profiles.{name}")
            values.update(section)
            profiles[str(name)] = MeasurementProfile(**values)

        return profiles

    def get_config(self) -> Optional[TrackerConfig]:
        """
        Get parsed tracker configuration.

        Returns:
            TrackerConfig or None if not loaded
        """
        return self._config

    def get_profiles(self) -> Dict[str, MeasurementProfile]:
        """Get all named measurement profiles."""
        return dict(self._profiles)

    def get_profile(self, name: str) -> Optional[MeasurementProfile]:
        """Get one named measurement profile, or None if not defined."""
        return self._profiles.get(name)


def _mapping(section: Any, where: str) -> Dict[str, Any]:
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"{where} must be a mapping, got {type(section).__name__}")
    return dict(section)


def _check_keys(section: Dict[str, Any], allowed: set, where: str) -> None:
    unknown = set(section) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in {where}: {sorted(unknown)}")


def load_config(filepath: str) -> TrackerConfig:
    """
    Convenience function to load a tracker config file.

    Args:
        filepath: Path to YAML config file

    Returns:
        TrackerConfig instance
    """
    loader = ConfigLoader(filepath)
    return loader.get_config()
