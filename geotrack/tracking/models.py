"""
Tracker Output Types

Immutable value objects handed back to callers: the filtered Estimate and
the retained Sample history entries.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class Estimate:
    """
    Filtered state of one track at one instant.

    Attributes:
        timestamp_millis: Timestamp of the estimate (epoch milliseconds)
        position: Filtered (longitude, latitude)
        east_velocity_mps: East-west velocity, positive east [m/s]
        north_velocity_mps: North-south velocity, positive north [m/s]
        speed_mps: Scalar speed [m/s]
        heading_degrees: Compass bearing clockwise from north in [0, 360),
            or None while effectively stationary
    """

    timestamp_millis: int
    position: Tuple[float, float]
    east_velocity_mps: float
    north_velocity_mps: float
    speed_mps: float
    heading_degrees: Optional[float] = None

    @property
    def longitude(self) -> float:
        return self.position[0]

    @property
    def latitude(self) -> float:
        return self.position[1]

    @property
    def is_stationary(self) -> bool:
        """True when the speed is too low for a meaningful heading."""
        return self.heading_degrees is None

    def to_dict(self) -> Dict:
        """Convert estimate to dictionary for logging/serialization."""
        return {
            "timestamp_millis": self.timestamp_millis,
            "position": list(self.position),
            "east_velocity_mps": self.east_velocity_mps,
            "north_velocity_mps": self.north_velocity_mps,
            "speed_mps": self.speed_mps,
            "heading_degrees": self.heading_degrees,
        }


@dataclass(frozen=True)
class Sample:
    """
    One retained input observation and the estimate it produced.

    Attributes:
        timestamp_millis: Original input timestamp (epoch milliseconds)
        measured_position: Raw observed (longitude, latitude), normalized
        accuracy_meters: Caller-supplied 1-sigma accuracy, if any
        estimate: Filtered estimate after processing this observation
        accepted: False when the measurement was gated out as an outlier
            or skipped as numerically degenerate
    """

    timestamp_millis: int
    measured_position: Tuple[float, float]
    accuracy_meters: Optional[float]
    estimate: Estimate
    accepted: bool = True
