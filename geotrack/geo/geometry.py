"""
Spherical Geometry Primitives with Numba JIT Optimization

The tracker only needs three things from a geometry library: the distance
between two points, translation of a point by east/north meter offsets, and
normalization of raw coordinates into canonical [longitude, latitude] form.

Coordinates follow the GeoJSON convention: (longitude, latitude) in decimal
degrees. Any third element (altitude) is accepted and dropped.

References:
    - Sinnott, R. "Virtues of the Haversine", Sky and Telescope, 1984
    - Snyder, J. "Map Projections: A Working Manual", USGS PP 1395, 1987
"""

import math
from typing import Sequence, Tuple

import numba

from .constants import (
    DEGREE_LATITUDE_METERS,
    DEGREES_TO_RADIANS,
    EARTH_CIRCUMFERENCE_METERS,
    EARTH_RADIUS_METERS,
)

Point = Tuple[float, float]

# =============================================================================
# NUMBA JIT-COMPILED FUNCTIONS
# =============================================================================


@numba.jit(nopython=True, cache=True)
def _haversine_distance_jit(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """
    JIT-compiled haversine great-circle distance

    d = 2R * asin(sqrt(sin²(Δφ/2) + cos φ1 * cos φ2 * sin²(Δλ/2)))

    Returns:
        Distance [m]
    """
    delta_lat = (lat2 - lat1) * DEGREES_TO_RADIANS
    delta_lon = (lon2 - lon1) * DEGREES_TO_RADIANS

    a = math.sin(delta_lat / 2.0) ** 2 + math.cos(lat1 * DEGREES_TO_RADIANS) * math.cos(
        lat2 * DEGREES_TO_RADIANS
    ) * math.sin(delta_lon / 2.0) ** 2

    # Rounding can push a marginally above 1 for antipodal points
    if a > 1.0:
        a = 1.0

    return EARTH_RADIUS_METERS * 2.0 * math.asin(math.sqrt(a))


@numba.jit(nopython=True, cache=True)
def _translate_jit(
    lon: float, lat: float, east_meters: float, north_meters: float
) -> Tuple[float, float]:
    """
    JIT-compiled translation along longitude first, then latitude

    The longitude step uses the length of a degree of longitude at the
    starting latitude, so precision drops for large offsets.

    Returns:
        Translated (longitude, latitude), not normalized
    """
    longitude_degree_meters = math.cos(lat * DEGREES_TO_RADIANS) * EARTH_CIRCUMFERENCE_METERS / 360.0
    new_lon = lon + east_meters / longitude_degree_meters
    new_lat = lat + north_meters / DEGREE_LATITUDE_METERS
    return new_lon, new_lat


# =============================================================================
# HIGH-LEVEL API FUNCTIONS
# =============================================================================


def validate_position(position: Sequence[float]) -> Point:
    """
    Check a raw caller-supplied coordinate.

    Args:
        position: [longitude, latitude] or [longitude, latitude, altitude]

    Returns:
        (longitude, latitude) as floats

    Raises:
        ValueError: If the position is not at least two finite numbers or
            the latitude lies outside [-90, 90]
    """
    try:
        if len(position) < 2:
            raise ValueError(f"position must contain [longitude, latitude], got {position!r}")
        lon = float(position[0])
        lat = float(position[1])
    except TypeError as e:
        raise ValueError(f"position must be a sequence of numbers, got {position!r}") from e

    if not (math.isfinite(lon) and math.isfinite(lat)):
        raise ValueError(f"position must be finite, got {position!r}")
    if lat < -90.0 or lat > 90.0:
        raise ValueError(f"Latitude {lat} is outside legal range of -90,90")

    return lon, lat


def wrap_longitude_delta(degrees: float) -> float:
    """Wrap a longitude difference into [-180, 180]."""
    if degrees > 180.0:
        return degrees - 360.0
    if degrees < -180.0:
        return degrees + 360.0
    return degrees


def normalize(position: Sequence[float]) -> Point:
    """
    Bring a coordinate into canonical [longitude, latitude] form.

    Latitudes beyond a pole are folded back (which flips the longitude by
    180°), then the longitude is wrapped into [-180, 180].

    Args:
        position: (longitude, latitude[, altitude])

    Returns:
        Normalized (longitude, latitude)
    """
    lon = float(position[0])
    lat = float(position[1])

    if lat > 90.0 or lat < -90.0:
        lat = ((lat + 90.0) % 360.0) - 90.0
        if lat > 90.0:
            lat = 180.0 - lat
            lon += 180.0

    if lon > 180.0 or lon < -180.0:
        lon = ((lon + 180.0) % 360.0) - 180.0

    return lon, lat


def distance(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Haversine distance between two (longitude, latitude) points.

    Assumes a spherical earth, so expect up to ~0.5% error.

    Returns:
        Distance [m]
    """
    return _haversine_distance_jit(float(a[0]), float(a[1]), float(b[0]), float(b[1]))


def translate(point: Sequence[float], east_meters: float, north_meters: float) -> Point:
    """
    Translate a point by east/north offsets in meters.

    Args:
        point: Origin (longitude, latitude)
        east_meters: Offset along the parallel, positive east
        north_meters: Offset along the meridian, positive north

    Returns:
        Translated (longitude, latitude); may fall outside [-180, 180],
        pass through normalize() when a canonical value is needed
    """
    return _translate_jit(float(point[0]), float(point[1]), float(east_meters), float(north_meters))
