"""
Local Tangent Plane Projection

Maps geographic points to planar east/north meters around a fixed origin
so the tracker can run linear Kalman math instead of geodesic math.

    x = R * Δλ * cos(φ̄)      (Δλ wrapped into [-180°, 180°])
    y = R * Δφ

where φ̄ is the mean latitude of origin and point. Accuracy degrades with
distance from the origin; tracks are expected to stay within tens of
kilometers of where they started.
"""

import math
from typing import Sequence, Tuple

import numba

from .constants import DEGREES_TO_RADIANS, EARTH_RADIUS_METERS
from .geometry import Point, normalize, translate, wrap_longitude_delta


@numba.jit(nopython=True, cache=True)
def _project_jit(
    origin_lon: float, origin_lat: float, lon: float, lat: float, delta_lon: float
) -> Tuple[float, float]:
    """JIT-compiled equirectangular projection around an origin."""
    mean_lat = (origin_lat + lat) / 2.0 * DEGREES_TO_RADIANS
    x = delta_lon * DEGREES_TO_RADIANS * EARTH_RADIUS_METERS * math.cos(mean_lat)
    y = (lat - origin_lat) * DEGREES_TO_RADIANS * EARTH_RADIUS_METERS
    return x, y


def project(origin: Sequence[float], point: Sequence[float]) -> Tuple[float, float]:
    """
    Project a point into local tangent meters.

    Args:
        origin: Tangent point (longitude, latitude)
        point: Point to project (longitude, latitude)

    Returns:
        (east, north) offsets from the origin [m]
    """
    origin_lon, origin_lat = float(origin[0]), float(origin[1])
    lon, lat = float(point[0]), float(point[1])
    delta_lon = wrap_longitude_delta(lon - origin_lon)
    return _project_jit(origin_lon, origin_lat, lon, lat, delta_lon)


def unproject(origin: Sequence[float], x: float, y: float) -> Point:
    """
    Inverse of project(): local meters back to a normalized geographic point.

    Args:
        origin: Tangent point (longitude, latitude)
        x: East offset [m]
        y: North offset [m]

    Returns:
        Normalized (longitude, latitude)
    """
    return normalize(translate(origin, x, y))


class LocalTangentProjector:
    """
    Projector bound to one fixed origin.

    Example:
        >>> projector = LocalTangentProjector((13.0, 52.0))
        >>> x, y = projector.project((13.001, 52.0))  # ~68.5 m east
        >>> lon, lat = projector.unproject(x, y)
    """

    def __init__(self, origin: Sequence[float]) -> None:
        self.origin: Point = normalize(origin)

    def project(self, point: Sequence[float]) -> Tuple[float, float]:
        """Geographic point to (east, north) meters."""
        return project(self.origin, point)

    def unproject(self, x: float, y: float) -> Point:
        """(east, north) meters to a geographic point."""
        return unproject(self.origin, x, y)

    def __repr__(self) -> str:
        return f"LocalTangentProjector(origin={self.origin})"
