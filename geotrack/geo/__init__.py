"""
Geo Module

Spherical geometry collaborators and the local tangent plane projector used
by the tracker.

Components:
    - distance: Haversine distance between two points
    - translate: Offset a point by east/north meters
    - normalize: Canonical [longitude, latitude] form
    - LocalTangentProjector: Geographic <-> local east/north meters
"""

from .geometry import Point, distance, normalize, translate, validate_position
from .projection import LocalTangentProjector, project, unproject

__all__ = [
    "Point",
    "distance",
    "translate",
    "normalize",
    "validate_position",
    "LocalTangentProjector",
    "project",
    "unproject",
]
