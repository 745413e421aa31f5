"""
Geodesy Constants for Position Tracking

Spherical-earth constants shared by the geometry kernels and the local
tangent projector. All values are in SI units.

References:
    - Moritz, H. "Geodetic Reference System 1980", Bulletin Geodesique, 1980
    - Sinnott, R. "Virtues of the Haversine", Sky and Telescope, 1984
"""

import math
from typing import Final

# =============================================================================
# EARTH PARAMETERS
# =============================================================================

EARTH_RADIUS_METERS: Final[float] = 6_371_000.0
"""Mean Earth radius [m] - IUGG mean radius of the WGS84 ellipsoid"""

EARTH_CIRCUMFERENCE_METERS: Final[float] = EARTH_RADIUS_METERS * math.pi * 2.0
"""Circumference of the spherical Earth model [m]"""

DEGREE_LATITUDE_METERS: Final[float] = EARTH_RADIUS_METERS * math.pi / 180.0
"""Length of one degree of latitude [m] (~111.2 km)"""

# =============================================================================
# ANGLE CONVERSION
# =============================================================================

DEGREES_TO_RADIANS: Final[float] = math.pi / 180.0
"""Multiply degrees by this factor to get radians"""

RADIANS_TO_DEGREES: Final[float] = 180.0 / math.pi
"""Multiply radians by this factor to get degrees"""
