"""
geotrack Geometry and Projection Test Suite

Test ID | Description                        | Reference              | Tolerance
--------|------------------------------------|------------------------|------------
1       | Haversine distance                 | R * Δφ on a meridian   | ±1e-6 m
2       | Translation by meter offsets       | distance() round trip  | ±1 mm
3       | Coordinate normalization           | GeoJSON lon/lat ranges | Exact
4       | Raw position validation            | Usage errors           | ValueError
5       | Local tangent projection           | Equirectangular        | ±1e-6 m
6       | Antimeridian handling              | Wrapped Δλ             | Sign + magnitude

References:
    - Sinnott, R. (1984). "Virtues of the Haversine"
    - Snyder, J. (1987). "Map Projections: A Working Manual"
"""

import math
import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from geotrack.geo.constants import DEGREE_LATITUDE_METERS, EARTH_RADIUS_METERS
from geotrack.geo.geometry import distance, normalize, translate, validate_position
from geotrack.geo.projection import LocalTangentProjector, project, unproject

BERLIN = (13.0, 52.0)

# =============================================================================
# TEST 1: Haversine Distance
# =============================================================================


class TestDistance:
    """Validate haversine distance on the spherical earth model."""

    def test_same_point_is_zero(self):
        assert distance(BERLIN, BERLIN) == pytest.approx(0.0, abs=1e-9)

    def test_one_degree_of_latitude(self):
        """One degree along a meridian is R * π / 180"""
        assert distance((0.0, 0.0), (0.0, 1.0)) == pytest.approx(DEGREE_LATITUDE_METERS, rel=1e-9)

    def test_symmetric(self):
        a = (13.4, 52.5)
        b = (2.35, 48.86)
        assert distance(a, b) == pytest.approx(distance(b, a))

    def test_berlin_paris(self):
        """Berlin-Paris great circle is roughly 878 km"""
        d = distance((13.405, 52.52), (2.3522, 48.8566))
        assert 870_000 < d < 885_000

    def test_antipodal_points(self):
        """Half the circumference, without domain errors from rounding"""
        assert distance((0.0, 0.0), (180.0, 0.0)) == pytest.approx(
            math.pi * EARTH_RADIUS_METERS, rel=1e-9
        )

    def test_accepts_altitude(self):
        assert distance((13.0, 52.0, 100.0), (13.0, 52.0, 5.0)) == pytest.approx(0.0, abs=1e-9)


# =============================================================================
# TEST 2: Translation
# =============================================================================


class TestTranslate:
    """Translate by east/north meters and measure the result."""

    def test_north(self):
        moved = translate(BERLIN, 0.0, 1000.0)
        assert moved[0] == BERLIN[0]
        assert distance(BERLIN, moved) == pytest.approx(1000.0, abs=1e-6)

    def test_east(self):
        moved = translate(BERLIN, 1000.0, 0.0)
        assert moved[1] == BERLIN[1]
        assert distance(BERLIN, moved) == pytest.approx(1000.0, abs=1e-3)

    def test_negative_offsets(self):
        moved = translate(BERLIN, -250.0, -250.0)
        assert moved[0] < BERLIN[0]
        assert moved[1] < BERLIN[1]

    def test_zero_offset_is_identity(self):
        assert translate(BERLIN, 0.0, 0.0) == BERLIN


# =============================================================================
# TEST 3: Normalization
# =============================================================================


class TestNormalize:
    """Canonical [longitude, latitude] form."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ((13.0, 52.0), (13.0, 52.0)),
            ((190.0, 10.0), (-170.0, 10.0)),
            ((-190.0, 0.0), (170.0, 0.0)),
            ((540.0, 0.0), (-180.0, 0.0)),
            ((180.0, 0.0), (180.0, 0.0)),
            ((10.0, 95.0), (-170.0, 85.0)),
            ((10.0, -95.0), (-170.0, -85.0)),
        ],
    )
    def test_normalize(self, raw, expected):
        lon, lat = normalize(raw)
        assert lon == pytest.approx(expected[0])
        assert lat == pytest.approx(expected[1])

    def test_drops_altitude(self):
        assert normalize((1.0, 2.0, 300.0)) == (1.0, 2.0)


# =============================================================================
# TEST 4: Position Validation
# =============================================================================


class TestValidatePosition:
    """Malformed positions are usage errors."""

    @pytest.mark.parametrize(
        "position",
        [
            [],
            [13.0],
            None,
            ["east", "north"],
            [float("nan"), 52.0],
            [13.0, float("inf")],
            [13.0, 90.5],
            [13.0, -91.0],
        ],
    )
    def test_rejects_malformed(self, position):
        with pytest.raises(ValueError):
            validate_position(position)

    def test_accepts_altitude(self):
        assert validate_position([13.0, 52.0, 120.0]) == (13.0, 52.0)

    def test_accepts_unwrapped_longitude(self):
        """Longitude is wrapped later by normalize(), not rejected"""
        assert validate_position([190.0, 10.0]) == (190.0, 10.0)

    def test_converts_to_float(self):
        lon, lat = validate_position((13, 52))
        assert isinstance(lon, float) and isinstance(lat, float)


# =============================================================================
# TEST 5: Local Tangent Projection
# =============================================================================


class TestProjection:
    """Equirectangular projection around a fixed origin."""

    def test_origin_projects_to_zero(self):
        assert project(BERLIN, BERLIN) == pytest.approx((0.0, 0.0), abs=1e-9)

    def test_north_offset(self):
        x, y = project(BERLIN, translate(BERLIN, 0.0, 1000.0))
        assert x == pytest.approx(0.0, abs=1e-9)
        assert y == pytest.approx(1000.0, abs=1e-6)

    def test_east_offset(self):
        x, y = project(BERLIN, translate(BERLIN, 500.0, 0.0))
        assert x == pytest.approx(500.0, abs=1e-6)
        assert y == pytest.approx(0.0, abs=1e-9)

    def test_unproject_inverts_axis_aligned_offsets(self):
        for east, north in [(0.0, 750.0), (-750.0, 0.0), (1200.0, 0.0)]:
            point = translate(BERLIN, east, north)
            x, y = project(BERLIN, point)
            back = unproject(BERLIN, x, y)
            assert back[0] == pytest.approx(point[0], abs=1e-9)
            assert back[1] == pytest.approx(point[1], abs=1e-9)

    def test_projector_binds_origin(self):
        projector = LocalTangentProjector((190.0, 10.0))
        assert projector.origin == pytest.approx((-170.0, 10.0))
        assert projector.project(projector.origin) == pytest.approx((0.0, 0.0), abs=1e-9)


# =============================================================================
# TEST 6: Antimeridian
# =============================================================================


class TestAntimeridian:
    """Longitude deltas are wrapped before scaling."""

    def test_crossing_eastward_is_small_and_positive(self):
        x, _ = project((179.9999, 0.0), (-179.9999, 0.0))
        assert x == pytest.approx(0.0002 * DEGREE_LATITUDE_METERS, rel=1e-6)

    def test_crossing_westward_is_small_and_negative(self):
        x, _ = project((-179.9999, 0.0), (179.9999, 0.0))
        assert x == pytest.approx(-0.0002 * DEGREE_LATITUDE_METERS, rel=1e-6)

    def test_unproject_wraps_into_range(self):
        lon, lat = unproject((179.9999, 0.0), 50.0, 0.0)
        assert -180.0 <= lon <= 180.0
        assert lon < 0
        assert lat == pytest.approx(0.0)
