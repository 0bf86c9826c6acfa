"""
Tests for the great-circle helpers used for stop proximity and direction hints.
"""
import pytest

from models.geo import CompassDirection, Coordinates
from services import geo


def _north_of(point: Coordinates, meters: float) -> Coordinates:
    """Point ``meters`` due north of ``point`` on the haversine sphere."""
    return Coordinates(lat=point.lat + meters / 111194.9266, lon=point.lon)


class TestCoordinates:

    def test_valid_coordinates(self):
        coord = Coordinates(lat=22.3190, lon=87.3091)
        assert coord.lat == 22.3190
        assert coord.lon == 87.3091

    def test_latitude_validation(self):
        with pytest.raises(ValueError):
            Coordinates(lat=91, lon=0)
        with pytest.raises(ValueError):
            Coordinates(lat=-91, lon=0)

    def test_longitude_validation(self):
        with pytest.raises(ValueError):
            Coordinates(lat=0, lon=181)
        with pytest.raises(ValueError):
            Coordinates(lat=0, lon=-181)


class TestHaversine:

    def test_zero_distance(self):
        assert geo.haversine_m(22.3190, 87.3091, 22.3190, 87.3091) == 0

    def test_symmetric(self):
        forward = geo.haversine_m(22.3190, 87.3091, 22.3225, 87.3058)
        backward = geo.haversine_m(22.3225, 87.3058, 22.3190, 87.3091)
        assert forward == pytest.approx(backward)

    def test_one_degree_of_latitude(self):
        assert geo.haversine_m(0, 0, 1, 0) == pytest.approx(111194.93, rel=1e-6)

    def test_distance_between_coordinates(self):
        a = Coordinates(lat=0, lon=0)
        b = Coordinates(lat=0, lon=1)
        assert geo.distance_m(a, b) == pytest.approx(geo.haversine_m(0, 0, 0, 1))


class TestReached:

    def test_within_default_radius(self):
        stop = Coordinates(lat=22.3190, lon=87.3091)
        assert geo.reached(_north_of(stop, 20), stop)

    def test_outside_default_radius(self):
        stop = Coordinates(lat=22.3190, lon=87.3091)
        assert not geo.reached(_north_of(stop, 40), stop)

    def test_radius_is_inclusive(self):
        stop = Coordinates(lat=22.3190, lon=87.3091)
        fix = _north_of(stop, 30)
        exact = geo.distance_m(fix, stop)
        assert geo.reached(fix, stop, radius_m=exact)
        assert not geo.reached(fix, stop, radius_m=exact - 0.01)

    def test_default_radius_is_30_meters(self):
        assert geo.DEFAULT_PROXIMITY_METERS == 30.0


class TestShouldAutoClear:

    def test_clears_when_close_to_a_new_stop(self):
        stop = Coordinates(lat=22.3190, lon=87.3091)
        assert geo.should_auto_clear(_north_of(stop, 5), stop, next_stop_id=2, last_cleared_stop_id=1)

    def test_skips_the_stop_that_was_just_cleared(self):
        stop = Coordinates(lat=22.3190, lon=87.3091)
        assert not geo.should_auto_clear(stop, stop, next_stop_id=1, last_cleared_stop_id=1)

    def test_skips_when_far(self):
        stop = Coordinates(lat=22.3190, lon=87.3091)
        assert not geo.should_auto_clear(_north_of(stop, 500), stop, next_stop_id=2, last_cleared_stop_id=None)

    def test_clears_a_revisited_stop_once_departed(self):
        stop = Coordinates(lat=22.3190, lon=87.3091)
        assert geo.should_auto_clear(stop, stop, next_stop_id=1, last_cleared_stop_id=1, departed=True)


class TestBearing:

    def test_due_east(self):
        bearing = geo.initial_bearing(Coordinates(lat=0, lon=0), Coordinates(lat=0, lon=1))
        assert bearing == pytest.approx(90.0)
        assert geo.compass_octant(bearing) == CompassDirection.EAST

    def test_due_north(self):
        bearing = geo.initial_bearing(Coordinates(lat=10, lon=20), Coordinates(lat=11, lon=20))
        assert bearing == pytest.approx(0.0)
        assert geo.compass_octant(bearing) == CompassDirection.NORTH

    def test_due_south_west(self):
        bearing = geo.initial_bearing(Coordinates(lat=1, lon=1), Coordinates(lat=0, lon=0))
        assert 180 < bearing < 270
        assert geo.compass_octant(bearing) == CompassDirection.SOUTHWEST

    @pytest.mark.parametrize("bearing,expected", [
        (0, CompassDirection.NORTH),
        (22.4, CompassDirection.NORTH),
        (22.5, CompassDirection.NORTHEAST),
        (135, CompassDirection.SOUTHEAST),
        (270, CompassDirection.WEST),
        (337.4, CompassDirection.NORTHWEST),
        (337.5, CompassDirection.NORTH),
        (359.9, CompassDirection.NORTH),
        (-90, CompassDirection.WEST),
    ])
    def test_compass_octants(self, bearing, expected):
        assert geo.compass_octant(bearing) == expected


class TestFormatDistance:

    def test_meters_below_one_kilometer(self):
        assert geo.format_distance(0) == "0 meters"
        assert geo.format_distance(111.2) == "111 meters"
        assert geo.format_distance(999.4) == "999 meters"

    def test_kilometers_from_one_kilometer(self):
        assert geo.format_distance(1000) == "1.00 km"
        assert geo.format_distance(1534) == "1.53 km"

    def test_rounds_up_into_kilometers(self):
        assert geo.format_distance(999.5) == "1.00 km"
        assert geo.format_distance(999.6) == "1.00 km"
