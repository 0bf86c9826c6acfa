"""
Tests for scheduled arrivals, ETA and next-stop derivation.
"""
from datetime import time

from models.geo import CompassDirection, Coordinates
from services import eta
from services.trip_progress import TripState


class TestScheduledArrival:

    def test_adds_minutes(self):
        assert eta.scheduled_arrival(time(8, 0), 15) == time(8, 15)

    def test_wraps_past_midnight(self):
        assert eta.scheduled_arrival(time(23, 50), 20) == time(0, 10)

    def test_no_start_time(self):
        assert eta.scheduled_arrival(None, 5) is None


class TestEtaMinutes:

    def test_rounds_up(self):
        assert eta.eta_minutes(1000, 20) == 3
        assert eta.eta_minutes(1001, 20) == 4

    def test_zero_distance(self):
        assert eta.eta_minutes(0, 20) == 0

    def test_no_speed(self):
        assert eta.eta_minutes(500, 0) is None


class TestBuildProgress:

    def test_statuses(self, route_stops):
        progress = eta.build_progress(route_stops, TripState(stops_cleared=1), time(8, 0))
        assert [p.status for p in progress] == ["cleared", "next", "upcoming"]
        assert [p.scheduled_arrival for p in progress] == [time(8, 0), time(8, 5), time(8, 12)]

    def test_follows_trip_order(self, route_stops):
        progress = eta.build_progress(route_stops, TripState(stops_cleared=0, offset=1))
        assert [p.name for p in progress] == ["B", "C", "A"]
        assert [p.status for p in progress] == ["next", "upcoming", "upcoming"]
        assert progress[0].scheduled_arrival is None


class TestNextStopInfo:

    def test_without_position(self, route_stops):
        info = eta.next_stop_info(route_stops, TripState(), None, 20)
        assert info.stop.name == "A"
        assert info.distance_m is None
        assert info.eta_minutes is None

    def test_with_position(self, route_stops):
        at_a = Coordinates(lat=route_stops[0].latitude, lon=route_stops[0].longitude)
        info = eta.next_stop_info(route_stops, TripState(stops_cleared=1), at_a, 20)
        assert info.stop.name == "B"
        assert 100 < info.distance_m < 120
        assert info.distance_text.endswith("meters")
        assert info.direction == CompassDirection.NORTH
        assert info.eta_minutes == 1

    def test_empty_route(self):
        assert eta.next_stop_info([], TripState(), None, 20) is None
