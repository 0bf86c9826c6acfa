"""
Tests for the circular trip-progress state machine.
"""
import pytest

from services import trip_progress
from services.errors import EmptyRouteError, InvalidStopError
from services.trip_progress import TripState


class TestRouteIndex:

    def test_wraps_around(self):
        assert trip_progress.route_index(0, 3) == 0
        assert trip_progress.route_index(2, 3) == 2
        assert trip_progress.route_index(3, 3) == 0

    def test_offset_rotates_the_route(self):
        assert trip_progress.route_index(0, 3, offset=2) == 2
        assert trip_progress.route_index(1, 3, offset=2) == 0

    def test_last_cleared_before_first_clear_is_last_stop(self):
        assert trip_progress.last_cleared_index(0, 3) == 2

    def test_empty_route(self):
        with pytest.raises(EmptyRouteError):
            trip_progress.route_index(0, 0)


class TestAdvance:

    def test_three_stop_loop(self, route_stops):
        """A -> B -> C -> A: the counter wraps back to 0 after the last stop."""
        state = TripState()
        assert trip_progress.next_stop(route_stops, state.stops_cleared).name == "A"
        assert trip_progress.last_cleared_stop(route_stops, state.stops_cleared).name == "C"

        state = trip_progress.advance(route_stops, state, 11)
        assert state.stops_cleared == 1
        assert trip_progress.next_stop(route_stops, state.stops_cleared).name == "B"
        assert trip_progress.last_cleared_stop(route_stops, state.stops_cleared).name == "A"

        state = trip_progress.advance(route_stops, state, 12)
        state = trip_progress.advance(route_stops, state, 13)
        assert state.stops_cleared == 0
        assert trip_progress.next_stop(route_stops, state.stops_cleared).name == "A"

    def test_rejects_unexpected_stop(self, route_stops):
        state = TripState(stops_cleared=1)
        with pytest.raises(InvalidStopError) as exc_info:
            trip_progress.advance(route_stops, state, 13)
        assert exc_info.value.expected_stop_id == 12
        assert state.stops_cleared == 1

    def test_single_stop_route_stays_at_zero(self, route_stops):
        route = route_stops[:1]
        state = trip_progress.advance(route, TripState(), 11)
        assert state.stops_cleared == 0

    def test_empty_route(self):
        with pytest.raises(EmptyRouteError):
            trip_progress.advance([], TripState(), 1)


class TestInitialize:

    def test_starts_at_first_stop(self, route_stops):
        state = trip_progress.initialize(route_stops, next_stop_id=11)
        assert state == TripState(stops_cleared=0, offset=0)

    def test_starts_mid_route(self, route_stops):
        state = trip_progress.initialize(route_stops, next_stop_id=13, next_stop_sequence=2)
        assert state.stops_cleared == 0
        assert trip_progress.next_stop(route_stops, state.stops_cleared, state.offset).name == "C"

        state = trip_progress.advance(route_stops, state, 13)
        assert trip_progress.next_stop(route_stops, state.stops_cleared, state.offset).name == "A"
        assert trip_progress.last_cleared_stop(route_stops, state.stops_cleared, state.offset).name == "C"

    def test_stop_must_match_sequence(self, route_stops):
        with pytest.raises(InvalidStopError):
            trip_progress.initialize(route_stops, next_stop_id=12, next_stop_sequence=0)

    def test_sequence_out_of_range(self, route_stops):
        with pytest.raises(InvalidStopError):
            trip_progress.initialize(route_stops, next_stop_sequence=3)

    def test_empty_route(self):
        with pytest.raises(EmptyRouteError):
            trip_progress.initialize([])


class TestOrdering:

    def test_sort_route_by_stop_order(self, route_stops):
        shuffled = [route_stops[2], route_stops[0], route_stops[1]]
        assert [s.name for s in trip_progress.sort_route(shuffled)] == ["A", "B", "C"]

    def test_trip_order_rotates(self, route_stops):
        assert [s.name for s in trip_progress.trip_order(route_stops, 1)] == ["B", "C", "A"]
        assert trip_progress.trip_order([], 1) == []
