"""
Trip-progress state machine for circular bus routes.

A trip is described by two integers:

- ``stops_cleared``: stops passed since the trip was initialized, kept in
  ``[0, N)`` and wrapping after the last stop.
- ``offset``: the route position the driver chose as the first stop of the
  trip (``next_stop_sequence`` at initialization, 0 for a trip starting at
  the first stop).

The stop expected next is ``route[(offset + stops_cleared) % N]`` and the last
cleared stop is the one before it, wrapping to the end of the route.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from models.route import RouteStop
from services.errors import EmptyRouteError, InvalidStopError


@dataclass(frozen=True)
class TripState:
    stops_cleared: int = 0
    offset: int = 0


def sort_route(stops: Iterable[RouteStop]) -> List[RouteStop]:
    """Order route stops by their 1-based ``stop_order``."""
    return sorted(stops, key=lambda s: s.stop_order)


def route_index(stops_cleared: int, route_length: int, offset: int = 0) -> int:
    if route_length < 1:
        raise EmptyRouteError()
    return (offset + stops_cleared) % route_length


def next_stop_index(stops_cleared: int, route_length: int, offset: int = 0) -> int:
    return route_index(stops_cleared, route_length, offset)


def last_cleared_index(stops_cleared: int, route_length: int, offset: int = 0) -> int:
    return route_index(stops_cleared - 1, route_length, offset)


def next_stop(route: List[RouteStop], stops_cleared: int, offset: int = 0) -> RouteStop:
    return route[next_stop_index(stops_cleared, len(route), offset)]


def last_cleared_stop(route: List[RouteStop], stops_cleared: int, offset: int = 0) -> RouteStop:
    return route[last_cleared_index(stops_cleared, len(route), offset)]


def trip_order(route: List[RouteStop], offset: int = 0) -> List[RouteStop]:
    """The route rotated so that the trip's first stop comes first."""
    if not route:
        return []
    start = offset % len(route)
    return route[start:] + route[:start]


def initialize(route: List[RouteStop], next_stop_id: Optional[int] = None, next_stop_sequence: int = 0) -> TripState:
    """
    Start a new trip.

    ``next_stop_sequence`` is the 0-based index into the sorted route of the
    first stop the bus will reach. When ``next_stop_id`` is given it must be
    the stop at that index.
    """
    if not route:
        raise EmptyRouteError()
    if next_stop_sequence < 0 or next_stop_sequence >= len(route):
        raise InvalidStopError(
            next_stop_id,
            message=f"Next stop sequence {next_stop_sequence} is outside the route (0..{len(route) - 1})",
        )
    expected = route[next_stop_sequence]
    if next_stop_id is not None and expected.stop_id != next_stop_id:
        raise InvalidStopError(next_stop_id, expected.stop_id)
    return TripState(stops_cleared=0, offset=next_stop_sequence)


def advance(route: List[RouteStop], state: TripState, stop_id: int) -> TripState:
    """
    Clear ``stop_id`` and move to the following stop.

    Only the expected next stop may be cleared; anything else raises
    InvalidStopError and leaves the state untouched.
    """
    if not route:
        raise EmptyRouteError()
    expected = next_stop(route, state.stops_cleared, state.offset)
    if expected.stop_id != stop_id:
        raise InvalidStopError(stop_id, expected.stop_id)
    return TripState(
        stops_cleared=(state.stops_cleared + 1) % len(route),
        offset=state.offset,
    )
