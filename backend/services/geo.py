"""
Great-circle geometry helpers for stop proximity and direction hints.

All functions are pure; callers decide how often to evaluate them.
"""

import math
from typing import Optional

from models.geo import CompassDirection, Coordinates

EARTH_RADIUS_M = 6371000.0
DEFAULT_PROXIMITY_METERS = 30.0

# Octants clockwise from north, each covering 45 degrees centred on its heading.
_OCTANTS = [
    CompassDirection.NORTH,
    CompassDirection.NORTHEAST,
    CompassDirection.EAST,
    CompassDirection.SOUTHEAST,
    CompassDirection.SOUTH,
    CompassDirection.SOUTHWEST,
    CompassDirection.WEST,
    CompassDirection.NORTHWEST,
]


def haversine_m(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Haversine distance in meters."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_m(start: Coordinates, end: Coordinates) -> float:
    return haversine_m(start.lat, start.lon, end.lat, end.lon)


def reached(current: Coordinates, target: Coordinates, radius_m: float = DEFAULT_PROXIMITY_METERS) -> bool:
    """
    Decide whether a GPS fix has reached a stop.

    The radius is inclusive: a fix exactly ``radius_m`` away counts as reached.
    """
    return distance_m(current, target) <= radius_m


def should_auto_clear(
    current: Coordinates,
    next_stop: Coordinates,
    next_stop_id: int,
    last_cleared_stop_id: Optional[int],
    radius_m: float = DEFAULT_PROXIMITY_METERS,
    departed: bool = False,
) -> bool:
    """
    Proximity trigger with deduplication on the last cleared stop.

    When the expected next stop is the stop that was just cleared (single-stop
    routes, a loop returning to its depot), it is only cleared again once the
    bus has ``departed``, i.e. reported a fix outside the radius since the
    last clear.
    """
    if last_cleared_stop_id is not None and next_stop_id == last_cleared_stop_id and not departed:
        return False
    return reached(current, next_stop, radius_m)


def initial_bearing(start: Coordinates, end: Coordinates) -> float:
    """Initial great-circle bearing from start to end, in degrees [0, 360)."""
    phi1 = math.radians(start.lat)
    phi2 = math.radians(end.lat)
    dlambda = math.radians(end.lon - start.lon)

    y = math.sin(dlambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)
    bearing = math.degrees(math.atan2(y, x))
    return bearing % 360.0


def compass_octant(bearing: float) -> CompassDirection:
    """Bucket a bearing in degrees into one of eight compass directions."""
    normalized = bearing % 360.0
    index = int(((normalized + 22.5) % 360.0) // 45.0)
    return _OCTANTS[index]


def format_distance(meters: float) -> str:
    """Human readable distance: meters below 1 km, kilometers otherwise."""
    rounded = int(round(meters))
    if rounded < 1000:
        return f"{rounded} meters"
    return f"{meters / 1000:.2f} km"
