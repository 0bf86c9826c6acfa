"""
Next-stop, distance, direction and ETA derivation for a running trip.

Everything here is best effort: a missing GPS fix or an empty route yields
``None`` rather than an error, so read endpoints never fail on stale data.
"""

import math
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from models.geo import Coordinates
from models.route import NextStopInfo, RouteStop, StopProgress
from services import geo
from services.trip_progress import TripState, next_stop, trip_order


def scheduled_arrival(start_time: Optional[time], minutes_from_start: float) -> Optional[time]:
    """Rep start time plus a stop's offset, wrapping past midnight."""
    if start_time is None:
        return None
    base = datetime.combine(date(2000, 1, 1), start_time)
    return (base + timedelta(minutes=float(minutes_from_start or 0))).time()


def eta_minutes(distance_m: float, speed_kmh: float) -> Optional[int]:
    """Minutes to cover ``distance_m`` at ``speed_kmh``, rounded up."""
    if speed_kmh is None or speed_kmh <= 0:
        return None
    minutes = distance_m * 60.0 / (speed_kmh * 1000.0)
    return int(math.ceil(minutes))


def build_progress(
    route: List[RouteStop],
    state: TripState,
    start_time: Optional[time] = None,
) -> List[StopProgress]:
    """Stops in trip order with cleared/next/upcoming status and scheduled arrival."""
    progress: List[StopProgress] = []
    for position, stop in enumerate(trip_order(route, state.offset)):
        if position < state.stops_cleared:
            status = "cleared"
        elif position == state.stops_cleared:
            status = "next"
        else:
            status = "upcoming"
        progress.append(
            StopProgress(
                **stop.model_dump(),
                status=status,
                scheduled_arrival=scheduled_arrival(start_time, stop.time_from_start),
            )
        )
    return progress


def next_stop_info(
    route: List[RouteStop],
    state: TripState,
    position: Optional[Coordinates],
    speed_kmh: float,
) -> Optional[NextStopInfo]:
    if not route:
        return None
    target = next_stop(route, state.stops_cleared, state.offset)
    if position is None:
        return NextStopInfo(stop=target)

    distance = geo.distance_m(position, target.coordinates)
    bearing = geo.initial_bearing(position, target.coordinates)
    return NextStopInfo(
        stop=target,
        distance_m=round(distance, 1),
        distance_text=geo.format_distance(distance),
        bearing=round(bearing, 1),
        direction=geo.compass_octant(bearing),
        eta_minutes=eta_minutes(distance, speed_kmh),
    )
