"""
Driver trip service.

Implements the driver-facing operations on top of the trip-progress state
machine: trip initialization, GPS fixes with automatic stop clearing, manual
stop clearing and the driver's bus overview.
"""

import logging
from datetime import datetime, time
from typing import List, Optional

from sqlalchemy.orm import Session

from config import Config
from db import crud, schemas
from db.models import BusModel
from models.geo import Coordinates
from models.route import RouteStop
from services import eta, geo, trip_progress
from services.errors import (
    BusNotFoundError,
    EmptyRouteError,
    InvalidStopError,
    NoBusAssignedError,
    NotAssignedDriverError,
    StartTimeNotFoundError,
)
from services.trip_progress import TripState

logger = logging.getLogger(__name__)


def trip_state_of(bus: BusModel, route_length: int) -> TripState:
    """Read the trip state of a bus, normalized into the current route length."""
    if route_length < 1:
        return TripState(stops_cleared=int(bus.stops_cleared or 0), offset=0)
    return TripState(
        stops_cleared=int(bus.stops_cleared or 0) % route_length,
        offset=int(bus.start_stop_sequence or 0) % route_length,
    )


def bus_position(bus: BusModel) -> Optional[Coordinates]:
    if bus.latitude is None or bus.longitude is None:
        return None
    return Coordinates(lat=bus.latitude, lon=bus.longitude)


class DriverService:
    """Trip operations for the bus a driver operates."""

    def __init__(self, db: Session, settings: Config):
        self.db = db
        self.settings = settings

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    def _get_bus(self, bus_id: int, driver_id: Optional[int] = None) -> BusModel:
        bus = crud.get_bus(self.db, bus_id)
        if bus is None:
            raise BusNotFoundError(bus_id)
        if driver_id is not None and bus.driver_id != driver_id:
            raise NotAssignedDriverError(driver_id, bus_id)
        return bus

    def _get_route(self, bus: BusModel) -> List[RouteStop]:
        route = trip_progress.sort_route(crud.get_route_stops(self.db, bus.id))
        if not route:
            raise EmptyRouteError(bus.id)
        return route

    # ------------------------------------------------------------------
    # operations
    # ------------------------------------------------------------------

    def initialize_trip(
        self,
        bus_id: int,
        start_time: time,
        next_stop_id: Optional[int] = None,
        next_stop_sequence: int = 0,
        driver_id: Optional[int] = None,
    ) -> BusModel:
        """Reset the trip to ``stops_cleared = 0`` starting at the chosen stop."""
        bus = self._get_bus(bus_id, driver_id)
        if crud.find_start_time(self.db, bus.id, start_time) is None:
            raise StartTimeNotFoundError(start_time)
        route = self._get_route(bus)

        state = trip_progress.initialize(route, next_stop_id, next_stop_sequence)
        bus = crud.save_trip_state(
            self.db,
            bus,
            stops_cleared=state.stops_cleared,
            start_stop_sequence=state.offset,
            start_time=start_time,
            started_at=datetime.utcnow(),
            reset=True,
        )
        first = trip_progress.next_stop(route, state.stops_cleared, state.offset)
        logger.info(
            f"Trip initialized for bus {bus.id} at {start_time}, next stop {first.stop_id} ({first.name})"
        )
        return bus

    def clear_stop(self, bus_id: int, stop_id: int, driver_id: Optional[int] = None) -> BusModel:
        """Advance the trip past ``stop_id``; only the expected next stop is accepted."""
        bus = self._get_bus(bus_id, driver_id)
        route = self._get_route(bus)
        state = trip_state_of(bus, len(route))
        try:
            new_state = trip_progress.advance(route, state, stop_id)
        except InvalidStopError as exc:
            logger.warning(f"Rejected clear of stop {stop_id} on bus {bus.id}: expected {exc.expected_stop_id}")
            raise
        bus = crud.save_trip_state(
            self.db, bus, stops_cleared=new_state.stops_cleared, last_cleared_stop_id=stop_id
        )
        logger.info(f"Bus {bus.id} cleared stop {stop_id} (stops_cleared={bus.stops_cleared})")
        return bus

    def update_location(
        self,
        bus_id: int,
        latitude: float,
        longitude: float,
        driver_id: Optional[int] = None,
    ) -> schemas.LocationUpdateResult:
        """
        Record a GPS fix and re-evaluate proximity to the expected next stop.

        When auto clearing is enabled and the fix lies within the configured
        radius, the stop is cleared as if the driver had done it.
        """
        bus = self._get_bus(bus_id, driver_id)
        bus = crud.record_location(self.db, bus, latitude, longitude)
        logger.debug(f"Bus {bus.id} at ({latitude:.6f}, {longitude:.6f})")

        route = trip_progress.sort_route(crud.get_route_stops(self.db, bus.id))
        if not route:
            return schemas.LocationUpdateResult(bus=schemas.BusView.model_validate(bus))

        position = Coordinates(lat=latitude, lon=longitude)
        radius = self.settings.STOP_PROXIMITY_METERS
        state = trip_state_of(bus, len(route))
        target = trip_progress.next_stop(route, state.stops_cleared, state.offset)

        if not bus.departed_last_stop and bus.last_cleared_stop_id is not None:
            last = next((s for s in route if s.stop_id == bus.last_cleared_stop_id), None)
            if last is None or not geo.reached(position, last.coordinates, radius):
                bus = crud.mark_departed(self.db, bus)
                logger.debug(f"Bus {bus.id} left stop {bus.last_cleared_stop_id}")

        cleared_stop = None
        if self.settings.AUTO_CLEAR_STOPS and geo.should_auto_clear(
            position,
            target.coordinates,
            target.stop_id,
            bus.last_cleared_stop_id,
            radius_m=radius,
            departed=bus.departed_last_stop,
        ):
            state = trip_progress.advance(route, state, target.stop_id)
            bus = crud.save_trip_state(
                self.db, bus, stops_cleared=state.stops_cleared, last_cleared_stop_id=target.stop_id
            )
            cleared_stop = target
            logger.info(f"Bus {bus.id} reached stop {target.stop_id} ({target.name}); auto-cleared")

        return schemas.LocationUpdateResult(
            bus=schemas.BusView.model_validate(bus),
            stop_cleared=cleared_stop is not None,
            cleared_stop=cleared_stop,
            next_stop=eta.next_stop_info(route, state, position, self.settings.AVERAGE_BUS_SPEED_KMH),
        )

    def get_my_bus(self, driver_id: int) -> schemas.MyBusData:
        bus = crud.get_bus_for_driver(self.db, driver_id)
        if bus is None:
            raise NoBusAssignedError(driver_id)
        return self.describe_bus(bus)

    def describe_bus(self, bus: BusModel) -> schemas.MyBusData:
        """Bus, route and current/next stop as shown on the driver screen."""
        route = trip_progress.sort_route(crud.get_route_stops(self.db, bus.id))
        data = schemas.MyBusData(bus=schemas.BusView.model_validate(bus), route=route)
        if not route:
            return data

        state = trip_state_of(bus, len(route))
        data.stops_cleared = state.stops_cleared
        data.start_stop_sequence = state.offset
        data.next_stop_index = trip_progress.next_stop_index(state.stops_cleared, len(route), state.offset)
        data.last_cleared_stop = trip_progress.last_cleared_stop(route, state.stops_cleared, state.offset)
        data.next_stop = trip_progress.next_stop(route, state.stops_cleared, state.offset)
        data.next_stop_info = eta.next_stop_info(
            route, state, bus_position(bus), self.settings.AVERAGE_BUS_SPEED_KMH
        )
        data.progress = eta.build_progress(route, state, bus.current_start_time)
        return data

    def get_trip_options(self, bus_id: int, driver_id: Optional[int] = None) -> schemas.TripOptionsData:
        bus = self._get_bus(bus_id, driver_id)
        return schemas.TripOptionsData(
            scheduled_times=[
                schemas.StartTimeView.model_validate(st) for st in crud.list_start_times(self.db, bus.id)
            ],
            route_stops=trip_progress.sort_route(crud.get_route_stops(self.db, bus.id)),
        )
