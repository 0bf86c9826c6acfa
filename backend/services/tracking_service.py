"""
Passenger-side tracking service.

Read-only views polled by passengers: bus list, live location, route with
stops, next-stop ETA, nearby stops and buses serving a pair of stops.
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from config import Config
from db import crud, schemas
from db.models import BusModel
from models.geo import Coordinates
from services import eta, geo, trip_progress
from services.driver_service import bus_position, trip_state_of
from services.errors import BusNotFoundError, StopNotFoundError

logger = logging.getLogger(__name__)


class TrackingService:
    """Views over the live state of buses for passengers."""

    def __init__(self, db: Session, settings: Config):
        self.db = db
        self.settings = settings

    def _get_bus(self, bus_id: int) -> BusModel:
        bus = crud.get_bus(self.db, bus_id)
        if bus is None:
            raise BusNotFoundError(bus_id)
        return bus

    def is_active(self, bus: BusModel, now: Optional[datetime] = None) -> bool:
        """A bus is in service while its last GPS fix is fresh."""
        if bus.location_updated_at is None or bus_position(bus) is None:
            return False
        now = now or datetime.utcnow()
        age = (now - bus.location_updated_at).total_seconds()
        return age <= self.settings.LOCATION_STALE_SECONDS

    def _summary(self, bus: BusModel) -> schemas.BusSummary:
        return schemas.BusSummary(
            id=bus.id,
            name=bus.name,
            driver_name=bus.driver.name if bus.driver else None,
            active=self.is_active(bus),
        )

    def list_buses(self) -> List[schemas.BusSummary]:
        return [self._summary(bus) for bus in crud.list_buses(self.db)]

    def get_location(self, bus_id: int) -> Optional[schemas.BusLocationData]:
        """Last GPS fix of a bus, or None when it never reported one."""
        bus = self._get_bus(bus_id)
        if bus_position(bus) is None or bus.location_updated_at is None:
            return None
        return self._location(bus)

    def _location(self, bus: BusModel) -> schemas.BusLocationData:
        return schemas.BusLocationData(
            bus_id=bus.id,
            name=bus.name,
            latitude=bus.latitude,
            longitude=bus.longitude,
            timestamp=bus.location_updated_at,
            stale=not self.is_active(bus),
        )

    def list_locations(self, include_stale: bool = True) -> List[schemas.BusLocationData]:
        """Last fix of every bus that has reported one, for the live fleet map."""
        locations = [
            self._location(bus)
            for bus in crud.list_buses(self.db)
            if bus_position(bus) is not None and bus.location_updated_at is not None
        ]
        if not include_stale:
            locations = [loc for loc in locations if not loc.stale]
        return locations

    def count_active(self) -> int:
        return sum(1 for bus in crud.list_buses(self.db) if self.is_active(bus))

    def get_route_with_stops(self, bus_id: int) -> schemas.RouteWithStopsData:
        bus = self._get_bus(bus_id)
        route = trip_progress.sort_route(crud.get_route_stops(self.db, bus.id))
        data = schemas.RouteWithStopsData(bus_id=bus.id)
        if not route:
            return data
        state = trip_state_of(bus, len(route))
        data.stops = eta.build_progress(route, state, bus.current_start_time)
        data.start_stop_sequence = state.offset
        data.next_stop_index = trip_progress.next_stop_index(state.stops_cleared, len(route), state.offset)
        data.current_stop = trip_progress.last_cleared_stop(route, state.stops_cleared, state.offset)
        data.next_stop = trip_progress.next_stop(route, state.stops_cleared, state.offset)
        return data

    def get_info(self, bus_id: int) -> schemas.BusInfoData:
        bus = self._get_bus(bus_id)
        info = schemas.BusInfoData(
            bus_id=bus.id,
            name=bus.name,
            driver_name=bus.driver.name if bus.driver else None,
            active=self.is_active(bus),
            last_updated=bus.location_updated_at,
        )
        route = trip_progress.sort_route(crud.get_route_stops(self.db, bus.id))
        if not route:
            return info

        state = trip_state_of(bus, len(route))
        info.current_stop = trip_progress.last_cleared_stop(route, state.stops_cleared, state.offset)
        next_info = eta.next_stop_info(route, state, bus_position(bus), self.settings.AVERAGE_BUS_SPEED_KMH)
        if next_info is not None:
            info.next_stop = next_info.stop
            info.distance_to_next_stop = next_info.distance_text
            info.direction = next_info.direction
            info.estimated_arrival = next_info.eta_minutes
        return info

    def nearby_stops(self, position: Coordinates, limit: Optional[int] = None) -> List[schemas.NearbyStop]:
        """Stops sorted by distance from ``position``."""
        limit = limit or self.settings.NEARBY_STOPS_LIMIT
        ranked = []
        for stop in crud.list_stops(self.db):
            distance = geo.haversine_m(position.lat, position.lon, stop.latitude, stop.longitude)
            ranked.append((distance, stop))
        ranked.sort(key=lambda item: item[0])
        return [
            schemas.NearbyStop(
                stop=schemas.StopView.model_validate(stop),
                distance_m=round(distance, 1),
                distance_text=geo.format_distance(distance),
            )
            for distance, stop in ranked[:limit]
        ]

    def buses_between(self, from_stop_id: int, to_stop_id: int) -> List[schemas.BusSummary]:
        for stop_id in (from_stop_id, to_stop_id):
            if crud.get_stop(self.db, stop_id) is None:
                raise StopNotFoundError(stop_id)
        buses = crud.get_buses_serving_stops(self.db, from_stop_id, to_stop_id)
        logger.debug(f"{len(buses)} buses serve stops {from_stop_id} -> {to_stop_id}")
        return [self._summary(bus) for bus in buses]
