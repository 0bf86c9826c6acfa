"""
Passenger tracking API.

Read-only endpoints polled by the bus tracking and stop search pages.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.dependencies import get_settings, http_error
from config import Config
from db import crud, schemas
from db.database import get_db
from models.geo import Coordinates
from services.errors import TrackerError
from services.tracking_service import TrackingService

buses_router = APIRouter(prefix="/buses", tags=["tracking"])
stops_router = APIRouter(prefix="/stops", tags=["tracking"])


def get_tracking_service(db: Session = Depends(get_db), settings: Config = Depends(get_settings)) -> TrackingService:
    return TrackingService(db, settings)


@buses_router.get("", response_model=schemas.ApiResponse[List[schemas.BusSummary]])
async def list_buses(service: TrackingService = Depends(get_tracking_service)):
    return schemas.ApiResponse(data=service.list_buses())


@buses_router.get("/locations", response_model=schemas.ApiResponse[List[schemas.BusLocationData]])
async def bus_locations(
    include_stale: bool = Query(True, alias="includeStale"),
    service: TrackingService = Depends(get_tracking_service),
):
    return schemas.ApiResponse(data=service.list_locations(include_stale=include_stale))


@buses_router.get("/{bus_id}/location",response_model=schemas.ApiResponse[schemas.BusLocationData])
async def bus_location(bus_id: int, service: TrackingService = Depends(get_tracking_service)):
    try:
        location = service.get_location(bus_id)
    except TrackerError as exc:
        raise http_error(exc) from exc
    if location is None:
        return schemas.ApiResponse(message="Bus is not in service", data=None)
    return schemas.ApiResponse(data=location)


@buses_router.get("/{bus_id}/route-with-stops", response_model=schemas.ApiResponse[schemas.RouteWithStopsData])
async def bus_route_with_stops(bus_id: int, service: TrackingService = Depends(get_tracking_service)):
    try:
        data = service.get_route_with_stops(bus_id)
    except TrackerError as exc:
        raise http_error(exc) from exc
    return schemas.ApiResponse(data=data)


@buses_router.get("/{bus_id}/info", response_model=schemas.ApiResponse[schemas.BusInfoData])
async def bus_info(bus_id: int, service: TrackingService = Depends(get_tracking_service)):
    try:
        data = service.get_info(bus_id)
    except TrackerError as exc:
        raise http_error(exc) from exc
    return schemas.ApiResponse(data=data)


@stops_router.get("", response_model=schemas.ApiResponse[List[schemas.StopResponse]])
async def list_stops(db: Session = Depends(get_db)):
    stops = [schemas.StopResponse.model_validate(s) for s in crud.list_stops(db)]
    return schemas.ApiResponse(data=stops)


@stops_router.get("/nearby", response_model=schemas.ApiResponse[List[schemas.NearbyStop]])
async def nearby_stops(
    lat: float = Query(..., ge=-90, le=90),
    lon: float = Query(..., ge=-180, le=180),
    limit: Optional[int] = Query(None, ge=1, le=50),
    service: TrackingService = Depends(get_tracking_service),
):
    return schemas.ApiResponse(data=service.nearby_stops(Coordinates(lat=lat, lon=lon), limit))


@stops_router.get("/buses", response_model=schemas.ApiResponse[List[schemas.BusSummary]])
async def buses_between_stops(
    from_stop_id: int = Query(..., alias="fromStopId"),
    to_stop_id: int = Query(..., alias="toStopId"),
    service: TrackingService = Depends(get_tracking_service),
):
    try:
        buses = service.buses_between(from_stop_id, to_stop_id)
    except TrackerError as exc:
        raise http_error(exc) from exc
    return schemas.ApiResponse(data=buses)
