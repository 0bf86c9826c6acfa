"""
Driver API.

Trip initialization, GPS updates and stop clearing for the bus a driver
operates.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.dependencies import get_driver_id, get_settings, http_error
from config import Config
from db import schemas
from db.database import get_db
from services.driver_service import DriverService
from services.errors import TrackerError

router = APIRouter(prefix="/driver", tags=["driver"])


def get_driver_service(db: Session = Depends(get_db), settings: Config = Depends(get_settings)) -> DriverService:
    return DriverService(db, settings)


@router.post("/initialize-trip", response_model=schemas.ApiResponse[schemas.MyBusData])
async def initialize_trip(
    payload: schemas.InitializeTripRequest,
    driver_id: int = Depends(get_driver_id),
    service: DriverService = Depends(get_driver_service),
):
    try:
        bus = service.initialize_trip(
            payload.bus_id,
            payload.start_time,
            next_stop_id=payload.next_stop_id,
            next_stop_sequence=payload.next_stop_sequence,
            driver_id=driver_id,
        )
    except TrackerError as exc:
        raise http_error(exc) from exc
    return schemas.ApiResponse(message="Trip initialized", data=service.describe_bus(bus))


@router.post("/update-location", response_model=schemas.ApiResponse[schemas.LocationUpdateResult])
async def update_location(
    payload: schemas.UpdateLocationRequest,
    driver_id: int = Depends(get_driver_id),
    service: DriverService = Depends(get_driver_service),
):
    try:
        result = service.update_location(payload.bus_id, payload.latitude, payload.longitude, driver_id=driver_id)
    except TrackerError as exc:
        raise http_error(exc) from exc
    message = "Location updated; stop cleared" if result.stop_cleared else "Location updated"
    return schemas.ApiResponse(message=message, data=result)


@router.post("/clear-stop", response_model=schemas.ApiResponse[schemas.BusView])
async def clear_stop(
    payload: schemas.ClearStopRequest,
    driver_id: int = Depends(get_driver_id),
    service: DriverService = Depends(get_driver_service),
):
    try:
        bus = service.clear_stop(payload.bus_id, payload.stop_id, driver_id=driver_id)
    except TrackerError as exc:
        raise http_error(exc) from exc
    return schemas.ApiResponse(message="Stop cleared", data=schemas.BusView.model_validate(bus))


@router.get("/my-bus", response_model=schemas.ApiResponse[schemas.MyBusData])
async def my_bus(
    driver_id: int = Depends(get_driver_id),
    service: DriverService = Depends(get_driver_service),
):
    try:
        data = service.get_my_bus(driver_id)
    except TrackerError as exc:
        raise http_error(exc) from exc
    return schemas.ApiResponse(data=data)


@router.get("/trip-options/{bus_id}", response_model=schemas.ApiResponse[schemas.TripOptionsData])
async def trip_options(
    bus_id: int,
    driver_id: int = Depends(get_driver_id),
    service: DriverService = Depends(get_driver_service),
):
    try:
        data = service.get_trip_options(bus_id, driver_id=driver_id)
    except TrackerError as exc:
        raise http_error(exc) from exc
    return schemas.ApiResponse(data=data)
