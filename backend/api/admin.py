"""
Admin API.

Provides CRUD endpoints for drivers, buses, stops, bus routes and scheduled
start times, and the dashboard statistics.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.dependencies import get_settings
from config import Config
from db import crud, schemas
from db.database import get_db
from services.tracking_service import TrackingService

router = APIRouter(prefix="/admin", tags=["admin"])


def _not_found(entity: str, entity_id: int) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{entity} {entity_id} not found")


def _conflict(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)


def _require_bus(db: Session, bus_id: int):
    bus = crud.get_bus(db, bus_id)
    if bus is None:
        raise _not_found("Bus", bus_id)
    return bus


def _require_driver(db: Session, driver_id):
    if driver_id is not None and crud.get_driver(db, driver_id) is None:
        raise _not_found("Driver", driver_id)


# =============================================================================
# Dashboard
# =============================================================================

@router.get("/stats", response_model=schemas.ApiResponse[schemas.AdminStats])
async def get_stats(db: Session = Depends(get_db), settings: Config = Depends(get_settings)):
    counts = crud.count_entities(db)
    active = TrackingService(db, settings).count_active()
    return schemas.ApiResponse(data=schemas.AdminStats(active_buses=active, **counts))


# =============================================================================
# Drivers
# =============================================================================

@router.get("/drivers", response_model=schemas.ApiResponse[List[schemas.DriverResponse]])
async def list_drivers(db: Session = Depends(get_db)):
    return schemas.ApiResponse(data=[schemas.DriverResponse.model_validate(d) for d in crud.list_drivers(db)])


@router.post(
    "/drivers",
    response_model=schemas.ApiResponse[schemas.DriverResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_driver(payload: schemas.DriverCreate, db: Session = Depends(get_db)):
    driver = crud.create_driver(db, payload)
    return schemas.ApiResponse(message="Driver created", data=schemas.DriverResponse.model_validate(driver))


@router.get("/drivers/{driver_id}", response_model=schemas.ApiResponse[schemas.DriverResponse])
async def get_driver(driver_id: int, db: Session = Depends(get_db)):
    driver = crud.get_driver(db, driver_id)
    if driver is None:
        raise _not_found("Driver", driver_id)
    return schemas.ApiResponse(data=schemas.DriverResponse.model_validate(driver))


@router.put("/drivers/{driver_id}",response_model=schemas.ApiResponse[schemas.DriverResponse])
async def update_driver(driver_id: int, payload: schemas.DriverUpdate, db: Session = Depends(get_db)):
    driver = crud.update_driver(db, driver_id, payload)
    if driver is None:
        raise _not_found("Driver", driver_id)
    return schemas.ApiResponse(message="Driver updated", data=schemas.DriverResponse.model_validate(driver))


@router.delete("/drivers/{driver_id}", response_model=schemas.ApiResponse[dict])
async def delete_driver(driver_id: int, db: Session = Depends(get_db)):
    if not crud.delete_driver(db, driver_id):
        raise _not_found("Driver", driver_id)
    return schemas.ApiResponse(message="Driver deleted", data={"driver_id": driver_id})


# =============================================================================
# Buses
# =============================================================================

@router.get("/buses", response_model=schemas.ApiResponse[List[schemas.BusResponse]])
async def list_buses(db: Session = Depends(get_db)):
    return schemas.ApiResponse(data=[schemas.BusResponse.model_validate(b) for b in crud.list_buses(db)])


@router.get("/buses/{bus_id}", response_model=schemas.ApiResponse[schemas.BusResponse])
async def get_bus(bus_id: int, db: Session = Depends(get_db)):
    return schemas.ApiResponse(data=schemas.BusResponse.model_validate(_require_bus(db, bus_id)))


@router.post(
    "/buses",
    response_model=schemas.ApiResponse[schemas.BusResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_bus(payload: schemas.BusCreate, db: Session = Depends(get_db)):
    _require_driver(db, payload.driver_id)
    bus = crud.create_bus(db, payload)
    return schemas.ApiResponse(message="Bus created", data=schemas.BusResponse.model_validate(bus))


@router.put("/buses/{bus_id}", response_model=schemas.ApiResponse[schemas.BusResponse])
async def update_bus(bus_id: int, payload: schemas.BusUpdate, db: Session = Depends(get_db)):
    _require_driver(db, payload.driver_id)
    bus = crud.update_bus(db, bus_id, payload)
    if bus is None:
        raise _not_found("Bus", bus_id)
    return schemas.ApiResponse(message="Bus updated", data=schemas.BusResponse.model_validate(bus))


@router.delete("/buses/{bus_id}", response_model=schemas.ApiResponse[dict])
async def delete_bus(bus_id: int, db: Session = Depends(get_db)):
    if not crud.delete_bus(db, bus_id):
        raise _not_found("Bus", bus_id)
    return schemas.ApiResponse(message="Bus deleted", data={"bus_id": bus_id})


# =============================================================================
# Stops
# =============================================================================

@router.get("/stops", response_model=schemas.ApiResponse[List[schemas.StopResponse]])
async def list_stops(db: Session = Depends(get_db)):
    return schemas.ApiResponse(data=[schemas.StopResponse.model_validate(s) for s in crud.list_stops(db)])


@router.post(
    "/stops",
    response_model=schemas.ApiResponse[schemas.StopResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_stop(payload: schemas.StopCreate, db: Session = Depends(get_db)):
    stop = crud.create_stop(db, payload)
    return schemas.ApiResponse(message="Stop created", data=schemas.StopResponse.model_validate(stop))


@router.get("/stops/{stop_id}", response_model=schemas.ApiResponse[schemas.StopResponse])
async def get_stop(stop_id: int, db: Session = Depends(get_db)):
    stop = crud.get_stop(db, stop_id)
    if stop is None:
        raise _not_found("Stop", stop_id)
    return schemas.ApiResponse(data=schemas.StopResponse.model_validate(stop))


@router.put("/stops/{stop_id}",response_model=schemas.ApiResponse[schemas.StopResponse])
async def update_stop(stop_id: int, payload: schemas.StopUpdate, db: Session = Depends(get_db)):
    stop = crud.update_stop(db, stop_id, payload)
    if stop is None:
        raise _not_found("Stop", stop_id)
    return schemas.ApiResponse(message="Stop updated", data=schemas.StopResponse.model_validate(stop))


@router.delete("/stops/{stop_id}", response_model=schemas.ApiResponse[dict])
async def delete_stop(stop_id: int, db: Session = Depends(get_db)):
    if crud.get_stop(db, stop_id) is None:
        raise _not_found("Stop", stop_id)
    if crud.is_stop_in_use(db, stop_id):
        raise _conflict(f"Stop {stop_id} is part of a bus route")
    crud.delete_stop(db, stop_id)
    return schemas.ApiResponse(message="Stop deleted", data={"stop_id": stop_id})


# =============================================================================
# Routes
# =============================================================================

@router.get("/routes/{bus_id}", response_model=schemas.ApiResponse[List[schemas.RouteEntryResponse]])
async def get_route(bus_id: int, db: Session = Depends(get_db)):
    _require_bus(db, bus_id)
    entries = crud.get_route_entries(db, bus_id)
    return schemas.ApiResponse(data=[schemas.RouteEntryResponse.model_validate(e) for e in entries])


@router.post(
    "/routes",
    response_model=schemas.ApiResponse[schemas.RouteEntryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_route_entry(payload: schemas.RouteEntryCreate, db: Session = Depends(get_db)):
    _require_bus(db, payload.bus_id)
    if crud.get_stop(db, payload.stop_id) is None:
        raise _not_found("Stop", payload.stop_id)
    if crud.get_route_entry_by_order(db, payload.bus_id, payload.stop_order) is not None:
        raise _conflict(f"Bus {payload.bus_id} already has a stop at position {payload.stop_order}")
    entry = crud.add_route_entry(db, payload)
    return schemas.ApiResponse(message="Route stop added", data=schemas.RouteEntryResponse.model_validate(entry))


@router.get("/routes/entries/{entry_id}", response_model=schemas.ApiResponse[schemas.RouteEntryResponse])
async def get_route_entry(entry_id: int, db: Session = Depends(get_db)):
    entry = crud.get_route_entry(db, entry_id)
    if entry is None:
        raise _not_found("Route entry", entry_id)
    return schemas.ApiResponse(data=schemas.RouteEntryResponse.model_validate(entry))


@router.put("/routes/{entry_id}",response_model=schemas.ApiResponse[schemas.RouteEntryResponse])
async def update_route_entry(entry_id: int, payload: schemas.RouteEntryUpdate, db: Session = Depends(get_db)):
    entry = crud.get_route_entry(db, entry_id)
    if entry is None:
        raise _not_found("Route entry", entry_id)
    if payload.stop_id is not None and crud.get_stop(db, payload.stop_id) is None:
        raise _not_found("Stop", payload.stop_id)
    if payload.stop_order is not None and payload.stop_order != entry.stop_order:
        if crud.get_route_entry_by_order(db, entry.bus_id, payload.stop_order) is not None:
            raise _conflict(f"Bus {entry.bus_id} already has a stop at position {payload.stop_order}")
    entry = crud.update_route_entry(db, entry_id, payload)
    return schemas.ApiResponse(message="Route stop updated", data=schemas.RouteEntryResponse.model_validate(entry))


@router.delete("/routes/{entry_id}", response_model=schemas.ApiResponse[dict])
async def delete_route_entry(entry_id: int, db: Session = Depends(get_db)):
    if not crud.delete_route_entry(db, entry_id):
        raise _not_found("Route entry", entry_id)
    return schemas.ApiResponse(message="Route stop deleted", data={"entry_id": entry_id})


# =============================================================================
# Start times
# =============================================================================

@router.get("/buses/{bus_id}/start-times", response_model=schemas.ApiResponse[List[schemas.StartTimeResponse]])
async def list_start_times(bus_id: int, db: Session = Depends(get_db)):
    _require_bus(db, bus_id)
    start_times = crud.list_start_times(db, bus_id)
    return schemas.ApiResponse(data=[schemas.StartTimeResponse.model_validate(st) for st in start_times])


@router.post(
    "/buses/{bus_id}/start-times",
    response_model=schemas.ApiResponse[schemas.StartTimeResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_start_time(bus_id: int, payload: schemas.StartTimeCreate, db: Session = Depends(get_db)):
    _require_bus(db, bus_id)
    if payload.rep_no is not None and crud.get_start_time_by_rep(db, bus_id, payload.rep_no) is not None:
        raise _conflict(f"Rep #{payload.rep_no} is already scheduled for bus {bus_id}")
    start_time = crud.add_start_time(db, bus_id, payload)
    return schemas.ApiResponse(message="Start time added", data=schemas.StartTimeResponse.model_validate(start_time))


@router.get("/start-times/{start_time_id}", response_model=schemas.ApiResponse[schemas.StartTimeResponse])
async def get_start_time(start_time_id: int, db: Session = Depends(get_db)):
    start_time = crud.get_start_time(db, start_time_id)
    if start_time is None:
        raise _not_found("Start time", start_time_id)
    return schemas.ApiResponse(data=schemas.StartTimeResponse.model_validate(start_time))


@router.put("/start-times/{start_time_id}",response_model=schemas.ApiResponse[schemas.StartTimeResponse])
async def update_start_time(start_time_id: int, payload: schemas.StartTimeUpdate, db: Session = Depends(get_db)):
    existing = crud.get_start_time(db, start_time_id)
    if existing is None:
        raise _not_found("Start time", start_time_id)
    if payload.rep_no is not None and payload.rep_no != existing.rep_no:
        if crud.get_start_time_by_rep(db, existing.bus_id, payload.rep_no) is not None:
            raise _conflict(f"Rep #{payload.rep_no} is already scheduled for bus {existing.bus_id}")
    start_time = crud.update_start_time(db, start_time_id, payload)
    return schemas.ApiResponse(message="Start time updated", data=schemas.StartTimeResponse.model_validate(start_time))


@router.delete("/start-times/{start_time_id}", response_model=schemas.ApiResponse[dict])
async def delete_start_time(start_time_id: int, db: Session = Depends(get_db)):
    if not crud.delete_start_time(db, start_time_id):
        raise _not_found("Start time", start_time_id)
    return schemas.ApiResponse(message="Start time deleted", data={"start_time_id": start_time_id})
