"""
CRUD operations for the campus bus tracker database.

Provides functions to create, read, update, and delete:
- Drivers, stops and buses
- Route entries and scheduled start times
- Live trip state and GPS fixes of a bus
"""

import logging
from datetime import datetime, time
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from models.route import RouteStop
from . import models, schemas

logger = logging.getLogger(__name__)


def _apply_updates(instance, updates: dict) -> None:
    for field, value in updates.items():
        setattr(instance, field, value)


# =============================================================================
# Driver CRUD
# =============================================================================

def create_driver(db: Session, driver_data: schemas.DriverCreate) -> models.DriverModel:
    db_driver = models.DriverModel(name=driver_data.name, phone=driver_data.phone)
    db.add(db_driver)
    db.commit()
    db.refresh(db_driver)
    logger.info(f"Created driver {db_driver.id} ({db_driver.name})")
    return db_driver


def get_driver(db: Session, driver_id: int) -> Optional[models.DriverModel]:
    return db.query(models.DriverModel).filter(models.DriverModel.id == driver_id).first()


def list_drivers(db: Session) -> List[models.DriverModel]:
    return db.query(models.DriverModel).order_by(models.DriverModel.id).all()


def update_driver(db: Session, driver_id: int, driver_data: schemas.DriverUpdate) -> Optional[models.DriverModel]:
    db_driver = get_driver(db, driver_id)
    if not db_driver:
        return None
    _apply_updates(db_driver, driver_data.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(db_driver)
    return db_driver


def delete_driver(db: Session, driver_id: int) -> bool:
    """Delete a driver; buses keep running unassigned."""
    db_driver = get_driver(db, driver_id)
    if not db_driver:
        return False
    for bus in db_driver.buses:
        bus.driver_id = None
    db.delete(db_driver)
    db.commit()
    logger.info(f"Deleted driver {driver_id}")
    return True


# =============================================================================
# Stop CRUD
# =============================================================================

def create_stop(db: Session, stop_data: schemas.StopCreate) -> models.StopModel:
    db_stop = models.StopModel(
        name=stop_data.name,
        latitude=stop_data.latitude,
        longitude=stop_data.longitude,
    )
    db.add(db_stop)
    db.commit()
    db.refresh(db_stop)
    logger.info(f"Created stop {db_stop.id} ({db_stop.name})")
    return db_stop


def get_stop(db: Session, stop_id: int) -> Optional[models.StopModel]:
    return db.query(models.StopModel).filter(models.StopModel.id == stop_id).first()


def list_stops(db: Session) -> List[models.StopModel]:
    return db.query(models.StopModel).order_by(models.StopModel.name).all()


def update_stop(db: Session, stop_id: int, stop_data: schemas.StopUpdate) -> Optional[models.StopModel]:
    db_stop = get_stop(db, stop_id)
    if not db_stop:
        return None
    _apply_updates(db_stop, stop_data.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(db_stop)
    return db_stop


def is_stop_in_use(db: Session, stop_id: int) -> bool:
    return db.query(models.RouteEntryModel.id).filter(
        models.RouteEntryModel.stop_id == stop_id
    ).first() is not None


def delete_stop(db: Session, stop_id: int) -> bool:
    db_stop = get_stop(db, stop_id)
    if not db_stop:
        return False
    db.delete(db_stop)
    db.commit()
    logger.info(f"Deleted stop {stop_id}")
    return True


# =============================================================================
# Bus CRUD
# =============================================================================

def create_bus(db: Session, bus_data: schemas.BusCreate) -> models.BusModel:
    db_bus = models.BusModel(name=bus_data.name, driver_id=bus_data.driver_id)
    db.add(db_bus)
    db.commit()
    db.refresh(db_bus)
    logger.info(f"Created bus {db_bus.id} ({db_bus.name})")
    return db_bus


def get_bus(db: Session, bus_id: int) -> Optional[models.BusModel]:
    """
    Get a bus by ID with its route entries, stops and driver loaded.

    Args:
        db: Database session
        bus_id: Bus ID

    Returns:
        BusModel instance or None
    """
    return db.query(models.BusModel).options(
        joinedload(models.BusModel.route_entries).joinedload(models.RouteEntryModel.stop),
        joinedload(models.BusModel.driver),
    ).filter(models.BusModel.id == bus_id).first()


def get_bus_for_driver(db: Session, driver_id: int) -> Optional[models.BusModel]:
    """Bus assigned to a driver (lowest id if several)."""
    bus_id = db.query(models.BusModel.id).filter(
        models.BusModel.driver_id == driver_id
    ).order_by(models.BusModel.id).first()
    if bus_id is None:
        return None
    return get_bus(db, bus_id[0])


def list_buses(db: Session) -> List[models.BusModel]:
    return db.query(models.BusModel).options(
        joinedload(models.BusModel.driver)
    ).order_by(models.BusModel.id).all()


def update_bus(db: Session, bus_id: int, bus_data: schemas.BusUpdate) -> Optional[models.BusModel]:
    db_bus = get_bus(db, bus_id)
    if not db_bus:
        return None
    _apply_updates(db_bus, bus_data.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(db_bus)
    return db_bus


def delete_bus(db: Session, bus_id: int) -> bool:
    """Delete a bus together with its route entries and start times."""
    db_bus = get_bus(db, bus_id)
    if not db_bus:
        return False
    db.delete(db_bus)
    db.commit()
    logger.info(f"Deleted bus {bus_id}")
    return True


# =============================================================================
# Route CRUD
# =============================================================================

def get_route_entries(db: Session, bus_id: int) -> List[models.RouteEntryModel]:
    return db.query(models.RouteEntryModel).options(
        joinedload(models.RouteEntryModel.stop)
    ).filter(
        models.RouteEntryModel.bus_id == bus_id
    ).order_by(models.RouteEntryModel.stop_order).all()


def get_route_entry(db: Session, entry_id: int) -> Optional[models.RouteEntryModel]:
    return db.query(models.RouteEntryModel).filter(models.RouteEntryModel.id == entry_id).first()


def get_route_entry_by_order(db: Session, bus_id: int, stop_order: int) -> Optional[models.RouteEntryModel]:
    return db.query(models.RouteEntryModel).filter(
        models.RouteEntryModel.bus_id == bus_id,
        models.RouteEntryModel.stop_order == stop_order,
    ).first()


def add_route_entry(db: Session, entry_data: schemas.RouteEntryCreate) -> models.RouteEntryModel:
    db_entry = models.RouteEntryModel(
        bus_id=entry_data.bus_id,
        stop_id=entry_data.stop_id,
        stop_order=entry_data.stop_order,
        time_from_start=entry_data.time_from_start,
    )
    db.add(db_entry)
    db.commit()
    db.refresh(db_entry)
    logger.info(
        f"Added stop {db_entry.stop_id} to bus {db_entry.bus_id} route at position {db_entry.stop_order}"
    )
    return db_entry


def update_route_entry(
    db: Session, entry_id: int, entry_data: schemas.RouteEntryUpdate
) -> Optional[models.RouteEntryModel]:
    db_entry = get_route_entry(db, entry_id)
    if not db_entry:
        return None
    _apply_updates(db_entry, entry_data.model_dump(exclude_unset=True))
    db.commit()
    db.refresh(db_entry)
    return db_entry


def delete_route_entry(db: Session, entry_id: int) -> bool:
    db_entry = get_route_entry(db, entry_id)
    if not db_entry:
        return False
    db.delete(db_entry)
    db.commit()
    return True


def to_route_stop(entry: models.RouteEntryModel) -> RouteStop:
    return RouteStop(
        entry_id=entry.id,
        stop_id=entry.stop_id,
        name=entry.stop.name,
        latitude=entry.stop.latitude,
        longitude=entry.stop.longitude,
        stop_order=entry.stop_order,
        time_from_start=entry.time_from_start or 0,
    )


def get_route_stops(db: Session, bus_id: int) -> List[RouteStop]:
    """The bus's circular route as domain stops sorted by stop_order."""
    return [to_route_stop(entry) for entry in get_route_entries(db, bus_id)]


def get_buses_serving_stops(db: Session, from_stop_id: int, to_stop_id: int) -> List[models.BusModel]:
    """Buses whose route contains both stops."""
    from_buses = db.query(models.RouteEntryModel.bus_id).filter(
        models.RouteEntryModel.stop_id == from_stop_id
    )
    to_buses = db.query(models.RouteEntryModel.bus_id).filter(
        models.RouteEntryModel.stop_id == to_stop_id
    )
    return db.query(models.BusModel).options(
        joinedload(models.BusModel.driver)
    ).filter(
        models.BusModel.id.in_(from_buses),
        models.BusModel.id.in_(to_buses),
    ).order_by(models.BusModel.id).all()


# =============================================================================
# Start Time CRUD
# =============================================================================

def list_start_times(db: Session, bus_id: int) -> List[models.StartTimeModel]:
    return db.query(models.StartTimeModel).filter(
        models.StartTimeModel.bus_id == bus_id
    ).order_by(models.StartTimeModel.rep_no).all()


def get_start_time(db: Session, start_time_id: int) -> Optional[models.StartTimeModel]:
    return db.query(models.StartTimeModel).filter(models.StartTimeModel.id == start_time_id).first()


def find_start_time(db: Session, bus_id: int, start_time: time) -> Optional[models.StartTimeModel]:
    return db.query(models.StartTimeModel).filter(
        models.StartTimeModel.bus_id == bus_id,
        models.StartTimeModel.start_time == start_time,
    ).first()


def get_start_time_by_rep(db: Session, bus_id: int, rep_no: int) -> Optional[models.StartTimeModel]:
    return db.query(models.StartTimeModel).filter(
        models.StartTimeModel.bus_id == bus_id,
        models.StartTimeModel.rep_no == rep_no,
    ).first()


def _max_rep_no(db: Session, bus_id: int) -> int:
    value = db.query(func.max(models.StartTimeModel.rep_no)).filter(
        models.StartTimeModel.bus_id == bus_id
    ).scalar()
    return int(value or 0)


def _sync_total_rep(db: Session, bus_id: int) -> None:
    db_bus = db.query(models.BusModel).filter(models.BusModel.id == bus_id).first()
    if db_bus is not None:
        db_bus.total_rep = _max_rep_no(db, bus_id)


def add_start_time(db: Session, bus_id: int, start_data: schemas.StartTimeCreate) -> models.StartTimeModel:
    """
    Schedule a new rep for a bus.

    When no rep_no is given the next free number (max + 1) is used. The bus's
    total_rep follows the highest scheduled rep_no.
    """
    rep_no = start_data.rep_no or _max_rep_no(db, bus_id) + 1
    db_start = models.StartTimeModel(bus_id=bus_id, start_time=start_data.start_time, rep_no=rep_no)
    db.add(db_start)
    db.flush()
    _sync_total_rep(db, bus_id)
    db.commit()
    db.refresh(db_start)
    logger.info(f"Scheduled rep #{rep_no} at {db_start.start_time} for bus {bus_id}")
    return db_start


def update_start_time(
    db: Session, start_time_id: int, start_data: schemas.StartTimeUpdate
) -> Optional[models.StartTimeModel]:
    db_start = get_start_time(db, start_time_id)
    if not db_start:
        return None
    _apply_updates(db_start, start_data.model_dump(exclude_unset=True))
    db.flush()
    _sync_total_rep(db, db_start.bus_id)
    db.commit()
    db.refresh(db_start)
    return db_start


def delete_start_time(db: Session, start_time_id: int) -> bool:
    db_start = get_start_time(db, start_time_id)
    if not db_start:
        return False
    bus_id = db_start.bus_id
    db.delete(db_start)
    db.flush()
    _sync_total_rep(db, bus_id)
    db.commit()
    return True


# =============================================================================
# Trip State
# =============================================================================

def save_trip_state(
    db: Session,
    db_bus: models.BusModel,
    stops_cleared: int,
    start_stop_sequence: Optional[int] = None,
    start_time: Optional[time] = None,
    started_at: Optional[datetime] = None,
    last_cleared_stop_id: Optional[int] = None,
    reset: bool = False,
) -> models.BusModel:
    """
    Persist the trip-progress fields of a bus.

    ``reset`` marks a fresh trip: the last cleared stop is forgotten. Clearing a
    stop marks the bus as still standing at it until a fix outside the radius.
    """
    db_bus.stops_cleared = stops_cleared
    if start_stop_sequence is not None:
        db_bus.start_stop_sequence = start_stop_sequence
    if start_time is not None:
        db_bus.current_start_time = start_time
    if started_at is not None:
        db_bus.trip_started_at = started_at
    if reset:
        db_bus.last_cleared_stop_id = None
        db_bus.departed_last_stop = True
    elif last_cleared_stop_id is not None:
        db_bus.last_cleared_stop_id = last_cleared_stop_id
        db_bus.departed_last_stop = False
    db.commit()
    db.refresh(db_bus)
    return db_bus


def record_location(
    db: Session,
    db_bus: models.BusModel,
    latitude: float,
    longitude: float,
    recorded_at: Optional[datetime] = None,
) -> models.BusModel:
    db_bus.latitude = latitude
    db_bus.longitude = longitude
    db_bus.location_updated_at = recorded_at or datetime.utcnow()
    db.commit()
    db.refresh(db_bus)
    return db_bus


def mark_departed(db: Session, db_bus: models.BusModel) -> models.BusModel:
    """Record that the bus left the radius of its last cleared stop."""
    db_bus.departed_last_stop = True
    db.commit()
    db.refresh(db_bus)
    return db_bus


# =============================================================================
# Statistics
# =============================================================================

def count_entities(db: Session) -> dict:
    """Row counts shown on the admin dashboard."""
    return {
        "total_drivers": db.query(func.count(models.DriverModel.id)).scalar() or 0,
        "total_buses": db.query(func.count(models.BusModel.id)).scalar() or 0,
        "total_stops": db.query(func.count(models.StopModel.id)).scalar() or 0,
        "total_routes": db.query(func.count(func.distinct(models.RouteEntryModel.bus_id))).scalar() or 0,
    }
