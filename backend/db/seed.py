"""
Seed the database with drivers, stops, buses, routes and start times.

The input document references drivers and stops by a local ``key`` so the
same file can be loaded into an empty database of any engine.
"""

import json
import logging
from datetime import time
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from . import crud, schemas

logger = logging.getLogger(__name__)

SAMPLE_FILE = Path(__file__).resolve().parents[1] / "data" / "sample_campus.json"


def _parse_time(value: str) -> time:
    return time.fromisoformat(value)


def seed_from_dict(db: Session, payload: Dict[str, Any]) -> Dict[str, int]:
    """
    Load a campus description into the database.

    Returns:
        Counts of the created records by kind.
    """
    driver_ids: Dict[str, int] = {}
    for item in payload.get("drivers", []) or []:
        driver = crud.create_driver(db, schemas.DriverCreate(name=item["name"], phone=item.get("phone")))
        driver_ids[item.get("key", item["name"])] = driver.id

    stop_ids: Dict[str, int] = {}
    for item in payload.get("stops", []) or []:
        stop = crud.create_stop(
            db,
            schemas.StopCreate(name=item["name"], latitude=item["latitude"], longitude=item["longitude"]),
        )
        stop_ids[item.get("key", item["name"])] = stop.id

    counts = {"drivers": len(driver_ids), "stops": len(stop_ids), "buses": 0, "route_entries": 0, "start_times": 0}
    for item in payload.get("buses", []) or []:
        driver_key = item.get("driver")
        bus = crud.create_bus(
            db,
            schemas.BusCreate(name=item["name"], driver_id=driver_ids.get(driver_key) if driver_key else None),
        )
        counts["buses"] += 1

        for position, entry in enumerate(item.get("route", []) or [], start=1):
            crud.add_route_entry(
                db,
                schemas.RouteEntryCreate(
                    bus_id=bus.id,
                    stop_id=stop_ids[entry["stop"]],
                    stop_order=entry.get("stop_order", position),
                    time_from_start=entry.get("time_from_start", 0),
                ),
            )
            counts["route_entries"] += 1

        for start in item.get("start_times", []) or []:
            crud.add_start_time(db, bus.id, schemas.StartTimeCreate(start_time=_parse_time(start)))
            counts["start_times"] += 1

    logger.info(f"Seeded database: {counts}")
    return counts


def seed_from_file(db: Session, path: Optional[Path] = None) -> Dict[str, int]:
    source = Path(path) if path else SAMPLE_FILE
    with source.open("r", encoding="utf-8") as f:
        payload = json.load(f)
    return seed_from_dict(db, payload)
