"""
Pytest configuration and shared fixtures for the campus bus tracker tests.
"""
import os
import sys
from datetime import time
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend to path
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from db import crud, schemas
from db.database import get_db
from db.models import Base
from main import app
from models.route import RouteStop


# Stops of the test campus, about 110 m apart: A -> B due north, B -> C due east.
STOP_A = (22.3190, 87.3091)
STOP_B = (22.3200, 87.3091)
STOP_C = (22.3200, 87.3101)


# ============================================================
# DOMAIN FIXTURES
# ============================================================

@pytest.fixture
def route_stops():
    """Three-stop circular route A -> B -> C as domain objects."""
    return [
        RouteStop(stop_id=11, name="A", latitude=STOP_A[0], longitude=STOP_A[1], stop_order=1, time_from_start=0),
        RouteStop(stop_id=12, name="B", latitude=STOP_B[0], longitude=STOP_B[1], stop_order=2, time_from_start=5),
        RouteStop(stop_id=13, name="C", latitude=STOP_C[0], longitude=STOP_C[1], stop_order=3, time_from_start=12),
    ]


# ============================================================
# DATABASE FIXTURES
# ============================================================

@pytest.fixture
def db_session():
    """In-memory SQLite session shared with the API client."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(bind=engine, autoflush=False, autocommit=False)
    db = Session()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()


@pytest.fixture
def client(db_session):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def campus(db_session):
    """
    One driver operating one bus on the A -> B -> C route, with two reps
    scheduled at 08:00 and 10:00.
    """
    driver = crud.create_driver(db_session, schemas.DriverCreate(name="Ravi"))
    other_driver = crud.create_driver(db_session, schemas.DriverCreate(name="Anita"))
    stops = [
        crud.create_stop(db_session, schemas.StopCreate(name=name, latitude=lat, longitude=lon))
        for name, (lat, lon) in (("A", STOP_A), ("B", STOP_B), ("C", STOP_C))
    ]
    bus = crud.create_bus(db_session, schemas.BusCreate(name="Loop 1", driver_id=driver.id))
    for order, (stop, minutes) in enumerate(zip(stops, (0, 5, 12)), start=1):
        crud.add_route_entry(
            db_session,
            schemas.RouteEntryCreate(bus_id=bus.id, stop_id=stop.id, stop_order=order, time_from_start=minutes),
        )
    crud.add_start_time(db_session, bus.id, schemas.StartTimeCreate(start_time=time(8, 0)))
    crud.add_start_time(db_session, bus.id, schemas.StartTimeCreate(start_time=time(10, 0)))

    return SimpleNamespace(
        driver_id=driver.id,
        other_driver_id=other_driver.id,
        bus_id=bus.id,
        stop_ids=[s.id for s in stops],
        coords=[STOP_A, STOP_B, STOP_C],
        headers={"X-Driver-Id": str(driver.id)},
    )
