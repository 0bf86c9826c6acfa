"""
Database module for the campus bus tracker backend.

This module provides SQLite/PostgreSQL integration using SQLAlchemy.
"""

from .database import (
    get_db,
    init_engine,
    create_tables,
    is_database_available,
)
from .models import (
    Base,
    DriverModel,
    BusModel,
    StopModel,
    RouteEntryModel,
    StartTimeModel,
)
from . import crud, schemas

__all__ = [
    "get_db",
    "init_engine",
    "create_tables",
    "is_database_available",
    "Base",
    "DriverModel",
    "BusModel",
    "StopModel",
    "RouteEntryModel",
    "StartTimeModel",
    "crud",
    "schemas",
]
