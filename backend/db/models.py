"""
SQLAlchemy models for the campus bus tracker database.

These models define the database schema for:
- Drivers, buses and stops
- Bus routes (ordered route entries) and scheduled start times
- Live trip state (stops cleared, last GPS fix)
"""

from sqlalchemy import (
    Column, String, Integer, Float, DateTime, Boolean,
    ForeignKey, Time, UniqueConstraint
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime

Base = declarative_base()


class DriverModel(Base):
    """Bus driver"""
    __tablename__ = "drivers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)

    buses = relationship("BusModel", back_populates="driver")

    def __repr__(self):
        return f"<DriverModel(id={self.id}, name='{self.name}')>"


class BusModel(Base):
    """Campus bus with its live trip state"""
    __tablename__ = "buses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    driver_id = Column(Integer, ForeignKey("drivers.id", ondelete="SET NULL"), nullable=True, index=True)
    total_rep = Column(Integer, nullable=False, default=0)

    # Trip progress
    stops_cleared = Column(Integer, nullable=False, default=0)
    start_stop_sequence = Column(Integer, nullable=False, default=0)
    current_start_time = Column(Time, nullable=True)
    trip_started_at = Column(DateTime, nullable=True)
    last_cleared_stop_id = Column(Integer, nullable=True)
    departed_last_stop = Column(Boolean, nullable=False, default=True)

    # Last GPS fix
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    location_updated_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    driver = relationship("DriverModel", back_populates="buses")
    route_entries = relationship(
        "RouteEntryModel",
        back_populates="bus",
        cascade="all, delete-orphan",
        order_by="RouteEntryModel.stop_order",
    )
    start_times = relationship(
        "StartTimeModel",
        back_populates="bus",
        cascade="all, delete-orphan",
        order_by="StartTimeModel.rep_no",
    )

    def __repr__(self):
        return f"<BusModel(id={self.id}, name='{self.name}', stops_cleared={self.stops_cleared})>"


class StopModel(Base):
    """Bus stop, shared between routes"""
    __tablename__ = "stops"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)

    route_entries = relationship("RouteEntryModel", back_populates="stop")

    def __repr__(self):
        return f"<StopModel(id={self.id}, name='{self.name}')>"


class RouteEntryModel(Base):
    """Position of a stop within a bus's circular route"""
    __tablename__ = "route_entries"
    __table_args__ = (
        UniqueConstraint("bus_id", "stop_order", name="uq_route_entry_bus_order"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    bus_id = Column(Integer, ForeignKey("buses.id", ondelete="CASCADE"), nullable=False, index=True)
    stop_id = Column(Integer, ForeignKey("stops.id", ondelete="RESTRICT"), nullable=False, index=True)
    stop_order = Column(Integer, nullable=False)  # 1-based
    time_from_start = Column(Float, nullable=False, default=0)  # minutes

    bus = relationship("BusModel", back_populates="route_entries")
    stop = relationship("StopModel", back_populates="route_entries")

    def __repr__(self):
        return f"<RouteEntryModel(bus_id={self.bus_id}, stop_id={self.stop_id}, order={self.stop_order})>"


class StartTimeModel(Base):
    """Scheduled departure of one rep of a bus route"""
    __tablename__ = "start_times"
    __table_args__ = (
        UniqueConstraint("bus_id", "rep_no", name="uq_start_time_bus_rep"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    bus_id = Column(Integer, ForeignKey("buses.id", ondelete="CASCADE"), nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    rep_no = Column(Integer, nullable=False)

    bus = relationship("BusModel", back_populates="start_times")

    def __repr__(self):
        return f"<StartTimeModel(bus_id={self.bus_id}, rep_no={self.rep_no}, start_time='{self.start_time}')>"
