"""
Pydantic schemas for database operations.

These schemas are used for:
- Request validation (input data)
- Response serialization (output data)
- A single response envelope (ApiResponse) for every endpoint

Entity schemas use the snake_case column names. Driver and passenger view
payloads are emitted in camelCase, which is what the web client reads.

Note: These are separate from the domain models in models/ (RouteStop, etc.)
"""

from datetime import datetime, time
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from models.geo import CompassDirection
from models.route import NextStopInfo, RouteStop, StopProgress

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every endpoint: ``{success, message, data}``."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


class CamelModel(BaseModel):
    """
    Accepts snake_case or camelCase input, serializes camelCase.

    Every nested model of a camelCase payload is camelCase too (RouteStop,
    NextStopInfo and the *View schemas).
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# =============================================================================
# Driver Schemas
# =============================================================================

class DriverBase(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    phone: Optional[str] = Field(default=None, max_length=32)


class DriverCreate(DriverBase):
    pass


class DriverUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    phone: Optional[str] = Field(default=None, max_length=32)


class DriverResponse(DriverBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# Stop Schemas
# =============================================================================

class StopBase(BaseModel):
    """Base schema for Stop (common fields)"""
    name: str = Field(min_length=1, max_length=120)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class StopCreate(StopBase):
    pass


class StopUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class StopResponse(StopBase):
    id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# Bus Schemas
# =============================================================================

class BusBase(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    driver_id: Optional[int] = None


class BusCreate(BusBase):
    pass


class BusUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    driver_id: Optional[int] = None
    total_rep: Optional[int] = Field(default=None, ge=0, alias="totalRep")

    class Config:
        populate_by_name = True


class BusResponse(BusBase):
    """Schema for bus response including its live trip state"""
    id: int
    total_rep: int = 0
    stops_cleared: int = 0
    start_stop_sequence: int = 0
    current_start_time: Optional[time] = None
    trip_started_at: Optional[datetime] = None
    last_cleared_stop_id: Optional[int] = None
    departed_last_stop: bool = True
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# =============================================================================
# Route Schemas
# =============================================================================

class RouteEntryCreate(BaseModel):
    """Schema for adding a stop to a bus route"""
    bus_id: int
    stop_id: int
    stop_order: int = Field(..., ge=1)
    time_from_start: float = Field(default=0, ge=0)


class RouteEntryUpdate(BaseModel):
    stop_id: Optional[int] = None
    stop_order: Optional[int] = Field(default=None, ge=1)
    time_from_start: Optional[float] = Field(default=None, ge=0)


class RouteEntryResponse(BaseModel):
    id: int
    bus_id: int
    stop_id: int
    stop_order: int
    time_from_start: float

    class Config:
        from_attributes = True


class StartTimeCreate(BaseModel):
    """Schema for scheduling a rep; rep_no defaults to the next free number"""
    start_time: time
    rep_no: Optional[int] = Field(default=None, ge=1)


class StartTimeUpdate(BaseModel):
    start_time: Optional[time] = None
    rep_no: Optional[int] = Field(default=None, ge=1)


class StartTimeResponse(BaseModel):
    id: int
    bus_id: int
    start_time: time
    rep_no: int

    class Config:
        from_attributes = True


# =============================================================================
# View Schemas
# =============================================================================
# Entity responses above are snake_case (admin API). The driver and passenger
# views below are camelCase all the way down, nested entities included.

class BusView(BusResponse):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class StopView(StopResponse):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


class StartTimeView(StartTimeResponse):
    class Config:
        alias_generator = to_camel
        populate_by_name = True


# =============================================================================
# Driver Trip Schemas
# =============================================================================

class InitializeTripRequest(CamelModel):
    """Schema for POST /driver/initialize-trip"""
    bus_id: int
    start_time: time
    next_stop_id: Optional[int] = None
    next_stop_sequence: int = Field(default=0, ge=0)

    class Config:
        json_schema_extra = {
            "example": {"busId": 1, "startTime": "08:30", "nextStopId": 3, "nextStopSequence": 0}
        }


class UpdateLocationRequest(CamelModel):
    """Schema for POST /driver/update-location"""
    bus_id: int
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)


class ClearStopRequest(CamelModel):
    """Schema for POST /driver/clear-stop"""
    bus_id: int
    stop_id: int


class LocationUpdateResult(CamelModel):
    bus: BusView
    stop_cleared: bool = False
    cleared_stop: Optional[RouteStop] = None
    next_stop: Optional[NextStopInfo] = None


class MyBusData(CamelModel):
    """
    Payload of GET /driver/my-bus.

    ``stops_cleared`` counts from the trip's first stop, which sits at
    ``start_stop_sequence`` in ``route``; ``next_stop_index`` is the absolute
    index of the next stop, ``(start_stop_sequence + stops_cleared) % len(route)``.
    ``progress`` lists the stops in trip order.
    """
    bus: BusView
    route: List[RouteStop] = Field(default_factory=list)
    stops_cleared: int = 0
    start_stop_sequence: int = 0
    next_stop_index: Optional[int] = None
    last_cleared_stop: Optional[RouteStop] = None
    next_stop: Optional[RouteStop] = None
    next_stop_info: Optional[NextStopInfo] = None
    progress: List[StopProgress] = Field(default_factory=list)


class TripOptionsData(CamelModel):
    """Payload of GET /driver/trip-options/{bus_id}"""
    scheduled_times: List[StartTimeView] = Field(default_factory=list)
    route_stops: List[RouteStop] = Field(default_factory=list)


# =============================================================================
# Passenger Tracking Schemas
# =============================================================================

class BusSummary(CamelModel):
    id: int
    name: str
    driver_name: Optional[str] = None
    active: bool = False


class BusLocationData(CamelModel):
    bus_id: int
    name: Optional[str] = None
    latitude: float
    longitude: float
    timestamp: datetime
    stale: bool = False


class RouteWithStopsData(CamelModel):
    bus_id: int
    stops: List[StopProgress] = Field(default_factory=list)
    start_stop_sequence: int = 0
    next_stop_index: Optional[int] = None
    current_stop: Optional[RouteStop] = None
    next_stop: Optional[RouteStop] = None


class BusInfoData(CamelModel):
    bus_id: int
    name: str
    driver_name: Optional[str] = None
    active: bool = False
    last_updated: Optional[datetime] = None
    current_stop: Optional[RouteStop] = None
    next_stop: Optional[RouteStop] = None
    distance_to_next_stop: Optional[str] = None
    direction: Optional[CompassDirection] = None
    estimated_arrival: Optional[int] = None


class NearbyStop(CamelModel):
    stop: StopView
    distance_m: float
    distance_text: str


# =============================================================================
# Admin Schemas
# =============================================================================

class AdminStats(CamelModel):
    """Payload of GET /admin/stats"""
    total_buses: int = 0
    total_stops: int = 0
    total_routes: int = 0
    total_drivers: int = 0
    active_buses: int = 0
