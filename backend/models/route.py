"""
Domain view of a bus route as consumed by the trip-progress logic.
"""

from datetime import time
from typing import Literal, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from .geo import CompassDirection, Coordinates


class RouteStop(BaseModel):
    """One stop of a bus's circular route, detached from the ORM session."""

    entry_id: Optional[int] = None
    stop_id: int
    name: str
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    stop_order: int = Field(..., ge=1, description="1-based position within the route")
    time_from_start: float = Field(0, ge=0, description="Minutes after the rep start time")

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(lat=self.latitude, lon=self.longitude)

    class Config:
        alias_generator = to_camel
        populate_by_name = True


class StopProgress(RouteStop):
    """A route stop annotated with its state within the running trip."""

    status: Literal["cleared", "next", "upcoming"]
    scheduled_arrival: Optional[time] = None


class NextStopInfo(BaseModel):
    """Distance, direction and ETA from the last GPS fix to the next stop."""

    stop: RouteStop
    distance_m: Optional[float] = None
    distance_text: Optional[str] = None
    bearing: Optional[float] = None
    direction: Optional[CompassDirection] = None
    eta_minutes: Optional[int] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
