"""
Geographic value types shared by the trip-progress and tracking services.
"""

from enum import Enum

from pydantic import BaseModel, Field


class CompassDirection(str, Enum):
    """Eight-way compass octants used for driver direction hints."""
    NORTH = "north"
    NORTHEAST = "northeast"
    EAST = "east"
    SOUTHEAST = "southeast"
    SOUTH = "south"
    SOUTHWEST = "southwest"
    WEST = "west"
    NORTHWEST = "northwest"


class Coordinates(BaseModel):
    """Geographic coordinates (latitude, longitude) in decimal degrees."""

    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")

    class Config:
        frozen = True
        json_schema_extra = {"example": {"lat": 22.3190, "lon": 87.3091}}
