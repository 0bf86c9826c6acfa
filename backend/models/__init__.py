"""
Domain models for the campus bus tracker.
"""

from .geo import CompassDirection, Coordinates
from .route import NextStopInfo, RouteStop, StopProgress

__all__ = [
    "CompassDirection",
    "Coordinates",
    "NextStopInfo",
    "RouteStop",
    "StopProgress",
]
