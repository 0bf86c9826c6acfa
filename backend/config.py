"""
Configuration module for the campus bus tracker backend.

Centralizes all configuration settings including database URLs,
trip-progress thresholds and CORS settings.
"""

import os
import re
from typing import List


class Config:
    """Application configuration loaded from environment variables."""

    # Database Configuration
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./campus_bus.db")
    SQLALCHEMY_ECHO: bool = os.getenv("SQLALCHEMY_ECHO", "false").lower() == "true"

    # Trip progress
    STOP_PROXIMITY_METERS: float = float(os.getenv("STOP_PROXIMITY_METERS", "30.0"))
    AUTO_CLEAR_STOPS: bool = os.getenv("AUTO_CLEAR_STOPS", "true").lower() == "true"

    # ETA / tracking
    AVERAGE_BUS_SPEED_KMH: float = float(os.getenv("AVERAGE_BUS_SPEED_KMH", "20.0"))
    LOCATION_STALE_SECONDS: int = int(os.getenv("LOCATION_STALE_SECONDS", "120"))
    NEARBY_STOPS_LIMIT: int = int(os.getenv("NEARBY_STOPS_LIMIT", "5"))

    # HTTP
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")

    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

    @classmethod
    def get_cors_origins(cls) -> List[str]:
        """Split the comma separated CORS_ORIGINS value."""
        origins = [o.strip() for o in cls.CORS_ORIGINS.split(",") if o.strip()]
        return origins or ["*"]

    @classmethod
    def get_config_dict(cls) -> dict:
        """Return configuration as dictionary (for debugging)."""
        return {
            "DATABASE_URL": re.sub(r"//[^@/]*@", "//***@", cls.DATABASE_URL),
            "STOP_PROXIMITY_METERS": cls.STOP_PROXIMITY_METERS,
            "AUTO_CLEAR_STOPS": cls.AUTO_CLEAR_STOPS,
            "AVERAGE_BUS_SPEED_KMH": cls.AVERAGE_BUS_SPEED_KMH,
            "LOCATION_STALE_SECONDS": cls.LOCATION_STALE_SECONDS,
            "NEARBY_STOPS_LIMIT": cls.NEARBY_STOPS_LIMIT,
            "LOG_LEVEL": cls.LOG_LEVEL,
        }


# Global configuration instance
config = Config()
