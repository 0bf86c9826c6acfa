"""
Shared FastAPI dependencies and service error translation.
"""

from typing import Optional

from fastapi import Header, HTTPException, status

from config import Config, config
from services.errors import (
    ConflictError,
    EmptyRouteError,
    InvalidStopError,
    NoBusAssignedError,
    NotAssignedDriverError,
    NotFoundError,
    TrackerError,
)


def get_settings() -> Config:
    return config


def get_driver_id(x_driver_id: Optional[int] = Header(default=None)) -> int:
    """Driver identity, supplied by the authenticating proxy as X-Driver-Id."""
    if x_driver_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing X-Driver-Id header")
    return x_driver_id


def http_error(exc: TrackerError) -> HTTPException:
    """Map a service error onto the matching HTTP status."""
    if isinstance(exc, (NotFoundError, NoBusAssignedError)):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, NotAssignedDriverError):
        code = status.HTTP_403_FORBIDDEN
    elif isinstance(exc, (InvalidStopError, EmptyRouteError, ConflictError)):
        code = status.HTTP_409_CONFLICT
    else:
        code = status.HTTP_400_BAD_REQUEST
    return HTTPException(status_code=code, detail=str(exc))
