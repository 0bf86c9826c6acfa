"""
Exceptions raised by the trip, tracking and admin services.

Routers translate them into HTTP responses; services never raise HTTPException.
"""


class TrackerError(Exception):
    """Base class for expected service-level failures."""


class NotFoundError(TrackerError):
    """A referenced entity does not exist."""

    entity = "Record"

    def __init__(self, entity_id):
        super().__init__(f"{self.entity} {entity_id} not found")
        self.entity_id = entity_id


class BusNotFoundError(NotFoundError):
    entity = "Bus"


class StopNotFoundError(NotFoundError):
    entity = "Stop"


class DriverNotFoundError(NotFoundError):
    entity = "Driver"


class RouteEntryNotFoundError(NotFoundError):
    entity = "Route entry"


class StartTimeNotFoundError(NotFoundError):
    entity = "Start time"


class ConflictError(TrackerError):
    """The change would break a uniqueness or reference constraint."""


class NoBusAssignedError(TrackerError):
    def __init__(self, driver_id):
        super().__init__(f"No bus assigned to driver {driver_id}")
        self.driver_id = driver_id


class NotAssignedDriverError(TrackerError):
    def __init__(self, driver_id, bus_id):
        super().__init__(f"Driver {driver_id} is not assigned to bus {bus_id}")
        self.driver_id = driver_id
        self.bus_id = bus_id


class EmptyRouteError(TrackerError):
    def __init__(self, bus_id=None):
        message = f"Bus {bus_id} has no route stops" if bus_id is not None else "Route has no stops"
        super().__init__(message)
        self.bus_id = bus_id


class InvalidStopError(TrackerError):
    """A stop was cleared (or selected) that is not the expected next stop."""

    def __init__(self, stop_id, expected_stop_id=None, message=None):
        if message is None:
            message = f"Stop {stop_id} is not the expected next stop ({expected_stop_id})"
        super().__init__(message)
        self.stop_id = stop_id
        self.expected_stop_id = expected_stop_id
