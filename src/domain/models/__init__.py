from .eta import (
    DeviationStatus,
    EtaResult,
    JourneySegments,
    NavigationLeg,
    ScheduleDeviation,
    StopEta,
)
from .geo import Position
from .presence import ConnectionBinding, ConnectionState
from .route import City, Route
from .stop import Stop

__all__ = [
    "City",
    "ConnectionBinding",
    "ConnectionState",
    "DeviationStatus",
    "EtaResult",
    "JourneySegments",
    "NavigationLeg",
    "Position",
    "Route",
    "ScheduleDeviation",
    "Stop",
    "StopEta",
]
