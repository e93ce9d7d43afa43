from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .geo import Position
from .stop import Stop


class DeviationStatus(str, Enum):
    EARLY = "early"
    ON_TIME = "on_time"
    LATE = "late"


@dataclass(frozen=True, slots=True)
class ScheduleDeviation:
    status: DeviationStatus
    delta_minutes: int  # positive when behind schedule

    @property
    def minutes(self) -> int:
        return abs(self.delta_minutes)


@dataclass(frozen=True, slots=True)
class EtaResult:
    duration_s: float
    distance_m: float
    path: tuple[Position, ...] = ()


@dataclass(frozen=True, slots=True)
class StopEta:
    """ETA table row. `eta is None` means the stop is currently unavailable."""

    stop_index: int
    stop: Stop
    vehicle_id: str | None = None
    eta: EtaResult | None = None
    deviation: ScheduleDeviation | None = None

    @property
    def available(self) -> bool:
        return self.eta is not None


@dataclass(frozen=True, slots=True)
class JourneySegments:
    before: tuple[Position, ...] = ()
    journey: tuple[Position, ...] = ()
    after: tuple[Position, ...] = ()

    @property
    def highlighted(self) -> bool:
        return bool(self.journey)


@dataclass(frozen=True, slots=True)
class NavigationLeg:
    vehicle_id: str | None
    stop_index: int
    stop: Stop
    eta: EtaResult | None = None
