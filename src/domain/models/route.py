from __future__ import annotations

from dataclasses import dataclass

from .geo import Position
from .stop import Stop


@dataclass(frozen=True, slots=True)
class City:
    id: str
    name: str
    center: Position


@dataclass(frozen=True, slots=True)
class Route:
    """Static route definition from the catalog.

    Stop order is the direction of travel. `vehicle_ids` order is used to break
    ties when two vehicles are equally close to a stop.
    """

    id: str
    name: str
    stops: tuple[Stop, ...] = ()
    vehicle_ids: tuple[str, ...] = ()
    city_id: str | None = None

    @property
    def stop_positions(self) -> tuple[Position, ...]:
        return tuple(s.position for s in self.stops)
