from __future__ import annotations

from dataclasses import dataclass

from .geo import Position


@dataclass(frozen=True, slots=True)
class Stop:
    name: str
    position: Position
    scheduled_time: str  # wall clock, e.g. "10:08 AM"
