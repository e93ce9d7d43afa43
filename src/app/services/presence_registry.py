from __future__ import annotations

import threading
from dataclasses import dataclass, field

from src.domain.exceptions import InvalidPosition
from src.domain.models import Position


@dataclass(slots=True)
class PresenceRegistry:
    """Last known position per online vehicle.

    Lives as long as the process (nothing is persisted). One entry per vehicle
    id, last write wins. Each operation holds the lock, so REST handlers
    running in the threadpool and the relay on the event loop see consistent
    state.
    """

    _positions: dict[str, Position] = field(default_factory=dict, init=False)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def upsert(self, vehicle_id: str, position: Position) -> None:
        if not vehicle_id:
            raise InvalidPosition("Empty vehicle id")
        if not isinstance(position, Position):
            raise InvalidPosition(f"Not a position: {position!r}")
        with self._lock:
            self._positions[vehicle_id] = position

    def remove(self, vehicle_id: str) -> bool:
        with self._lock:
            return self._positions.pop(vehicle_id, None) is not None

    def get(self, vehicle_id: str) -> Position | None:
        with self._lock:
            return self._positions.get(vehicle_id)

    def snapshot(self) -> dict[str, Position]:
        # Positions are immutable, a shallow copy is a full copy.
        with self._lock:
            return dict(self._positions)

    def __contains__(self, vehicle_id: object) -> bool:
        with self._lock:
            return vehicle_id in self._positions

    def __len__(self) -> int:
        with self._lock:
            return len(self._positions)
