from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Mapping

from src.domain.models import Position


class IRelayConnection(ABC):
    """One live client connection as seen by the relay.

    Implementations raise on transport failure; the relay turns that into a
    disconnect.
    """

    @abstractmethod
    async def send_initial_sync(self, vehicles: Mapping[str, Position]) -> None:
        raise NotImplementedError

    @abstractmethod
    async def send_position_update(self, vehicle_id: str, position: Position) -> None:
        raise NotImplementedError

    @abstractmethod
    async def send_vehicle_removed(self, vehicle_id: str) -> None:
        raise NotImplementedError
