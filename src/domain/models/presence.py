from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ConnectionState(str, Enum):
    CONNECTED = "connected"
    BOUND = "bound"
    DISCONNECTED = "disconnected"


@dataclass(slots=True)
class ConnectionBinding:
    """Relay-side state of one transport connection.

    The vehicle id is set on the first valid update and never changes.
    """

    connection_id: str
    state: ConnectionState = ConnectionState.CONNECTED
    vehicle_id: str | None = None

    @property
    def is_live(self) -> bool:
        return self.state is not ConnectionState.DISCONNECTED

    def bind(self, vehicle_id: str) -> None:
        if self.state is not ConnectionState.CONNECTED:
            raise RuntimeError(f"Cannot bind connection in state {self.state.value}")
        self.vehicle_id = vehicle_id
        self.state = ConnectionState.BOUND

    def close(self) -> None:
        self.state = ConnectionState.DISCONNECTED
