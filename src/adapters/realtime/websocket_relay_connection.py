from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Mapping

from fastapi import WebSocket
from pydantic import ValidationError

from src.adapters.api.schemas.relay import (
    InitialSyncMessage,
    PositionPayload,
    PositionUpdateMessage,
    RefreshRequestMessage,
    VehicleRemovedMessage,
    inbound_message_adapter,
)
from src.app.ports.output import IRelayConnection
from src.app.services.relay_service import RelayService
from src.domain.models import Position

logger = logging.getLogger(__name__)


def _payload(p: Position) -> PositionPayload:
    return PositionPayload(lat=p.lat, lng=p.lng)


@dataclass(slots=True)
class WebSocketRelayConnection(IRelayConnection):
    """Relay connection over a FastAPI/Starlette WebSocket (JSON text frames)."""

    websocket: WebSocket

    async def send_initial_sync(self, vehicles: Mapping[str, Position]) -> None:
        msg = InitialSyncMessage(
            vehicles={vid: _payload(p) for vid, p in vehicles.items()}
        )
        await self.websocket.send_json(msg.model_dump(by_alias=True))

    async def send_position_update(self, vehicle_id: str, position: Position) -> None:
        msg = PositionUpdateMessage(vehicle_id=vehicle_id, position=_payload(position))
        await self.websocket.send_json(msg.model_dump(by_alias=True))

    async def send_vehicle_removed(self, vehicle_id: str) -> None:
        msg = VehicleRemovedMessage(vehicle_id=vehicle_id)
        await self.websocket.send_json(msg.model_dump(by_alias=True))


async def dispatch_relay_message(
    service: RelayService, connection_id: str, raw: str
) -> None:
    """Decode one inbound text frame and hand it to the relay.

    Anything that isn't a well-formed message is dropped.
    """

    try:
        decoded = json.loads(raw)
        message = inbound_message_adapter.validate_python(decoded)
    except (ValueError, ValidationError):
        logger.debug("Dropping malformed relay message")
        return

    if isinstance(message, PositionUpdateMessage):
        await service.on_update(
            connection_id,
            message.vehicle_id,
            message.position.lat,
            message.position.lng,
        )
    elif isinstance(message, RefreshRequestMessage):
        await service.on_refresh_request(connection_id)
