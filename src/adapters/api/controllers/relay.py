from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, WebSocket

from src.adapters.api.dependencies import get_relay_service
from src.adapters.realtime.websocket_relay_connection import (
    WebSocketRelayConnection,
    dispatch_relay_message,
)
from src.app.services.relay_service import RelayService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["relay"])


@router.websocket("/ws/relay")
async def relay(
    websocket: WebSocket,
    service: RelayService = Depends(get_relay_service),
) -> None:
    """Vehicle and viewer clients share this socket.

    Vehicles send `position_update` frames; every client receives
    `initial_sync` on connect, then `position_update` / `vehicle_removed`.
    Only text frames carry messages; binary frames are ignored.
    """

    await websocket.accept()
    binding = await service.connect(WebSocketRelayConnection(websocket))

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break

            raw = message.get("text")
            if raw is None:
                logger.debug(
                    "Ignoring binary relay frame",
                    extra={"connection_id": binding.connection_id},
                )
                continue
            await dispatch_relay_message(service, binding.connection_id, raw)
    finally:
        await service.on_disconnect(binding.connection_id)
