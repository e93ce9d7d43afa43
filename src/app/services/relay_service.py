from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable
from uuid import uuid4

from src.app.ports.output import IRelayConnection
from src.app.services.presence_registry import PresenceRegistry
from src.domain.exceptions import InvalidPosition
from src.domain.models import ConnectionBinding, ConnectionState, Position

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Session:
    connection: IRelayConnection
    binding: ConnectionBinding


@dataclass(slots=True)
class RelayService:
    """Real-time fan-out of vehicle positions.

    Connection lifecycle: connected -> bound -> disconnected. A connection is
    bound to the vehicle id of its first valid update and keeps it until it
    disconnects. Updates are best effort: invalid ones are dropped without
    telling the sender, send failures turn into disconnects, and nothing here
    raises into the transport layer.

    Several connections may claim the same vehicle id (e.g. a driver app that
    reconnected before the old socket timed out). Positions are last-write-wins
    and the vehicle is removed only when its last bound connection leaves.
    """

    registry: PresenceRegistry
    _sessions: dict[str, _Session] = field(default_factory=dict, init=False)

    async def connect(self, connection: IRelayConnection) -> ConnectionBinding:
        binding = ConnectionBinding(connection_id=uuid4().hex)
        self._sessions[binding.connection_id] = _Session(connection, binding)
        logger.info(
            "Relay client connected", extra={"connection_id": binding.connection_id}
        )

        try:
            await connection.send_initial_sync(self.registry.snapshot())
        except Exception:
            logger.info(
                "Initial sync failed; dropping connection",
                extra={"connection_id": binding.connection_id},
            )
            await self.on_disconnect(binding.connection_id)
        return binding

    def binding(self, connection_id: str) -> ConnectionBinding | None:
        session = self._sessions.get(connection_id)
        return session.binding if session else None

    @property
    def connection_count(self) -> int:
        return len(self._sessions)

    async def on_update(
        self, connection_id: str, vehicle_id: str, lat: float, lng: float
    ) -> bool:
        """Apply and fan out a position update. Returns False when dropped."""

        session = self._sessions.get(connection_id)
        if session is None or not session.binding.is_live:
            return False

        if not vehicle_id:
            logger.debug("Dropping update without vehicle id")
            return False

        try:
            position = Position(lat=float(lat), lng=float(lng))
        except (InvalidPosition, TypeError, ValueError):
            logger.debug("Dropping invalid position", extra={"vehicle_id": vehicle_id})
            return False

        binding = session.binding
        if binding.state is ConnectionState.CONNECTED:
            binding.bind(vehicle_id)
            logger.info(
                "Relay connection bound",
                extra={"connection_id": connection_id, "vehicle_id": vehicle_id},
            )
        elif binding.vehicle_id != vehicle_id:
            logger.debug(
                "Dropping update for a vehicle the connection is not bound to",
                extra={"bound_to": binding.vehicle_id, "vehicle_id": vehicle_id},
            )
            return False

        self.registry.upsert(vehicle_id, position)
        await self._broadcast(
            lambda conn: conn.send_position_update(vehicle_id, position),
            exclude=connection_id,
        )
        return True

    async def on_refresh_request(self, connection_id: str) -> None:
        session = self._sessions.get(connection_id)
        if session is None or not session.binding.is_live:
            return
        try:
            await session.connection.send_initial_sync(self.registry.snapshot())
        except Exception:
            await self.on_disconnect(connection_id)

    async def on_disconnect(self, connection_id: str) -> None:
        session = self._sessions.pop(connection_id, None)
        if session is None:
            return

        binding = session.binding
        binding.close()
        logger.info("Relay client disconnected", extra={"connection_id": connection_id})

        vehicle_id = binding.vehicle_id
        if not vehicle_id:
            return

        still_claimed = any(
            s.binding.vehicle_id == vehicle_id and s.binding.is_live
            for s in self._sessions.values()
        )
        if still_claimed:
            return

        self.registry.remove(vehicle_id)
        await self._broadcast(lambda conn: conn.send_vehicle_removed(vehicle_id))

    async def _broadcast(
        self,
        send: Callable[[IRelayConnection], Awaitable[None]],
        *,
        exclude: str | None = None,
    ) -> None:
        targets = [
            (cid, s.connection)
            for cid, s in self._sessions.items()
            if cid != exclude and s.binding.is_live
        ]
        if not targets:
            return

        results = await asyncio.gather(
            *(send(conn) for _, conn in targets), return_exceptions=True
        )

        for (cid, _), result in zip(targets, results):
            if isinstance(result, Exception):
                logger.info(
                    "Send failed; treating as disconnect",
                    extra={"connection_id": cid, "error": type(result).__name__},
                )
                await self.on_disconnect(cid)
