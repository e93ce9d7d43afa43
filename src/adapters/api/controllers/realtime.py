from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone
from typing import Literal

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
)

from src.adapters.api.controllers.catalog import (
    get_route_or_404,
    position_to_schema,
    stop_to_schema,
)
from src.adapters.api.dependencies import (
    get_app_config,
    get_catalog_service,
    get_eta_engine,
    get_presence_registry,
)
from src.adapters.api.schemas.realtime import (
    DeviationSchema,
    EtaSchema,
    NavigationLegSchema,
    RouteEtasSchema,
    StopEtaSchema,
    VehicleSchema,
    VehiclesResponseSchema,
)
from src.adapters.config import AppConfig
from src.app.services.catalog_service import CatalogService
from src.app.services.eta_engine import EtaEngine
from src.app.services.presence_registry import PresenceRegistry
from src.domain.exceptions import InvalidPosition, RouteNotFound
from src.domain.models import EtaResult, NavigationLeg, Position, StopEta

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


def _eta_to_schema(eta: EtaResult, *, with_path: bool) -> EtaSchema:
    return EtaSchema(
        duration_s=eta.duration_s,
        distance_m=eta.distance_m,
        path=[position_to_schema(p) for p in eta.path] if with_path else None,
    )


def _stop_eta_to_schema(row: StopEta) -> StopEtaSchema:
    return StopEtaSchema(
        stop_index=row.stop_index,
        stop=stop_to_schema(row.stop),
        available=row.available,
        vehicle_id=row.vehicle_id,
        eta=_eta_to_schema(row.eta, with_path=False) if row.eta else None,
        deviation=(
            DeviationSchema(
                status=row.deviation.status.value,
                minutes=row.deviation.minutes,
                delta_minutes=row.deviation.delta_minutes,
            )
            if row.deviation
            else None
        ),
    )


def _etas_to_schema(route_id: str, rows: tuple[StopEta, ...]) -> RouteEtasSchema:
    return RouteEtasSchema(
        route_id=route_id,
        computed_at=datetime.now(timezone.utc),
        stops=[_stop_eta_to_schema(r) for r in rows],
    )


def _leg_to_schema(route_id: str, leg: NavigationLeg) -> NavigationLegSchema:
    return NavigationLegSchema(
        vehicle_id=leg.vehicle_id,
        route_id=route_id,
        stop_index=leg.stop_index,
        stop=stop_to_schema(leg.stop),
        available=leg.eta is not None,
        eta=_eta_to_schema(leg.eta, with_path=True) if leg.eta else None,
    )


def _vehicles_response(snapshot: dict[str, Position]) -> VehiclesResponseSchema:
    return VehiclesResponseSchema(
        fetched_at=datetime.now(timezone.utc),
        vehicles=[
            VehicleSchema(vehicle_id=vid, position=position_to_schema(p))
            for vid, p in sorted(snapshot.items())
        ],
    )


@router.get("/vehicles", response_model=VehiclesResponseSchema)
def list_vehicles(
    vehicle_id: list[str] | None = Query(default=None),
    registry: PresenceRegistry = Depends(get_presence_registry),
) -> VehiclesResponseSchema:
    snapshot = registry.snapshot()
    if vehicle_id:
        wanted = set(vehicle_id)
        snapshot = {vid: p for vid, p in snapshot.items() if vid in wanted}
    return _vehicles_response(snapshot)


@router.get(
    "/cities/{city_id}/routes/{route_id}/vehicles",
    response_model=VehiclesResponseSchema,
)
def list_route_vehicles(
    city_id: str,
    route_id: str,
    service: CatalogService = Depends(get_catalog_service),
    registry: PresenceRegistry = Depends(get_presence_registry),
    engine: EtaEngine = Depends(get_eta_engine),
) -> VehiclesResponseSchema:
    route = get_route_or_404(service, city_id, route_id)
    online = engine.route_vehicles(route, registry.snapshot())
    return _vehicles_response(dict(online))


@router.get("/cities/{city_id}/routes/{route_id}/etas", response_model=RouteEtasSchema)
async def get_route_etas(
    city_id: str,
    route_id: str,
    service: CatalogService = Depends(get_catalog_service),
    registry: PresenceRegistry = Depends(get_presence_registry),
    engine: EtaEngine = Depends(get_eta_engine),
) -> RouteEtasSchema:
    route = get_route_or_404(service, city_id, route_id)
    rows = await engine.stop_etas(route, registry.snapshot())
    return _etas_to_schema(route.id, rows)


@router.get(
    "/cities/{city_id}/vehicles/{vehicle_id}/navigation",
    response_model=NavigationLegSchema,
)
async def get_vehicle_navigation(
    city_id: str,
    vehicle_id: str,
    view: Literal["driver", "rider"] = Query(default="driver"),
    service: CatalogService = Depends(get_catalog_service),
    registry: PresenceRegistry = Depends(get_presence_registry),
    engine: EtaEngine = Depends(get_eta_engine),
) -> NavigationLegSchema:
    route = service.find_route_for_vehicle(city_id, vehicle_id)
    if route is None:
        raise HTTPException(status_code=404, detail="Vehicle not on any route")

    leg = await engine.navigation_leg(
        route, vehicle_id, registry.snapshot(), driver=view == "driver"
    )
    if leg is None:
        raise HTTPException(status_code=404, detail="Vehicle is offline")
    return _leg_to_schema(route.id, leg)


@router.get(
    "/cities/{city_id}/routes/{route_id}/start-approach",
    response_model=NavigationLegSchema | None,
)
async def get_start_approach(
    city_id: str,
    route_id: str,
    lat: float = Query(...),
    lng: float = Query(...),
    vehicle_id: str | None = Query(default=None),
    service: CatalogService = Depends(get_catalog_service),
    engine: EtaEngine = Depends(get_eta_engine),
) -> NavigationLegSchema | None:
    route = get_route_or_404(service, city_id, route_id)
    try:
        position = Position(lat=lat, lng=lng)
    except InvalidPosition as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    leg = await engine.start_approach(route, position, vehicle_id=vehicle_id)
    return _leg_to_schema(route.id, leg) if leg else None


@router.websocket("/ws/cities/{city_id}/routes/{route_id}/etas")
async def stream_route_etas(
    websocket: WebSocket,
    city_id: str,
    route_id: str,
    service: CatalogService = Depends(get_catalog_service),
    registry: PresenceRegistry = Depends(get_presence_registry),
    engine: EtaEngine = Depends(get_eta_engine),
    config: AppConfig = Depends(get_app_config),
) -> None:
    try:
        route = service.get_route(city_id, route_id)
    except RouteNotFound:
        await websocket.close(code=1008)
        return

    await websocket.accept()

    async def _pump() -> None:
        rows_stream = engine.watch(
            route, registry, interval_s=config.eta_refresh_interval_s
        )
        try:
            async for rows in rows_stream:
                schema = _etas_to_schema(route.id, rows)
                await websocket.send_json(schema.model_dump(mode="json"))
        except WebSocketDisconnect:
            return
        except Exception:
            logger.exception("ETA stream failed", extra={"route_id": route.id})
            with contextlib.suppress(RuntimeError, WebSocketDisconnect):
                await websocket.close(code=1011)
        finally:
            await rows_stream.aclose()

    pump = asyncio.create_task(_pump())
    try:
        # Clients don't send anything; frames of either kind are ignored.
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
    finally:
        pump.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await pump
        logger.debug("ETA stream closed", extra={"route_id": route.id})
