from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from src.adapters.api.dependencies import get_catalog_service, get_eta_engine
from src.adapters.api.schemas.catalog import (
    CitySchema,
    PositionSchema,
    RouteSchema,
    StopSchema,
)
from src.adapters.api.schemas.realtime import JourneySchema
from src.app.services.catalog_service import CatalogService
from src.app.services.eta_engine import EtaEngine
from src.domain.exceptions import RouteNotFound
from src.domain.models import Position, Route, Stop

router = APIRouter(tags=["catalog"])


def position_to_schema(p: Position) -> PositionSchema:
    return PositionSchema(lat=p.lat, lng=p.lng)


def stop_to_schema(stop: Stop) -> StopSchema:
    return StopSchema(
        name=stop.name,
        position=position_to_schema(stop.position),
        scheduled_time=stop.scheduled_time,
    )


def route_to_schema(route: Route) -> RouteSchema:
    return RouteSchema(
        id=route.id,
        name=route.name,
        city_id=route.city_id,
        stops=[stop_to_schema(s) for s in route.stops],
        vehicle_ids=list(route.vehicle_ids),
    )


def get_route_or_404(service: CatalogService, city_id: str, route_id: str) -> Route:
    try:
        return service.get_route(city_id, route_id)
    except RouteNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.get("/cities", response_model=list[CitySchema])
def list_cities(
    service: CatalogService = Depends(get_catalog_service),
) -> list[CitySchema]:
    return [
        CitySchema(id=c.id, name=c.name, center=position_to_schema(c.center))
        for c in service.list_cities()
    ]


@router.get("/cities/{city_id}/routes", response_model=list[RouteSchema])
def list_routes(
    city_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> list[RouteSchema]:
    return [route_to_schema(r) for r in service.list_routes(city_id)]


@router.get("/cities/{city_id}/routes/{route_id}", response_model=RouteSchema)
def get_route(
    city_id: str,
    route_id: str,
    service: CatalogService = Depends(get_catalog_service),
) -> RouteSchema:
    return route_to_schema(get_route_or_404(service, city_id, route_id))


@router.get(
    "/cities/{city_id}/routes/{route_id}/journey", response_model=JourneySchema
)
async def get_journey(
    city_id: str,
    route_id: str,
    source: str | None = Query(default=None),
    destination: str | None = Query(default=None),
    service: CatalogService = Depends(get_catalog_service),
    engine: EtaEngine = Depends(get_eta_engine),
) -> JourneySchema:
    route = get_route_or_404(service, city_id, route_id)
    source_index = service.stop_index(route, source)
    destination_index = service.stop_index(route, destination)

    segments = await engine.journey(
        route, source_index=source_index, destination_index=destination_index
    )
    if segments is None:
        return JourneySchema(
            route_id=route.id,
            available=False,
            source_index=source_index,
            destination_index=destination_index,
        )

    return JourneySchema(
        route_id=route.id,
        available=True,
        highlighted=segments.highlighted,
        source_index=source_index,
        destination_index=destination_index,
        before=[position_to_schema(p) for p in segments.before],
        journey=[position_to_schema(p) for p in segments.journey],
        after=[position_to_schema(p) for p in segments.after],
    )
