from __future__ import annotations

from typing import Any, Mapping

from src.domain.models import City, Position, Route, Stop


def position_from_record(raw: Mapping[str, Any]) -> Position:
    # Catalog records use {lat, lng}; accept {lat, lon} too.
    lng = raw["lng"] if "lng" in raw else raw["lon"]
    return Position(lat=float(raw["lat"]), lng=float(lng))


def city_from_record(raw: Mapping[str, Any]) -> City:
    return City(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        center=position_from_record(raw["center"]),
    )


def route_from_record(raw: Mapping[str, Any], *, city_id: str | None = None) -> Route:
    stops = tuple(
        Stop(
            name=str(s["name"]),
            position=position_from_record(s["position"]),
            scheduled_time=str(s.get("scheduledTime") or s.get("scheduled_time") or ""),
        )
        for s in raw.get("stops") or ()
    )
    vehicle_ids = raw.get("buses") or raw.get("vehicle_ids") or ()
    return Route(
        id=str(raw["id"]),
        name=str(raw.get("name") or raw["id"]),
        stops=stops,
        vehicle_ids=tuple(str(v) for v in vehicle_ids),
        city_id=city_id or raw.get("cityId"),
    )
