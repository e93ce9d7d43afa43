from __future__ import annotations

from pydantic import BaseModel, Field


class PositionSchema(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class CitySchema(BaseModel):
    id: str
    name: str
    center: PositionSchema


class StopSchema(BaseModel):
    name: str
    position: PositionSchema
    scheduled_time: str


class RouteSchema(BaseModel):
    id: str
    name: str
    city_id: str | None = None
    stops: list[StopSchema]
    vehicle_ids: list[str]
