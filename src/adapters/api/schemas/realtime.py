from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

from src.adapters.api.schemas.catalog import PositionSchema, StopSchema


class VehicleSchema(BaseModel):
    vehicle_id: str
    position: PositionSchema


class VehiclesResponseSchema(BaseModel):
    fetched_at: datetime
    vehicles: list[VehicleSchema]


class EtaSchema(BaseModel):
    duration_s: float
    distance_m: float
    path: list[PositionSchema] | None = None


class DeviationSchema(BaseModel):
    status: Literal["early", "on_time", "late"]
    minutes: int
    delta_minutes: int


class StopEtaSchema(BaseModel):
    stop_index: int
    stop: StopSchema
    available: bool
    vehicle_id: str | None = None
    eta: EtaSchema | None = None
    deviation: DeviationSchema | None = None


class RouteEtasSchema(BaseModel):
    route_id: str
    computed_at: datetime
    stops: list[StopEtaSchema]


class JourneySchema(BaseModel):
    route_id: str
    available: bool
    highlighted: bool = False
    source_index: int
    destination_index: int
    before: list[PositionSchema] = []
    journey: list[PositionSchema] = []
    after: list[PositionSchema] = []


class NavigationLegSchema(BaseModel):
    vehicle_id: str | None = None
    route_id: str
    stop_index: int
    stop: StopSchema
    available: bool
    eta: EtaSchema | None = None
