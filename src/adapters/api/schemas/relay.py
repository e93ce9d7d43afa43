from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class PositionPayload(BaseModel):
    lat: float
    lng: float


class PositionUpdateMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["position_update"] = "position_update"
    vehicle_id: str = Field(alias="vehicleId")
    position: PositionPayload


class RefreshRequestMessage(BaseModel):
    type: Literal["refresh_request"] = "refresh_request"


class InitialSyncMessage(BaseModel):
    type: Literal["initial_sync"] = "initial_sync"
    vehicles: dict[str, PositionPayload]


class VehicleRemovedMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: Literal["vehicle_removed"] = "vehicle_removed"
    vehicle_id: str = Field(alias="vehicleId")


InboundMessage = Annotated[
    Union[PositionUpdateMessage, RefreshRequestMessage],
    Field(discriminator="type"),
]

inbound_message_adapter = TypeAdapter(InboundMessage)
