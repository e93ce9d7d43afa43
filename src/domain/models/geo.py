from __future__ import annotations

import math
from dataclasses import dataclass

from src.domain.exceptions.presence import InvalidPosition


@dataclass(frozen=True, slots=True)
class Position:
    """WGS-84 coordinate pair in degrees."""

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            raise InvalidPosition(f"Non-finite coordinates: {self.lat}, {self.lng}")
        if not (-90.0 <= self.lat <= 90.0):
            raise InvalidPosition(f"Invalid latitude: {self.lat}")
        if not (-180.0 <= self.lng <= 180.0):
            raise InvalidPosition(f"Invalid longitude: {self.lng}")
