from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from src.domain.models import EtaResult, Position


class IDirectionsProvider(ABC):
    """Port for a road directions provider (travel time, distance, geometry)."""

    @abstractmethod
    async def eta(self, origin: Position, destination: Position) -> EtaResult:
        """Travel estimate from origin to destination, including the decoded path.

        Raises UpstreamError or NoRouteFound.
        """

    @abstractmethod
    async def route_path(self, stops: Sequence[Position]) -> tuple[Position, ...]:
        """Road-snapped path through the stops, first/last being the endpoints.

        Raises InsufficientStops for fewer than two stops, otherwise
        UpstreamError or NoRouteFound like `eta`.
        """
