from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import AsyncIterator, Callable, Mapping

from src.app.ports.output import IDirectionsProvider
from src.app.services.presence_registry import PresenceRegistry
from src.domain.algorithms.geo_utils import haversine_distance_m
from src.domain.algorithms.journey import (
    DEFAULT_ARRIVAL_RADIUS_M,
    infer_next_stop_index,
    segment_journey,
)
from src.domain.algorithms.schedule import classify_schedule_deviation
from src.domain.exceptions import RoutingError
from src.domain.models import (
    EtaResult,
    JourneySegments,
    NavigationLeg,
    Position,
    Route,
    ScheduleDeviation,
    Stop,
    StopEta,
)

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL_S = 30.0
DEFAULT_DRIVER_ARRIVAL_RADIUS_M = 200.0
DEFAULT_START_RADIUS_M = 200.0


@dataclass(slots=True)
class EtaEngine:
    """Per-stop arrival predictions for a route.

    Each stop is served by the online vehicle of the route that is closest to
    it in a straight line; the directions provider turns that pairing into a
    road ETA. Provider failures make the affected stop "unavailable" for the
    current cycle only.
    """

    directions: IDirectionsProvider
    arrival_radius_m: float = DEFAULT_ARRIVAL_RADIUS_M
    driver_arrival_radius_m: float = DEFAULT_DRIVER_ARRIVAL_RADIUS_M
    start_radius_m: float = DEFAULT_START_RADIUS_M
    now: Callable[[], datetime] = field(default=datetime.now)

    def route_vehicles(
        self, route: Route, snapshot: Mapping[str, Position]
    ) -> tuple[tuple[str, Position], ...]:
        return tuple(
            (vid, snapshot[vid]) for vid in route.vehicle_ids if vid in snapshot
        )

    def nearest_vehicle(
        self, route: Route, stop: Stop, snapshot: Mapping[str, Position]
    ) -> tuple[str, Position] | None:
        best: tuple[str, Position] | None = None
        best_d = float("inf")
        for vid, pos in self.route_vehicles(route, snapshot):
            d = haversine_distance_m(pos, stop.position)
            if d < best_d:
                best_d = d
                best = (vid, pos)
        return best

    async def _safe_eta(
        self, origin: Position, destination: Position
    ) -> EtaResult | None:
        try:
            return await self.directions.eta(origin, destination)
        except RoutingError as exc:
            logger.warning(
                "ETA unavailable: %s", exc, extra={"error": type(exc).__name__}
            )
            return None

    def _deviation(self, stop: Stop, eta: EtaResult) -> ScheduleDeviation | None:
        arrival = self.now() + timedelta(seconds=eta.duration_s)
        try:
            return classify_schedule_deviation(stop.scheduled_time, arrival)
        except ValueError:
            logger.warning(
                "Unparseable scheduled time", extra={"scheduled": stop.scheduled_time}
            )
            return None

    async def _stop_eta(
        self, route: Route, index: int, snapshot: Mapping[str, Position]
    ) -> StopEta:
        stop = route.stops[index]
        chosen = self.nearest_vehicle(route, stop, snapshot)
        if chosen is None:
            return StopEta(stop_index=index, stop=stop)

        vehicle_id, position = chosen
        eta = await self._safe_eta(position, stop.position)
        if eta is None:
            return StopEta(stop_index=index, stop=stop, vehicle_id=vehicle_id)

        return StopEta(
            stop_index=index,
            stop=stop,
            vehicle_id=vehicle_id,
            eta=eta,
            deviation=self._deviation(stop, eta),
        )

    async def stop_etas(
        self, route: Route, snapshot: Mapping[str, Position]
    ) -> tuple[StopEta, ...]:
        frozen = dict(snapshot)
        rows = await asyncio.gather(
            *(self._stop_eta(route, i, frozen) for i in range(len(route.stops)))
        )
        return tuple(rows)

    async def watch(
        self,
        route: Route,
        registry: PresenceRegistry,
        *,
        interval_s: float = DEFAULT_REFRESH_INTERVAL_S,
    ) -> AsyncIterator[tuple[StopEta, ...]]:
        """Yield a fresh ETA table now and then every `interval_s` seconds.

        Runs until the consumer stops iterating, closes the generator or
        cancels the task driving it.
        """

        while True:
            yield await self.stop_etas(route, registry.snapshot())
            await asyncio.sleep(interval_s)

    async def journey(
        self, route: Route, *, source_index: int, destination_index: int
    ) -> JourneySegments | None:
        """Route path split around the rider's journey; None if no path."""

        if len(route.stops) < 2:
            return None
        try:
            path = await self.directions.route_path(route.stop_positions)
        except RoutingError as exc:
            logger.warning(
                "Route path unavailable: %s", exc, extra={"route_id": route.id}
            )
            return None

        return segment_journey(
            path,
            route.stops,
            source_index=source_index,
            destination_index=destination_index,
        )

    async def navigation_leg(
        self,
        route: Route,
        vehicle_id: str,
        snapshot: Mapping[str, Position],
        *,
        driver: bool = True,
    ) -> NavigationLeg | None:
        """Next stop and ETA for one vehicle.

        The driver view advances to the following stop from further out
        (`driver_arrival_radius_m`) than the rider view (`arrival_radius_m`).
        """

        position = snapshot.get(vehicle_id)
        if position is None:
            return None

        radius_m = self.driver_arrival_radius_m if driver else self.arrival_radius_m
        index = infer_next_stop_index(route, position, arrival_radius_m=radius_m)
        if index == -1:
            return None

        stop = route.stops[index]
        eta = await self._safe_eta(position, stop.position)
        return NavigationLeg(
            vehicle_id=vehicle_id, stop_index=index, stop=stop, eta=eta
        )

    async def start_approach(
        self, route: Route, position: Position, *, vehicle_id: str | None = None
    ) -> NavigationLeg | None:
        """Leg towards the first stop when the vehicle is away from it."""

        if not route.stops:
            return None

        first = route.stops[0]
        if haversine_distance_m(position, first.position) <= self.start_radius_m:
            return None

        eta = await self._safe_eta(position, first.position)
        return NavigationLeg(
            vehicle_id=vehicle_id, stop_index=0, stop=first, eta=eta
        )
