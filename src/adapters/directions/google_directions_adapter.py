from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

import httpx

from src.app.ports.output import IDirectionsProvider
from src.domain.algorithms.polyline import decode_polyline
from src.domain.exceptions import InsufficientStops, NoRouteFound, UpstreamError
from src.domain.models import EtaResult, Position

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://maps.googleapis.com/maps/api/directions/json"

# Statuses meaning "the request was fine but there is no way to get there".
_NO_ROUTE_STATUSES = {"ZERO_RESULTS", "NOT_FOUND"}


def _latlng(p: Position) -> str:
    return f"{p.lat},{p.lng}"


@dataclass(slots=True)
class GoogleDirectionsAdapter(IDirectionsProvider):
    """Google Maps Directions API over HTTP.

    Env vars:
      - GOOGLE_MAPS_API_KEY: required; calls fail with UpstreamError without it
      - DIRECTIONS_BASE_URL: override the endpoint (default: Google's)
      - DIRECTIONS_TIMEOUT_S: request timeout (default 10)
    """

    api_key: str | None = None
    base_url: str | None = None
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.api_key is None:
            self.api_key = os.getenv("GOOGLE_MAPS_API_KEY")
        if self.base_url is None:
            self.base_url = os.getenv("DIRECTIONS_BASE_URL") or DEFAULT_BASE_URL
        if os.getenv("DIRECTIONS_TIMEOUT_S"):
            self.timeout_s = float(os.environ["DIRECTIONS_TIMEOUT_S"])

    async def eta(self, origin: Position, destination: Position) -> EtaResult:
        route = await self._first_route(
            {"origin": _latlng(origin), "destination": _latlng(destination)}
        )

        try:
            legs = route["legs"]
            duration_s = float(sum(leg["duration"]["value"] for leg in legs))
            distance_m = float(sum(leg["distance"]["value"] for leg in legs))
        except (KeyError, TypeError, ValueError) as exc:
            raise UpstreamError(f"Malformed directions response: {exc!r}") from exc
        if not legs:
            raise NoRouteFound("Directions response has no legs")

        return EtaResult(
            duration_s=duration_s,
            distance_m=distance_m,
            path=self._decode_overview(route),
        )

    async def route_path(self, stops: Sequence[Position]) -> tuple[Position, ...]:
        if len(stops) < 2:
            raise InsufficientStops(
                "At least two stops are required to generate a route path"
            )

        params = {
            "origin": _latlng(stops[0]),
            "destination": _latlng(stops[-1]),
        }
        waypoints = "|".join(_latlng(s) for s in stops[1:-1])
        if waypoints:
            params["waypoints"] = waypoints

        route = await self._first_route(params)
        return self._decode_overview(route)

    async def _first_route(self, params: Mapping[str, str]) -> Mapping[str, Any]:
        if not self.api_key:
            raise UpstreamError("Google Maps API key is not configured")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_s, transport=self.transport
            ) as client:
                resp = await client.get(
                    str(self.base_url), params={**params, "key": self.api_key}
                )
                resp.raise_for_status()
                data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(
                f"Failed to fetch directions: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Failed to fetch directions: {exc!r}") from exc
        except ValueError as exc:
            raise UpstreamError("Directions response is not JSON") from exc

        if not isinstance(data, dict):
            raise UpstreamError("Directions response is not an object")

        status = str(data.get("status") or "")
        detail = data.get("error_message") or "No routes found."
        if status in _NO_ROUTE_STATUSES:
            raise NoRouteFound(f"Directions API: {status} - {detail}")
        if status != "OK":
            logger.warning("Directions API rejected request", extra={"status": status})
            raise UpstreamError(f"Directions API error: {status} - {detail}")

        routes = data.get("routes") or []
        if not routes:
            raise NoRouteFound("Directions API returned no routes")
        return routes[0]

    def _decode_overview(self, route: Mapping[str, Any]) -> tuple[Position, ...]:
        encoded = (route.get("overview_polyline") or {}).get("points") or ""
        try:
            return decode_polyline(encoded)
        except ValueError as exc:
            raise UpstreamError(f"Undecodable route polyline: {exc}") from exc
