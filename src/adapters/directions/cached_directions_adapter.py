from __future__ import annotations

import os
import time
from dataclasses import dataclass, field
from typing import Sequence

from src.app.ports.output import IDirectionsProvider
from src.domain.exceptions import InsufficientStops
from src.domain.models import EtaResult, Position

_PathKey = tuple[tuple[float, float], ...]


@dataclass(slots=True)
class CachedDirectionsAdapter(IDirectionsProvider):
    """Caches route paths in process memory.

    This is an adapter-level decorator around another IDirectionsProvider.
    Only `route_path` is cached: route geometry is static, ETAs are not.

    Env vars:
      - ROUTE_PATH_CACHE_TTL_S (default 600)
    """

    upstream: IDirectionsProvider
    ttl_s: float | None = None
    max_entries: int = 256

    _paths: dict[_PathKey, tuple[float, tuple[Position, ...]]] = field(
        default_factory=dict, init=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.ttl_s is None:
            self.ttl_s = float(os.getenv("ROUTE_PATH_CACHE_TTL_S") or 600.0)

    def _key(self, stops: Sequence[Position]) -> _PathKey:
        # Round coordinates to ~1 m so float noise doesn't split entries.
        return tuple((round(s.lat, 5), round(s.lng, 5)) for s in stops)

    async def eta(self, origin: Position, destination: Position) -> EtaResult:
        return await self.upstream.eta(origin, destination)

    async def route_path(self, stops: Sequence[Position]) -> tuple[Position, ...]:
        if len(stops) < 2:
            raise InsufficientStops(
                "At least two stops are required to generate a route path"
            )

        key = self._key(stops)
        now = time.monotonic()
        cached = self._paths.get(key)
        if cached is not None and (now - cached[0]) < float(self.ttl_s or 0.0):
            return cached[1]

        path = await self.upstream.route_path(stops)

        self._paths.pop(key, None)
        while len(self._paths) >= self.max_entries:
            # dicts keep insertion order; drop the oldest entry.
            del self._paths[next(iter(self._paths))]
        self._paths[key] = (time.monotonic(), path)
        return path

    def clear(self) -> None:
        self._paths.clear()
