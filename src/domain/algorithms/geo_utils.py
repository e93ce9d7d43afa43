from __future__ import annotations

import math
from typing import Sequence

from src.domain.models import Position, Route

EARTH_RADIUS_M = 6371000.0


def haversine_distance_m(a: Position, b: Position) -> float:
    """Great-circle distance in meters."""

    lat1 = math.radians(a.lat)
    lon1 = math.radians(a.lng)
    lat2 = math.radians(b.lat)
    lon2 = math.radians(b.lng)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(s)))


def nearest_index_on_path(path: Sequence[Position], point: Position) -> int:
    """Index of the path vertex closest to `point` in plain degree space.

    Only meant for dense, city-scale polylines where the planar approximation
    is good enough. Returns -1 for an empty path.
    """

    best_i = -1
    best_d2 = float("inf")
    for i, p in enumerate(path):
        d_lat = p.lat - point.lat
        d_lng = p.lng - point.lng
        d2 = d_lat * d_lat + d_lng * d_lng
        if d2 < best_d2:
            best_d2 = d2
            best_i = i
    return best_i


def nearest_stop_index(route: Route, point: Position) -> tuple[int, float]:
    """Closest stop of the route to `point` as (index, distance_m).

    Ties resolve to the lowest index; a route without stops yields (-1, inf).
    """

    best_i = -1
    best_d = float("inf")
    for i, stop in enumerate(route.stops):
        d = haversine_distance_m(stop.position, point)
        if d < best_d:
            best_d = d
            best_i = i
    return best_i, best_d
