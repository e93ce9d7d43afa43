from __future__ import annotations

from typing import Sequence

from src.domain.algorithms.geo_utils import nearest_index_on_path, nearest_stop_index
from src.domain.models import JourneySegments, Position, Route, Stop

DEFAULT_ARRIVAL_RADIUS_M = 100.0


def segment_journey(
    path: Sequence[Position],
    stops: Sequence[Stop],
    *,
    source_index: int,
    destination_index: int,
) -> JourneySegments:
    """Split a road-snapped route path around a rider's journey.

    Returns before-source, source-to-destination and after-destination pieces.
    Neighbouring pieces share their boundary vertex. Whenever the journey can't
    be located the whole path is returned as `before`.
    """

    full = tuple(path)
    fallback = JourneySegments(before=full)

    if not (0 <= source_index < destination_index < len(stops)):
        return fallback

    s = nearest_index_on_path(full, stops[source_index].position)
    d = nearest_index_on_path(full, stops[destination_index].position)
    if s == -1 or d == -1 or s > d:
        return fallback

    return JourneySegments(
        before=full[: s + 1],
        journey=full[s : d + 1],
        after=full[d:],
    )


def infer_next_stop_index(
    route: Route,
    point: Position,
    *,
    arrival_radius_m: float = DEFAULT_ARRIVAL_RADIUS_M,
) -> int:
    """Guess which stop a vehicle is heading to.

    Picks the physically closest stop, or the one after it once the vehicle is
    within `arrival_radius_m` of the closest one. Direction of travel and
    visited stops are not tracked, so on routes that pass near earlier stops
    again the guess can point backwards.
    """

    closest, distance_m = nearest_stop_index(route, point)
    if closest == -1:
        return -1
    if distance_m < arrival_radius_m and closest < len(route.stops) - 1:
        return closest + 1
    return closest
