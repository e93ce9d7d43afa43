from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime
from typing import Sequence

import pytest

from src.app.services.eta_engine import EtaEngine
from src.app.services.presence_registry import PresenceRegistry
from src.domain.exceptions import NoRouteFound, UpstreamError
from src.domain.models import DeviationStatus, EtaResult, Position, Route, Stop


def _p(lng: float) -> Position:
    return Position(lat=0.0, lng=lng)


ROUTE = Route(
    id="1",
    name="Line 1",
    stops=(
        Stop(name="A", position=_p(0.0), scheduled_time="10:05 AM"),
        Stop(name="B", position=_p(0.04), scheduled_time="10:10 AM"),
        Stop(name="C", position=_p(0.08), scheduled_time="10:20 AM"),
    ),
    vehicle_ids=("bus-1", "bus-2", "bus-3"),
    city_id="indore",
)

PATH = tuple(_p(i / 100) for i in range(9))


@dataclass(slots=True)
class FakeDirections:
    duration_s: float = 300.0
    unreachable: set[Position] = field(default_factory=set)
    path_error: Exception | None = None
    eta_calls: list[tuple[Position, Position]] = field(default_factory=list)

    async def eta(self, origin: Position, destination: Position) -> EtaResult:
        self.eta_calls.append((origin, destination))
        if destination in self.unreachable:
            raise UpstreamError("quota exceeded")
        return EtaResult(
            duration_s=self.duration_s,
            distance_m=1500.0,
            path=(origin, destination),
        )

    async def route_path(self, stops: Sequence[Position]) -> tuple[Position, ...]:
        if self.path_error is not None:
            raise self.path_error
        return PATH


def _engine(directions: FakeDirections) -> EtaEngine:
    return EtaEngine(directions=directions, now=lambda: datetime(2024, 5, 1, 10, 0))


SNAPSHOT = {
    "bus-1": _p(0.001),
    "bus-2": _p(0.07),
    "bus-9": _p(0.04),  # online but not assigned to the route
}


@pytest.mark.unit
def test_each_stop_uses_the_nearest_route_vehicle() -> None:
    rows = asyncio.run(_engine(FakeDirections()).stop_etas(ROUTE, SNAPSHOT))

    assert [r.stop_index for r in rows] == [0, 1, 2]
    assert [r.vehicle_id for r in rows] == ["bus-1", "bus-2", "bus-2"]
    assert all(r.available for r in rows)


@pytest.mark.unit
def test_deviation_is_computed_from_predicted_arrival() -> None:
    rows = asyncio.run(_engine(FakeDirections()).stop_etas(ROUTE, SNAPSHOT))

    # now 10:00 + 5 min ETA = 10:05
    assert rows[0].deviation is not None
    assert rows[0].deviation.status is DeviationStatus.ON_TIME
    assert rows[1].deviation is not None
    assert rows[1].deviation.status is DeviationStatus.EARLY
    assert rows[1].deviation.minutes == 5


@pytest.mark.unit
def test_late_vehicle() -> None:
    engine = _engine(FakeDirections(duration_s=15 * 60))
    rows = asyncio.run(engine.stop_etas(ROUTE, SNAPSHOT))

    assert rows[0].deviation is not None
    assert rows[0].deviation.status is DeviationStatus.LATE
    assert rows[0].deviation.delta_minutes == 10


@pytest.mark.unit
def test_provider_failure_marks_only_that_stop_unavailable() -> None:
    directions = FakeDirections(unreachable={_p(0.04)})
    rows = asyncio.run(_engine(directions).stop_etas(ROUTE, SNAPSHOT))

    assert [r.available for r in rows] == [True, False, True]
    assert rows[1].vehicle_id == "bus-2"
    assert rows[1].deviation is None


@pytest.mark.unit
def test_no_online_vehicles_means_no_provider_calls() -> None:
    directions = FakeDirections()
    rows = asyncio.run(_engine(directions).stop_etas(ROUTE, {"bus-9": _p(0.0)}))

    assert not any(r.available for r in rows)
    assert all(r.vehicle_id is None for r in rows)
    assert directions.eta_calls == []


@pytest.mark.unit
def test_unparseable_schedule_keeps_the_eta() -> None:
    route = Route(
        id="2",
        name="x",
        stops=(Stop(name="A", position=_p(0.0), scheduled_time="soon"),),
        vehicle_ids=("bus-1",),
    )
    rows = asyncio.run(_engine(FakeDirections()).stop_etas(route, SNAPSHOT))

    assert rows[0].available
    assert rows[0].deviation is None


@pytest.mark.unit
def test_nearest_vehicle_ties_follow_route_order() -> None:
    engine = _engine(FakeDirections())
    tied = {"bus-2": _p(0.03), "bus-1": _p(0.03)}

    chosen = engine.nearest_vehicle(ROUTE, ROUTE.stops[1], tied)

    assert chosen is not None
    assert chosen[0] == "bus-1"


@pytest.mark.unit
def test_watch_recomputes_from_the_live_registry() -> None:
    registry = PresenceRegistry()
    engine = _engine(FakeDirections())

    async def _run():
        stream = engine.watch(ROUTE, registry, interval_s=0)
        first = await stream.__anext__()
        registry.upsert("bus-1", _p(0.0))
        second = await stream.__anext__()
        await stream.aclose()
        return first, second

    first, second = asyncio.run(_run())

    assert not any(r.available for r in first)
    assert all(r.available for r in second)


@pytest.mark.unit
def test_journey_segments_route_path() -> None:
    segments = asyncio.run(
        _engine(FakeDirections()).journey(ROUTE, source_index=0, destination_index=1)
    )

    assert segments is not None
    assert segments.highlighted
    assert segments.journey == PATH[0:5]


@pytest.mark.unit
@pytest.mark.parametrize("error", [NoRouteFound("none"), UpstreamError("down")])
def test_journey_without_path_is_none(error: Exception) -> None:
    engine = _engine(FakeDirections(path_error=error))
    assert (
        asyncio.run(engine.journey(ROUTE, source_index=0, destination_index=1))
        is None
    )


@pytest.mark.unit
def test_journey_needs_two_stops() -> None:
    route = Route(id="x", name="x", stops=ROUTE.stops[:1])
    engine = _engine(FakeDirections())
    assert (
        asyncio.run(engine.journey(route, source_index=0, destination_index=0))
        is None
    )


@pytest.mark.unit
def test_navigation_leg_targets_next_stop() -> None:
    leg = asyncio.run(
        _engine(FakeDirections()).navigation_leg(
            ROUTE, "bus-1", {"bus-1": _p(0.0405)}
        )
    )

    assert leg is not None
    assert leg.stop_index == 2
    assert leg.stop.name == "C"
    assert leg.eta is not None
    assert leg.eta.path == (_p(0.0405), _p(0.08))


@pytest.mark.unit
def test_driver_view_advances_from_further_out() -> None:
    engine = _engine(FakeDirections())
    # ~165 m past stop B: inside the driver radius, outside the rider one.
    snapshot = {"bus-1": _p(0.0415)}

    driver = asyncio.run(engine.navigation_leg(ROUTE, "bus-1", snapshot))
    rider = asyncio.run(
        engine.navigation_leg(ROUTE, "bus-1", snapshot, driver=False)
    )

    assert driver is not None
    assert rider is not None
    assert driver.stop_index == 2
    assert rider.stop_index == 1


@pytest.mark.unit
def test_navigation_leg_for_offline_vehicle() -> None:
    leg = asyncio.run(_engine(FakeDirections()).navigation_leg(ROUTE, "bus-1", {}))
    assert leg is None


@pytest.mark.unit
def test_navigation_leg_survives_provider_failure() -> None:
    directions = FakeDirections(unreachable={_p(0.0)})
    leg = asyncio.run(
        _engine(directions).navigation_leg(ROUTE, "bus-1", {"bus-1": _p(0.003)})
    )

    assert leg is not None
    assert leg.stop_index == 0
    assert leg.eta is None


@pytest.mark.unit
def test_start_approach_only_when_away_from_first_stop() -> None:
    engine = _engine(FakeDirections())

    far = asyncio.run(engine.start_approach(ROUTE, _p(0.01), vehicle_id="bus-1"))
    near = asyncio.run(engine.start_approach(ROUTE, _p(0.001)))

    assert far is not None
    assert far.stop_index == 0
    assert far.vehicle_id == "bus-1"
    assert far.eta is not None
    assert near is None
