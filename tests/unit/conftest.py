from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Iterator, Sequence

import pytest

from src.adapters.api.dependencies import (
    get_app_config,
    get_catalog_service,
    get_eta_engine,
    get_presence_registry,
    get_relay_service,
)
from src.adapters.config import AppConfig
from src.adapters.persistence import LocalRouteCatalog
from src.app.services.catalog_service import CatalogService
from src.app.services.eta_engine import EtaEngine
from src.app.services.presence_registry import PresenceRegistry
from src.app.services.relay_service import RelayService
from src.domain.models import EtaResult, Position
from src.main import app

CATALOG = {
    "cities": [
        {
            "id": "indore",
            "name": "Indore",
            "center": {"lat": 22.7196, "lng": 75.8577},
            "routes": [
                {
                    "id": "1",
                    "name": "Line 1",
                    "buses": ["bus-1", "bus-2"],
                    "stops": [
                        {
                            "name": "A",
                            "position": {"lat": 0.0, "lng": 0.0},
                            "scheduledTime": "10:05 AM",
                        },
                        {
                            "name": "B",
                            "position": {"lat": 0.0, "lng": 0.04},
                            "scheduledTime": "10:10 AM",
                        },
                        {
                            "name": "C",
                            "position": {"lat": 0.0, "lng": 0.08},
                            "scheduledTime": "10:20 AM",
                        },
                    ],
                }
            ],
        }
    ]
}

PATH = tuple(Position(lat=0.0, lng=i / 100) for i in range(9))


@pytest.fixture()
def anyio_backend() -> str:
    # The services are built on asyncio (asyncio.gather / create_task).
    return "asyncio"


@dataclass(slots=True)
class StaticDirections:
    async def eta(self, origin: Position, destination: Position) -> EtaResult:
        return EtaResult(
            duration_s=300.0, distance_m=2000.0, path=(origin, destination)
        )

    async def route_path(self, stops: Sequence[Position]) -> tuple[Position, ...]:
        return PATH


@pytest.fixture()
def registry(tmp_path: Path) -> Iterator[PresenceRegistry]:
    """Wire the app to a temp catalog, fresh presence state and fake directions."""

    path = tmp_path / "routes.json"
    path.write_text(json.dumps(CATALOG), encoding="utf-8")

    registry = PresenceRegistry()
    relay = RelayService(registry=registry)
    catalog = CatalogService(catalog=LocalRouteCatalog(path=path))
    engine = EtaEngine(
        directions=StaticDirections(), now=lambda: datetime(2024, 5, 1, 10, 0)
    )

    app.dependency_overrides[get_catalog_service] = lambda: catalog
    app.dependency_overrides[get_presence_registry] = lambda: registry
    app.dependency_overrides[get_relay_service] = lambda: relay
    app.dependency_overrides[get_eta_engine] = lambda: engine
    app.dependency_overrides[get_app_config] = lambda: AppConfig(
        eta_refresh_interval_s=3600.0
    )

    yield registry

    app.dependency_overrides.clear()
