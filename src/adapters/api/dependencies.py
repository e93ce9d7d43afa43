from __future__ import annotations

import os
from functools import lru_cache

from src.adapters.config import AppConfig
from src.adapters.directions.cached_directions_adapter import CachedDirectionsAdapter
from src.adapters.directions.google_directions_adapter import GoogleDirectionsAdapter
from src.adapters.persistence import DynamoDbRouteCatalog, LocalRouteCatalog
from src.app.ports.output import IDirectionsProvider, IRouteCatalog
from src.app.services.catalog_service import CatalogService
from src.app.services.eta_engine import EtaEngine
from src.app.services.presence_registry import PresenceRegistry
from src.app.services.relay_service import RelayService


@lru_cache(maxsize=1)
def get_app_config() -> AppConfig:
    return AppConfig.from_env()


# The registry and the relay are process-wide: every request and socket must
# see the same instances.
@lru_cache(maxsize=1)
def get_presence_registry() -> PresenceRegistry:
    return PresenceRegistry()


@lru_cache(maxsize=1)
def get_relay_service() -> RelayService:
    return RelayService(registry=get_presence_registry())


@lru_cache(maxsize=1)
def get_route_catalog() -> IRouteCatalog:
    if os.getenv("ROUTE_CATALOG_TABLE"):
        return DynamoDbRouteCatalog()
    return LocalRouteCatalog()


@lru_cache(maxsize=1)
def get_directions_provider() -> IDirectionsProvider:
    config = get_app_config()
    return CachedDirectionsAdapter(
        upstream=GoogleDirectionsAdapter(), ttl_s=config.route_path_cache_ttl_s
    )


def get_catalog_service() -> CatalogService:
    return CatalogService(catalog=get_route_catalog())


def get_eta_engine() -> EtaEngine:
    config = get_app_config()
    return EtaEngine(
        directions=get_directions_provider(),
        arrival_radius_m=config.arrival_radius_m,
        driver_arrival_radius_m=config.driver_arrival_radius_m,
        start_radius_m=config.start_radius_m,
    )
