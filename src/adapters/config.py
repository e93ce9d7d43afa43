from __future__ import annotations

import os
from dataclasses import dataclass


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def env_float(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    return float(raw)


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Service tuning read from the environment.

    Env vars:
      - ETA_REFRESH_INTERVAL_S (default 30)
      - ROUTE_PATH_CACHE_TTL_S (default 600)
      - ARRIVAL_RADIUS_M: distance at which a vehicle counts as at a stop on
        the rider view (100)
      - DRIVER_ARRIVAL_RADIUS_M: same threshold for driver navigation (200)
      - START_RADIUS_M: distance from the first stop that triggers an
        approach leg (200)
      - LIVETRACK_REVEAL_ERRORS: expose exception text in 500 responses
    """

    eta_refresh_interval_s: float = 30.0
    route_path_cache_ttl_s: float = 600.0
    arrival_radius_m: float = 100.0
    driver_arrival_radius_m: float = 200.0
    start_radius_m: float = 200.0
    reveal_errors: bool = False

    @staticmethod
    def from_env() -> "AppConfig":
        return AppConfig(
            eta_refresh_interval_s=env_float("ETA_REFRESH_INTERVAL_S", 30.0),
            route_path_cache_ttl_s=env_float("ROUTE_PATH_CACHE_TTL_S", 600.0),
            arrival_radius_m=env_float("ARRIVAL_RADIUS_M", 100.0),
            driver_arrival_radius_m=env_float("DRIVER_ARRIVAL_RADIUS_M", 200.0),
            start_radius_m=env_float("START_RADIUS_M", 200.0),
            reveal_errors=env_bool("LIVETRACK_REVEAL_ERRORS", False),
        )
