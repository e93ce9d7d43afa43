from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.adapters.persistence.catalog_records import (
    city_from_record,
    route_from_record,
)
from src.app.ports.output import IRouteCatalog
from src.domain.models import City, Route

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LocalRouteCatalog(IRouteCatalog):
    """Loads cities and routes from a JSON file.

    Layout: {"cities": [{"id", "name", "center": {lat, lng}, "routes": [...]}]}
    where each route is {"id", "name", "buses": [...], "stops": [{"name",
    "position": {lat, lng}, "scheduledTime"}]}.

    Env vars:
      - ROUTE_CATALOG_PATH: path to the JSON file (default: data/routes.json)
    """

    path: str | Path | None = None

    _cities: tuple[City, ...] | None = field(default=None, init=False, repr=False)
    _routes_by_city: dict[str, tuple[Route, ...]] = field(
        default_factory=dict, init=False, repr=False
    )

    def _path(self) -> Path:
        value = self.path or os.getenv("ROUTE_CATALOG_PATH") or "data/routes.json"
        return Path(value)

    def _load(self) -> None:
        if self._cities is not None:
            return

        path = self._path()
        with path.open("r", encoding="utf-8") as fp:
            data: dict[str, Any] = json.load(fp)

        cities: list[City] = []
        for raw_city in data.get("cities") or []:
            city = city_from_record(raw_city)
            cities.append(city)
            self._routes_by_city[city.id] = tuple(
                route_from_record(r, city_id=city.id)
                for r in raw_city.get("routes") or []
            )

        logger.info(
            "Loaded route catalog",
            extra={"path": str(path), "cities": len(cities)},
        )
        self._cities = tuple(cities)

    def list_cities(self) -> tuple[City, ...]:
        self._load()
        return self._cities or ()

    def list_routes(self, city_id: str) -> tuple[Route, ...]:
        self._load()
        return self._routes_by_city.get(city_id, ())
