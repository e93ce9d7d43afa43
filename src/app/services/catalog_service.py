from __future__ import annotations

from dataclasses import dataclass

from src.app.ports.output import IRouteCatalog
from src.domain.exceptions import RouteNotFound
from src.domain.models import City, Route


@dataclass(slots=True)
class CatalogService:
    """Lookups over the static route catalog."""

    catalog: IRouteCatalog

    def list_cities(self) -> tuple[City, ...]:
        cities = list(self.catalog.list_cities())
        cities.sort(key=lambda c: (c.name, c.id))
        return tuple(cities)

    def list_routes(self, city_id: str) -> tuple[Route, ...]:
        return self.catalog.list_routes(city_id)

    def get_route(self, city_id: str, route_id: str) -> Route:
        for route in self.catalog.list_routes(city_id):
            if route.id == route_id:
                return route
        raise RouteNotFound(f"Route {route_id!r} not found in city {city_id!r}")

    def find_route_for_vehicle(self, city_id: str, vehicle_id: str) -> Route | None:
        """First route of the city that lists the vehicle as assigned."""

        for route in self.catalog.list_routes(city_id):
            if vehicle_id in route.vehicle_ids:
                return route
        return None

    @staticmethod
    def stop_index(route: Route, stop_name: str | None) -> int:
        if not stop_name:
            return -1
        for i, stop in enumerate(route.stops):
            if stop.name == stop_name:
                return i
        return -1
