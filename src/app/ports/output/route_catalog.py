from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import City, Route


class IRouteCatalog(ABC):
    """Read-only port for static cities, routes and stops."""

    @abstractmethod
    def list_cities(self) -> tuple[City, ...]:
        raise NotImplementedError

    @abstractmethod
    def list_routes(self, city_id: str) -> tuple[Route, ...]:
        raise NotImplementedError
