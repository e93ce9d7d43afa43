class CatalogError(Exception):
    """Base exception for route catalog lookups."""


class RouteNotFound(CatalogError):
    """Raised when a city/route pair is not in the catalog."""
