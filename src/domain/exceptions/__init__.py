from .catalog import CatalogError, RouteNotFound
from .presence import InvalidPosition
from .routing import InsufficientStops, NoRouteFound, RoutingError, UpstreamError

__all__ = [
    "CatalogError",
    "InsufficientStops",
    "InvalidPosition",
    "NoRouteFound",
    "RouteNotFound",
    "RoutingError",
    "UpstreamError",
]
