from .directions_provider import IDirectionsProvider
from .relay_connection import IRelayConnection
from .route_catalog import IRouteCatalog

__all__ = [
    "IDirectionsProvider",
    "IRelayConnection",
    "IRouteCatalog",
]
