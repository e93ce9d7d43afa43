class RoutingError(Exception):
    """Base exception for directions/route path failures."""


class UpstreamError(RoutingError):
    """Raised when the directions provider is unreachable or misconfigured."""


class NoRouteFound(RoutingError):
    """Raised when the provider answered but reported no feasible route."""


class InsufficientStops(RoutingError, ValueError):
    """Raised when a route path is requested for fewer than two stops."""
