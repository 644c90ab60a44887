class RoutingError(Exception):
    """Base exception for local itinerary search failures."""


class NoPathFound(RoutingError):
    """Raised when no feasible transit itinerary exists for the request."""
