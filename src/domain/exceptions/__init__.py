from .gateway import (
    EndpointNotFound,
    Failure,
    FailureKind,
    GatewayError,
    InitializationError,
    Outcome,
)
from .routing import NoPathFound, RoutingError

__all__ = [
    "EndpointNotFound",
    "Failure",
    "FailureKind",
    "GatewayError",
    "InitializationError",
    "NoPathFound",
    "Outcome",
    "RoutingError",
]
