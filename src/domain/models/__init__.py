from .geo import GeoPoint
from .gtfs import Stop
from .instance import Instance, Subsystem
from .location import Area, Location, Token
from .payload import BinaryResult, GlyphResult, TileResult
from .request import ApiRequest
from .route import Route, RouteLeg

__all__ = [
    "ApiRequest",
    "Area",
    "BinaryResult",
    "GeoPoint",
    "GlyphResult",
    "Instance",
    "Location",
    "Route",
    "RouteLeg",
    "Stop",
    "Subsystem",
    "TileResult",
    "Token",
]
