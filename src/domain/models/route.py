from __future__ import annotations

from dataclasses import dataclass, field

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class RouteLeg:
    mode: str
    from_name: str
    to_name: str
    origin: GeoPoint
    destination: GeoPoint
    duration_seconds: int
    distance_meters: int = 0  # 0 when the engine did not report a distance
    route_short_name: str | None = None
    headsign: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """One itinerary, legs in travel order."""

    duration_seconds: int
    transfers: int
    legs: tuple[RouteLeg, ...] = field(default_factory=tuple)
