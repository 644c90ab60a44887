from __future__ import annotations

from dataclasses import dataclass, field

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Area:
    name: str
    admin_level: int
    matched: bool
    unique: bool = False
    is_default: bool = False


@dataclass(frozen=True, slots=True)
class Token:
    """Matched span of the query text."""

    start: int
    length: int


@dataclass(frozen=True, slots=True)
class Location:
    """Geocoder result (forward or reverse).

    `type` is one of "STOP", "PLACE", "ADDRESS". Forward geocoding may leave
    it unset for generic place hints; reverse geocoding always sets it.
    """

    name: str
    place_id: str
    pos: GeoPoint
    score: float
    type: str | None = None
    category: str | None = None
    areas: tuple[Area, ...] = field(default_factory=tuple)
    tokens: tuple[Token, ...] = field(default_factory=tuple)
    modes: tuple[str, ...] | None = None
    importance: float | None = None
    street: str | None = None
    house_number: str | None = None
    country: str | None = None
    zip: str | None = None
