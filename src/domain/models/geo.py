from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """WGS84 coordinate.

    Values are passed through unchecked; endpoint handlers decide what is
    out of range.
    """

    lat: float
    lon: float

    def as_place(self) -> str:
        # repr() keeps the shortest round-trip form (no precision loss).
        return f"{float(self.lat)!r},{float(self.lon)!r}"
