from __future__ import annotations

import math
from collections.abc import Iterable
from dataclasses import dataclass, field

from src.domain.algorithms.geo_utils import haversine_distance_m
from src.domain.models import GeoPoint, Stop

_M_PER_DEG_LAT = 111_320.0


@dataclass(slots=True)
class StopIndex:
    """Grid-bucketed spatial index over stops."""

    stops: tuple[Stop, ...]
    cell_deg: float = 0.01
    _cells: dict[tuple[int, int], list[Stop]] = field(
        default_factory=dict, init=False, repr=False
    )

    @classmethod
    def from_stops(cls, stops: Iterable[Stop]) -> "StopIndex":
        return cls(stops=tuple(stops))

    def __post_init__(self) -> None:
        for stop in self.stops:
            self._cells.setdefault(self._cell(stop.location), []).append(stop)

    def _cell(self, p: GeoPoint) -> tuple[int, int]:
        return (math.floor(p.lat / self.cell_deg), math.floor(p.lon / self.cell_deg))

    def within(self, point: GeoPoint, radius_m: float) -> list[tuple[float, Stop]]:
        """Stops within `radius_m`, nearest first, as (distance_m, stop)."""

        dlat = radius_m / _M_PER_DEG_LAT
        dlon = radius_m / (_M_PER_DEG_LAT * max(math.cos(math.radians(point.lat)), 0.01))
        lat0, lon0 = self._cell(GeoPoint(lat=point.lat - dlat, lon=point.lon - dlon))
        lat1, lon1 = self._cell(GeoPoint(lat=point.lat + dlat, lon=point.lon + dlon))

        if (lat1 - lat0 + 1) * (lon1 - lon0 + 1) > len(self._cells):
            candidates: Iterable[Stop] = self.stops
        else:
            candidates = (
                stop
                for i in range(lat0, lat1 + 1)
                for j in range(lon0, lon1 + 1)
                for stop in self._cells.get((i, j), ())
            )

        found: list[tuple[float, Stop]] = []
        for stop in candidates:
            d = haversine_distance_m(point, stop.location)
            if d <= radius_m:
                found.append((d, stop))
        found.sort(key=lambda x: (x[0], x[1].id))
        return found

    def nearest(
        self, point: GeoPoint, *, radius_m: float, limit: int
    ) -> list[tuple[float, Stop]]:
        return self.within(point, radius_m)[: max(0, limit)]

    def __len__(self) -> int:
        return len(self.stops)
