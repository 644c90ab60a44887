from __future__ import annotations

import math
from collections.abc import Iterable

from src.domain.models import GeoPoint

EARTH_RADIUS_M = 6371000.0


def haversine_distance_m(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in meters."""

    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlon = math.radians(b.lon - a.lon)

    s = (
        math.sin(dlat / 2.0) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2.0) ** 2
    )
    return 2.0 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(s)))


def bounding_box(points: Iterable[GeoPoint]) -> tuple[GeoPoint, GeoPoint] | None:
    """(south-west, north-east) corners, or None for no points."""

    lats: list[float] = []
    lons: list[float] = []
    for p in points:
        lats.append(p.lat)
        lons.append(p.lon)
    if not lats:
        return None
    return (
        GeoPoint(lat=min(lats), lon=min(lons)),
        GeoPoint(lat=max(lats), lon=max(lons)),
    )


def polyline_distance_m(points: tuple[GeoPoint, ...]) -> float:
    return float(sum(haversine_distance_m(a, b) for a, b in zip(points, points[1:])))


def slice_polyline(
    points: tuple[GeoPoint, ...], *, start: GeoPoint, end: GeoPoint
) -> tuple[GeoPoint, ...]:
    """Part of `points` between the vertices nearest to `start` and `end`.

    The result begins at `start` and ends at `end`.
    """

    if len(points) < 2:
        return (start, end)

    def nearest_index(target: GeoPoint) -> int:
        return min(
            range(len(points)), key=lambda i: haversine_distance_m(points[i], target)
        )

    i0 = nearest_index(start)
    i1 = nearest_index(end)
    if i0 == i1:
        return (start, end)

    seg = list(points[i0 : i1 + 1]) if i0 < i1 else list(reversed(points[i1 : i0 + 1]))
    seg[0] = start
    seg[-1] = end
    return tuple(seg)
