"""Build canonical endpoint requests from typed call arguments.

Typed calls go through the same `ApiRequest` shape that a raw
`path?query` string parses into, so both entry points reach the
dispatch table identically.
"""

from __future__ import annotations

import re

from src.domain.models import ApiRequest, GeoPoint

PLAN_PATH = "/api/v1/plan"
GEOCODE_PATH = "/api/v1/geocode"
REVERSE_GEOCODE_PATH = "/api/v1/reverse-geocode"

_TILE_PATH_RE = re.compile(r"^/tiles/(\d+)/(\d+)/(\d+)\.mvt$")


def plan_request(
    origin: GeoPoint,
    destination: GeoPoint,
    *,
    departure_time: str | None = None,
    num_itineraries: int | None = None,
) -> ApiRequest:
    params = [("fromPlace", origin.as_place()), ("toPlace", destination.as_place())]
    if departure_time is not None:
        params.append(("time", departure_time))
    if num_itineraries is not None:
        params.append(("numItineraries", str(int(num_itineraries))))
    return ApiRequest(path=PLAN_PATH, params=tuple(params))


def geocode_request(query: str) -> ApiRequest:
    return ApiRequest(path=GEOCODE_PATH, params=(("text", query),))


def reverse_geocode_request(pos: GeoPoint) -> ApiRequest:
    return ApiRequest(path=REVERSE_GEOCODE_PATH, params=(("place", pos.as_place()),))


def tile_request(z: int, x: int, y: int) -> ApiRequest:
    return ApiRequest(path=f"/tiles/{int(z)}/{int(x)}/{int(y)}.mvt")


def parse_request(path_and_query: str) -> ApiRequest:
    return ApiRequest.parse(path_and_query)


def parse_tile_path(path: str) -> tuple[int, int, int] | None:
    """Return (z, x, y) for `/tiles/<z>/<x>/<y>.mvt`, else None."""

    m = _TILE_PATH_RE.match(path)
    if m is None:
        return None
    z, x, y = (int(g) for g in m.groups())
    return z, x, y


def parse_place(raw: str | None) -> GeoPoint | None:
    """Parse a `lat,lon` place parameter; other place forms return None."""

    if not raw:
        return None
    parts = raw.split(",")
    if len(parts) < 2:
        return None
    try:
        return GeoPoint(lat=float(parts[0]), lon=float(parts[1]))
    except ValueError:
        return None
