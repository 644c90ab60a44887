from __future__ import annotations

from src.app.ports.output.engine_api import Mode

# Basic GTFS route types.
_BASIC_ROUTE_TYPES: dict[int, Mode] = {
    0: Mode.TRAM,
    1: Mode.SUBWAY,
    2: Mode.RAIL,
    3: Mode.BUS,
    4: Mode.FERRY,
    5: Mode.CABLE_CAR,
    6: Mode.AERIAL_LIFT,
    7: Mode.FUNICULAR,
    11: Mode.BUS,
    12: Mode.RAIL,
}

# Extended (HVT) route type ranges, keyed by hundreds.
_EXTENDED_ROUTE_TYPES: dict[int, Mode] = {
    1: Mode.RAIL,
    2: Mode.COACH,
    4: Mode.SUBWAY,
    7: Mode.BUS,
    8: Mode.BUS,
    9: Mode.TRAM,
    10: Mode.FERRY,
    11: Mode.AIRPLANE,
    12: Mode.FERRY,
    13: Mode.AERIAL_LIFT,
    14: Mode.FUNICULAR,
}

_EXTENDED_OVERRIDES: dict[int, Mode] = {
    101: Mode.HIGHSPEED_RAIL,
    102: Mode.LONG_DISTANCE,
    105: Mode.NIGHT_RAIL,
    106: Mode.REGIONAL_RAIL,
}


def mode_for_route_type(route_type: int | None) -> Mode:
    if route_type is None:
        return Mode.TRANSIT
    if route_type in _BASIC_ROUTE_TYPES:
        return _BASIC_ROUTE_TYPES[route_type]
    if route_type in _EXTENDED_OVERRIDES:
        return _EXTENDED_OVERRIDES[route_type]
    return _EXTENDED_ROUTE_TYPES.get(route_type // 100, Mode.OTHER)
