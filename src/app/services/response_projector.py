"""Project engine responses onto the gateway's external records.

Optional engine fields stay optional; the only defaults applied are
`Area.unique` and `Area.is_default`, which fall back to False.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from src.app.ports.output.engine_api import (
    EngineLeg,
    Itinerary,
    LocationType,
    Match,
    MatchArea,
    Mode,
    PlanResponse,
)
from src.domain.models import Area, GeoPoint, Location, Route, RouteLeg, Token

logger = logging.getLogger(__name__)

UNKNOWN_MODE = "UNKNOWN"

MODE_LABELS: dict[Mode, str] = {
    Mode.WALK: "WALK",
    Mode.BIKE: "BIKE",
    Mode.RENTAL: "RENTAL",
    Mode.CAR: "CAR",
    Mode.CAR_PARKING: "CAR_PARKING",
    Mode.CAR_DROPOFF: "CAR_DROPOFF",
    Mode.ODM: "ODM",
    Mode.RIDE_SHARING: "RIDE_SHARING",
    Mode.FLEX: "FLEX",
    Mode.TRANSIT: "TRANSIT",
    Mode.TRAM: "TRAM",
    Mode.SUBWAY: "SUBWAY",
    Mode.FERRY: "FERRY",
    Mode.AIRPLANE: "AIRPLANE",
    Mode.BUS: "BUS",
    Mode.COACH: "COACH",
    Mode.RAIL: "RAIL",
    Mode.HIGHSPEED_RAIL: "HIGHSPEED_RAIL",
    Mode.LONG_DISTANCE: "LONG_DISTANCE",
    Mode.NIGHT_RAIL: "NIGHT_RAIL",
    Mode.REGIONAL_FAST_RAIL: "REGIONAL_FAST_RAIL",
    Mode.REGIONAL_RAIL: "REGIONAL_RAIL",
    Mode.CABLE_CAR: "CABLE_CAR",
    Mode.FUNICULAR: "FUNICULAR",
    Mode.AERIAL_LIFT: "AERIAL_LIFT",
    Mode.OTHER: "OTHER",
}

LOCATION_TYPE_LABELS: dict[LocationType, str] = {
    LocationType.STOP: "STOP",
    LocationType.PLACE: "PLACE",
    LocationType.ADDRESS: "ADDRESS",
}


def mode_label(mode: Mode | str | None) -> str:
    if mode is None:
        return UNKNOWN_MODE
    if not isinstance(mode, Mode):
        try:
            mode = Mode(str(mode))
        except ValueError:
            return UNKNOWN_MODE
    return MODE_LABELS.get(mode, UNKNOWN_MODE)


def location_type_label(value: LocationType | str | None) -> str | None:
    if value is None:
        return None
    if not isinstance(value, LocationType):
        try:
            value = LocationType(str(value))
        except ValueError:
            return None
    return LOCATION_TYPE_LABELS.get(value)


def project_leg(leg: EngineLeg) -> RouteLeg:
    return RouteLeg(
        mode=mode_label(leg.mode),
        from_name=leg.from_.name,
        to_name=leg.to.name,
        origin=GeoPoint(lat=leg.from_.lat, lon=leg.from_.lon),
        destination=GeoPoint(lat=leg.to.lat, lon=leg.to.lon),
        duration_seconds=int(leg.duration),
        distance_meters=int(leg.distance) if leg.distance is not None else 0,
        route_short_name=leg.route_short_name,
        headsign=leg.headsign,
    )


def project_itinerary(itinerary: Itinerary) -> Route:
    return Route(
        duration_seconds=int(itinerary.duration),
        transfers=int(itinerary.transfers),
        legs=tuple(project_leg(leg) for leg in itinerary.legs),
    )


def project_plan(response: PlanResponse) -> list[Route]:
    # The handler already limited itineraries to what the caller asked for.
    return [project_itinerary(i) for i in response.itineraries]


def project_area(area: MatchArea) -> Area:
    return Area(
        name=area.name,
        admin_level=int(area.admin_level),
        matched=bool(area.matched),
        unique=area.unique if area.unique is not None else False,
        is_default=area.default if area.default is not None else False,
    )


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def project_tokens(tokens: Iterable[Sequence[Any]]) -> tuple[Token, ...]:
    out: list[Token] = []
    for raw in tokens:
        if len(raw) < 2 or not (_is_int(raw[0]) and _is_int(raw[1])):
            logger.debug("Dropping malformed token %r", raw)
            continue
        start, length = raw[0], raw[1]
        if start < 0 or length < 0:
            logger.debug("Dropping out-of-range token %r", raw)
            continue
        out.append(Token(start=start, length=length))
    return tuple(out)


def project_match(match: Match) -> Location:
    return Location(
        name=match.name,
        place_id=match.id,
        pos=GeoPoint(lat=match.lat, lon=match.lon),
        score=float(match.score),
        type=location_type_label(match.type),
        category=match.category,
        areas=tuple(project_area(a) for a in match.areas),
        tokens=project_tokens(match.tokens),
        modes=(
            tuple(mode_label(m) for m in match.modes)
            if match.modes is not None
            else None
        ),
        importance=match.importance,
        street=match.street,
        house_number=match.house_number,
        country=match.country,
        zip=match.zip,
    )


def project_matches(matches: Iterable[Match]) -> list[Location]:
    return [project_match(m) for m in matches]


def project_reverse_match(matches: Sequence[Match]) -> Location | None:
    """Best reverse-geocode match; results without a location type are skipped."""

    for match in matches:
        if location_type_label(match.type) is not None:
            return project_match(match)
    return None
