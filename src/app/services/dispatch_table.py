from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from src.domain.exceptions import EndpointNotFound
from src.domain.models import Subsystem as S

# Endpoint names used as handler keys on an Instance.
PLAN = "plan"
GEOCODE = "geocode"
REVERSE_GEOCODE = "reverse_geocode"
INITIAL = "initial"
LEVELS = "levels"
STOP_TIMES = "stop_times"
TRIP = "trip"
MAP_TRIPS = "map_trips"
MAP_STOPS = "map_stops"
RENTALS = "rentals"
ONE_TO_ALL = "one_to_all"
ONE_TO_MANY = "one_to_many"


@dataclass(frozen=True, slots=True)
class EndpointRoute:
    name: str
    aliases: tuple[str, ...]
    requires: frozenset[S] = frozenset()


ENDPOINTS: tuple[EndpointRoute, ...] = (
    EndpointRoute(
        PLAN,
        ("/api/v1/plan", "/api/v5/plan"),
        frozenset({S.STREETS, S.TIMETABLE, S.STOP_MATCHES}),
    ),
    EndpointRoute(
        GEOCODE,
        ("/api/v1/geocode", "/api/v5/geocode"),
        frozenset({S.GEOCODE_TEXT, S.GEOCODE_FORMATTER, S.GEOCODE_CACHE}),
    ),
    EndpointRoute(
        REVERSE_GEOCODE,
        ("/api/v1/reverse-geocode", "/api/v5/reverse-geocode"),
        frozenset(
            {S.STREETS, S.REVERSE_INDEX, S.GEOCODE_TEXT, S.GEOCODE_FORMATTER}
        ),
    ),
    EndpointRoute(INITIAL, ("/api/v1/map/initial",), frozenset({S.TIMETABLE})),
    EndpointRoute(
        LEVELS, ("/api/v1/map/levels",), frozenset({S.STREETS, S.STREET_LOOKUP})
    ),
    EndpointRoute(
        STOP_TIMES,
        ("/api/v1/stoptimes", "/api/v4/stoptimes", "/api/v5/stoptimes"),
        frozenset(
            {
                S.STREETS,
                S.PLATFORMS,
                S.STOP_MATCHES,
                S.TIMEZONES,
                S.STOP_RTREE,
                S.TIMETABLE,
                S.TAGS,
            }
        ),
    ),
    EndpointRoute(
        TRIP,
        ("/api/v1/trip", "/api/v5/trip"),
        frozenset(
            {
                S.STREETS,
                S.STREET_LOOKUP,
                S.PLATFORMS,
                S.STOP_MATCHES,
                S.TIMETABLE,
                S.TAGS,
                S.STOP_RTREE,
            }
        ),
    ),
    EndpointRoute(
        MAP_TRIPS,
        ("/api/v1/map/trips", "/api/v4/map/trips", "/api/v5/map/trips"),
        frozenset(
            {S.STREETS, S.PLATFORMS, S.STOP_MATCHES, S.TAGS, S.TIMETABLE, S.RAILVIZ}
        ),
    ),
    EndpointRoute(
        MAP_STOPS,
        ("/api/v1/map/stops",),
        frozenset(
            {
                S.STREETS,
                S.PLATFORMS,
                S.STOP_MATCHES,
                S.STOP_RTREE,
                S.TAGS,
                S.TIMETABLE,
            }
        ),
    ),
    # Rental data is optional for this endpoint; it answers with whatever is loaded.
    EndpointRoute(RENTALS, ("/api/v1/rentals", "/api/v1/map/rentals")),
    EndpointRoute(
        ONE_TO_ALL,
        ("/api/v1/one-to-all", "/api/experimental/one-to-all"),
        frozenset(
            {S.STREETS, S.STREET_LOOKUP, S.PLATFORMS, S.TIMETABLE, S.TAGS}
        ),
    ),
    EndpointRoute(
        ONE_TO_MANY,
        ("/api/v1/one-to-many",),
        frozenset({S.STREETS, S.STREET_LOOKUP}),
    ),
)


class DispatchTable:
    """Exact-match path → endpoint mapping, built once.

    Query parameters never take part in resolution.
    """

    def __init__(self, routes: Iterable[EndpointRoute] = ENDPOINTS) -> None:
        self._routes: tuple[EndpointRoute, ...] = tuple(routes)
        self._by_alias: dict[str, EndpointRoute] = {}
        names: set[str] = set()
        for route in self._routes:
            if route.name in names:
                raise ValueError(f"Duplicate endpoint name: {route.name}")
            names.add(route.name)
            for alias in route.aliases:
                if alias in self._by_alias:
                    raise ValueError(
                        f"Path {alias} is already bound to {self._by_alias[alias].name}"
                    )
                self._by_alias[alias] = route

    def resolve(self, path: str) -> EndpointRoute:
        try:
            return self._by_alias[path]
        except KeyError:
            raise EndpointNotFound(path) from None

    def get(self, name: str) -> EndpointRoute:
        for route in self._routes:
            if route.name == name:
                return route
        raise KeyError(name)

    def paths(self) -> list[str]:
        return list(self._by_alias)

    def __iter__(self) -> Iterator[EndpointRoute]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)
