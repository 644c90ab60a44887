from __future__ import annotations

from dataclasses import dataclass

from .geo import GeoPoint


@dataclass(frozen=True, slots=True)
class Stop:
    id: str
    name: str
    location: GeoPoint


@dataclass(frozen=True, slots=True)
class Connection:
    """Elementary timetable hop between two consecutive stops of a trip.

    Times are seconds after service-day midnight and may exceed 24h.
    """

    dep_stop_id: str
    arr_stop_id: str
    dep_time_s: int
    arr_time_s: int
    trip_id: str


@dataclass(frozen=True, slots=True)
class GtfsRoute:
    route_id: str
    short_name: str | None = None
    long_name: str | None = None
    route_type: int | None = None


@dataclass(frozen=True, slots=True)
class GtfsTrip:
    trip_id: str
    route_id: str | None = None
    headsign: str | None = None
    shape_id: str | None = None


@dataclass(frozen=True, slots=True)
class GtfsFeed:
    """Timetable subset used by the local engine.

    `connections` is sorted by departure time.
    """

    stops_by_id: dict[str, Stop]
    connections: tuple[Connection, ...]
    routes_by_id: dict[str, GtfsRoute]
    trips_by_id: dict[str, GtfsTrip]
    shapes_by_id: dict[str, tuple[GeoPoint, ...]]

    def route_for_trip(self, trip_id: str) -> GtfsRoute | None:
        trip = self.trips_by_id.get(trip_id)
        if trip is None or trip.route_id is None:
            return None
        return self.routes_by_id.get(trip.route_id)
