from __future__ import annotations

import bisect
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from src.adapters.engine.modes import mode_for_route_type
from src.adapters.engine.stop_index import StopIndex
from src.adapters.engine.street_network import StopMatches, StreetNetwork
from src.app.ports.output import IEndpointHandler
from src.app.ports.output.engine_api import (
    EngineLeg,
    InitialResponse,
    Itinerary,
    Mode,
    Place,
    PlanResponse,
)
from src.app.services.request_synthesizer import parse_place
from src.domain.algorithms.csa import TripSegment, earliest_arrival, reconstruct_segments
from src.domain.algorithms.geo_utils import (
    bounding_box,
    haversine_distance_m,
    polyline_distance_m,
    slice_polyline,
)
from src.domain.exceptions import NoPathFound
from src.domain.models import ApiRequest, GeoPoint, Stop
from src.domain.models.gtfs import GtfsFeed

logger = logging.getLogger(__name__)


def parse_departure_time(raw: str | None) -> datetime:
    """ISO 8601 departure time; wall-clock part is used as service time."""

    if not raw:
        return datetime.now()
    return datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))


def seconds_since_midnight(dt: datetime) -> int:
    return dt.hour * 3600 + dt.minute * 60 + dt.second


@dataclass(frozen=True, slots=True)
class _Access:
    stop: Stop
    distance_m: float
    duration_s: int


@dataclass(slots=True)
class LocalPlanEndpoint(IEndpointHandler):
    """Walk + scheduled transit itineraries.

    Walking uses the street graph; transit uses a Connection Scan over the
    GTFS timetable. Later alternatives are found by re-running the scan just
    after the previous itinerary's departure.
    """

    feed: GtfsFeed
    network: StreetNetwork
    matches: StopMatches
    stops: StopIndex
    default_itineraries: int = 5
    walk_speed_mps: float = 1.4
    max_access_m: float = 1500.0
    max_candidate_stops: int = 12
    max_direct_walk_m: float = 3000.0
    transfer_time_s: int = 120
    _dep_times: list[int] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        self._dep_times = [c.dep_time_s for c in self.feed.connections]

    def __call__(self, request: ApiRequest) -> PlanResponse:
        origin = parse_place(request.get("fromPlace"))
        destination = parse_place(request.get("toPlace"))
        if origin is None or destination is None:
            raise ValueError("fromPlace and toPlace must be given as 'lat,lon'")

        depart_at = parse_departure_time(request.get("time"))
        raw_count = request.get("numItineraries")
        count = max(1, int(raw_count)) if raw_count else self.default_itineraries

        itineraries = self._transit_itineraries(origin, destination, depart_at, count)

        direct_m = haversine_distance_m(origin, destination)
        if not itineraries or direct_m <= self.max_direct_walk_m:
            walk = self._walk_itinerary(origin, destination)
            if itineraries and walk.duration < itineraries[0].duration:
                itineraries.insert(0, walk)
            else:
                itineraries.append(walk)

        return PlanResponse(
            from_=Place(name="START", lat=origin.lat, lon=origin.lon),
            to=Place(name="END", lat=destination.lat, lon=destination.lon),
            itineraries=itineraries[:count],
        )

    # Street legs

    def _walk_m(self, a: GeoPoint, a_node: Any, b: GeoPoint, b_node: Any) -> float | None:
        if a_node is None or b_node is None:
            return None
        return self.network.node_distance_m(a_node, b_node, a, b)

    def _walk_leg(self, a: Place, b: Place, distance_m: float) -> EngineLeg:
        return EngineLeg(
            mode=Mode.WALK,
            from_=a,
            to=b,
            duration=math.ceil(distance_m / self.walk_speed_mps),
            distance=distance_m,
        )

    def _walk_itinerary(self, origin: GeoPoint, destination: GeoPoint) -> Itinerary:
        distance = self.network.walk_distance_m(origin, destination)
        if distance is None:
            distance = haversine_distance_m(origin, destination)
        leg = self._walk_leg(
            Place(name="START", lat=origin.lat, lon=origin.lon),
            Place(name="END", lat=destination.lat, lon=destination.lon),
            distance,
        )
        return Itinerary(duration=leg.duration, transfers=0, legs=[leg])

    def _access(self, point: GeoPoint) -> list[_Access]:
        node = self.network.nearest_node(point)
        out: list[_Access] = []
        for _, stop in self.stops.nearest(
            point, radius_m=self.max_access_m, limit=self.max_candidate_stops
        ):
            distance = self._walk_m(point, node, stop.location, self.matches.node(stop.id))
            if distance is None or distance > self.max_access_m * 1.5:
                continue
            out.append(
                _Access(
                    stop=stop,
                    distance_m=distance,
                    duration_s=math.ceil(distance / self.walk_speed_mps),
                )
            )
        return out

    # Transit

    def _transit_itineraries(
        self, origin: GeoPoint, destination: GeoPoint, depart_at: datetime, count: int
    ) -> list[Itinerary]:
        access = {a.stop.id: a for a in self._access(origin)}
        egress = {a.stop.id: a for a in self._access(destination)}
        if not access or not egress:
            logger.debug("No stops within walking distance of origin or destination")
            return []

        depart_s = seconds_since_midnight(depart_at)
        itineraries: list[Itinerary] = []
        for _ in range(count):
            try:
                segments, start_s = self._search(access, egress, depart_s)
            except NoPathFound as exc:
                logger.debug("Transit search stopped: %s", exc)
                break
            itineraries.append(self._build(origin, destination, segments, access, egress))
            depart_s = start_s + 1
        return itineraries

    def _search(
        self, access: dict[str, _Access], egress: dict[str, _Access], depart_s: int
    ) -> tuple[list[TripSegment], int]:
        initial = {sid: depart_s + a.duration_s for sid, a in access.items()}
        first = bisect.bisect_left(self._dep_times, depart_s)
        result = earliest_arrival(
            self.feed.connections[first:],
            initial_time_s_by_stop=initial,
            transfer_time_s=self.transfer_time_s,
        )

        best: tuple[int, str] | None = None
        for sid, a in egress.items():
            arrival = result.arrival(sid)
            if arrival is None or sid not in result.segment_by_stop:
                continue
            total = arrival + a.duration_s
            if best is None or total < best[0]:
                best = (total, sid)
        if best is None:
            raise NoPathFound("No transit connection reaches the destination")

        segments = reconstruct_segments(result, dest_stop_id=best[1])
        if not segments or segments[0].board.dep_stop_id not in access:
            raise NoPathFound("No transit segment found")
        board_stop = segments[0].board.dep_stop_id
        return segments, segments[0].board.dep_time_s - access[board_stop].duration_s

    def _stop_place(self, stop_id: str) -> Place:
        stop = self.feed.stops_by_id[stop_id]
        return Place(
            name=stop.name, lat=stop.location.lat, lon=stop.location.lon, stop_id=stop.id
        )

    def _transit_leg(self, segment: TripSegment) -> EngineLeg:
        trip = self.feed.trips_by_id.get(segment.trip_id)
        route = self.feed.route_for_trip(segment.trip_id)
        board = self.feed.stops_by_id[segment.board.dep_stop_id].location
        alight = self.feed.stops_by_id[segment.alight.arr_stop_id].location

        distance: float | None = None
        shape = self.feed.shapes_by_id.get(trip.shape_id) if trip and trip.shape_id else None
        if shape and len(shape) >= 2:
            distance = polyline_distance_m(slice_polyline(shape, start=board, end=alight))

        return EngineLeg(
            mode=mode_for_route_type(route.route_type if route else None),
            from_=self._stop_place(segment.board.dep_stop_id),
            to=self._stop_place(segment.alight.arr_stop_id),
            duration=max(0, segment.alight.arr_time_s - segment.board.dep_time_s),
            distance=distance,
            route_short_name=route.short_name if route else None,
            headsign=trip.headsign if trip else None,
            trip_id=segment.trip_id,
        )

    def _build(
        self,
        origin: GeoPoint,
        destination: GeoPoint,
        segments: list[TripSegment],
        access: dict[str, _Access],
        egress: dict[str, _Access],
    ) -> Itinerary:
        first = access[segments[0].board.dep_stop_id]
        last = egress[segments[-1].alight.arr_stop_id]

        legs: list[EngineLeg] = []
        start = Place(name="START", lat=origin.lat, lon=origin.lon)
        end = Place(name="END", lat=destination.lat, lon=destination.lon)
        if first.distance_m >= 1.0:
            legs.append(self._walk_leg(start, self._stop_place(first.stop.id), first.distance_m))
        legs.extend(self._transit_leg(s) for s in segments)
        if last.distance_m >= 1.0:
            legs.append(self._walk_leg(self._stop_place(last.stop.id), end, last.distance_m))

        start_s = segments[0].board.dep_time_s - first.duration_s
        end_s = segments[-1].alight.arr_time_s + last.duration_s
        return Itinerary(duration=end_s - start_s, transfers=len(segments) - 1, legs=legs)


@dataclass(slots=True)
class LocalInitialEndpoint(IEndpointHandler):
    """Initial map view centred on the timetable's stops."""

    feed: GtfsFeed

    def __call__(self, request: ApiRequest) -> InitialResponse:
        box = bounding_box(s.location for s in self.feed.stops_by_id.values())
        if box is None:
            return InitialResponse(lat=0.0, lon=0.0, zoom=1.0)
        sw, ne = box
        extent = max(ne.lat - sw.lat, ne.lon - sw.lon, 1e-4)
        zoom = min(15.0, max(2.0, math.floor(math.log2(360.0 / extent))))
        return InitialResponse(
            lat=(sw.lat + ne.lat) / 2.0, lon=(sw.lon + ne.lon) / 2.0, zoom=float(zoom)
        )
