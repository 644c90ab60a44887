from __future__ import annotations

import csv
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from src.domain.models import GeoPoint
from src.domain.models.gtfs import Connection, GtfsFeed, GtfsRoute, GtfsTrip, Stop

logger = logging.getLogger(__name__)


def parse_gtfs_time(raw: str) -> int:
    # HH:MM:SS where HH may exceed 24 for after-midnight service.
    hh, mm, ss = raw.strip().split(":")
    return int(hh) * 3600 + int(mm) * 60 + int(ss)


def _clean(row: dict[str, str], key: str) -> str | None:
    return (row.get(key) or "").strip() or None


def _rows(path: Path) -> Iterator[dict[str, str]]:
    # utf-8-sig: many published feeds start with a BOM.
    with path.open("r", encoding="utf-8-sig", newline="") as fp:
        yield from csv.DictReader(fp)


@dataclass(slots=True)
class GtfsDirectoryRepository:
    """Reads a GTFS feed from a directory of .txt files.

    `stops.txt` and `stop_times.txt` are required; routes, trips and shapes
    are read when present.
    """

    base_path: Path

    def load_feed(self) -> GtfsFeed:
        base = Path(self.base_path)
        for required in ("stops.txt", "stop_times.txt"):
            if not (base / required).exists():
                raise FileNotFoundError(f"GTFS feed at {base} is missing {required}")

        routes_by_id = self._routes(base / "routes.txt")
        trips_by_id = self._trips(base / "trips.txt")
        shapes_by_id = self._shapes(base / "shapes.txt")
        stops_by_id = self._stops(base / "stops.txt")
        connections = self._connections(base / "stop_times.txt", stops_by_id)

        logger.info(
            "Loaded GTFS feed %s: %d stops, %d trips, %d connections",
            base,
            len(stops_by_id),
            len(trips_by_id),
            len(connections),
        )
        return GtfsFeed(
            stops_by_id=stops_by_id,
            connections=connections,
            routes_by_id=routes_by_id,
            trips_by_id=trips_by_id,
            shapes_by_id=shapes_by_id,
        )

    def _routes(self, path: Path) -> dict[str, GtfsRoute]:
        out: dict[str, GtfsRoute] = {}
        if not path.exists():
            return out
        for row in _rows(path):
            route_id = _clean(row, "route_id")
            if not route_id:
                continue
            raw_type = _clean(row, "route_type")
            try:
                route_type = int(raw_type) if raw_type else None
            except ValueError:
                route_type = None
            out[route_id] = GtfsRoute(
                route_id=route_id,
                short_name=_clean(row, "route_short_name"),
                long_name=_clean(row, "route_long_name"),
                route_type=route_type,
            )
        return out

    def _trips(self, path: Path) -> dict[str, GtfsTrip]:
        out: dict[str, GtfsTrip] = {}
        if not path.exists():
            return out
        for row in _rows(path):
            trip_id = _clean(row, "trip_id")
            if not trip_id:
                continue
            out[trip_id] = GtfsTrip(
                trip_id=trip_id,
                route_id=_clean(row, "route_id"),
                headsign=_clean(row, "trip_headsign"),
                shape_id=_clean(row, "shape_id"),
            )
        return out

    def _shapes(self, path: Path) -> dict[str, tuple[GeoPoint, ...]]:
        if not path.exists():
            return {}
        tmp: dict[str, list[tuple[int, GeoPoint]]] = {}
        for row in _rows(path):
            shape_id = _clean(row, "shape_id")
            if not shape_id:
                continue
            try:
                seq = int(row.get("shape_pt_sequence") or 0)
                point = GeoPoint(
                    lat=float(row["shape_pt_lat"]), lon=float(row["shape_pt_lon"])
                )
            except (TypeError, ValueError, KeyError):
                continue
            tmp.setdefault(shape_id, []).append((seq, point))

        return {
            shape_id: tuple(p for _, p in sorted(pts, key=lambda x: x[0]))
            for shape_id, pts in tmp.items()
        }

    def _stops(self, path: Path) -> dict[str, Stop]:
        out: dict[str, Stop] = {}
        for row in _rows(path):
            stop_id = _clean(row, "stop_id")
            if not stop_id:
                continue
            try:
                location = GeoPoint(lat=float(row["stop_lat"]), lon=float(row["stop_lon"]))
            except (TypeError, ValueError, KeyError):
                logger.warning("Skipping stop %s without coordinates", stop_id)
                continue
            out[stop_id] = Stop(
                id=stop_id, name=_clean(row, "stop_name") or stop_id, location=location
            )
        return out

    def _connections(
        self, path: Path, stops_by_id: dict[str, Stop]
    ) -> tuple[Connection, ...]:
        by_trip: dict[str, list[tuple[int, str, int, int]]] = {}
        for row in _rows(path):
            trip_id = _clean(row, "trip_id")
            stop_id = _clean(row, "stop_id")
            if not trip_id or not stop_id:
                continue
            arr_raw = _clean(row, "arrival_time")
            dep_raw = _clean(row, "departure_time") or arr_raw
            arr_raw = arr_raw or dep_raw
            if not arr_raw or not dep_raw:
                # Untimed intermediate stop.
                continue
            by_trip.setdefault(trip_id, []).append(
                (
                    int(row.get("stop_sequence") or 0),
                    stop_id,
                    parse_gtfs_time(dep_raw),
                    parse_gtfs_time(arr_raw),
                )
            )

        connections: list[Connection] = []
        for trip_id, entries in by_trip.items():
            entries.sort(key=lambda x: x[0])
            for (_, a_stop, a_dep, _), (_, b_stop, _, b_arr) in zip(entries, entries[1:]):
                if a_stop not in stops_by_id or b_stop not in stops_by_id:
                    continue
                connections.append(
                    Connection(
                        dep_stop_id=a_stop,
                        arr_stop_id=b_stop,
                        dep_time_s=a_dep,
                        arr_time_s=b_arr,
                        trip_id=trip_id,
                    )
                )

        connections.sort(key=lambda c: (c.dep_time_s, c.arr_time_s))
        return tuple(connections)
