from __future__ import annotations

import csv
import pickle
from pathlib import Path
from typing import Any

import networkx as nx
import pytest

from src.domain.algorithms.geo_utils import haversine_distance_m
from src.domain.models import GeoPoint

STOPS = [
    ("740000001", "Stockholm Central", 59.3301, 18.0582),
    ("740000001-2", "Stockholm Central", 59.3305, 18.0577),
    ("740021659", "Odenplan", 59.3430, 18.0497),
    ("740000005", "Uppsala Central", 59.8586, 17.6389),
]

# Street nodes: one walkable patch around each central station.
STREET_NODES = {
    1: GeoPoint(lat=59.3310, lon=18.0590),
    2: GeoPoint(lat=59.3301, lon=18.0582),
    3: GeoPoint(lat=59.3430, lon=18.0497),
    4: GeoPoint(lat=59.8586, lon=17.6389),
    5: GeoPoint(lat=59.8590, lon=17.6400),
}
STREET_EDGES = [(1, 2, "Vasagatan"), (4, 5, "Kungsgatan")]


def _write_csv(path: Path, header: list[str], rows: list[tuple[Any, ...]]) -> None:
    with path.open("w", encoding="utf-8", newline="") as fp:
        writer = csv.writer(fp)
        writer.writerow(header)
        writer.writerows(rows)


def write_gtfs(directory: Path) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    _write_csv(
        directory / "stops.txt",
        ["stop_id", "stop_name", "stop_lat", "stop_lon"],
        STOPS,
    )
    _write_csv(
        directory / "routes.txt",
        ["route_id", "route_short_name", "route_long_name", "route_type"],
        [("R40", "40", "Stockholm - Uppsala", 2)],
    )
    _write_csv(
        directory / "trips.txt",
        ["route_id", "service_id", "trip_id", "trip_headsign", "shape_id"],
        [("R40", "ALL", "T40-1", "Uppsala", "")],
    )
    _write_csv(
        directory / "stop_times.txt",
        ["trip_id", "arrival_time", "departure_time", "stop_id", "stop_sequence"],
        [
            ("T40-1", "08:00:00", "08:00:00", "740000001", 1),
            ("T40-1", "08:05:00", "08:06:00", "740021659", 2),
            ("T40-1", "08:40:00", "08:40:00", "740000005", 3),
        ],
    )
    return directory


def write_street_graph(path: Path) -> Path:
    graph = nx.MultiDiGraph()
    for node, p in STREET_NODES.items():
        graph.add_node(node, x=p.lon, y=p.lat)
    for u, v, name in STREET_EDGES:
        length = haversine_distance_m(STREET_NODES[u], STREET_NODES[v])
        graph.add_edge(u, v, length=length, name=name)
        graph.add_edge(v, u, length=length, name=name)
    with path.open("wb") as fp:
        pickle.dump(graph, fp)
    return path


@pytest.fixture
def timetable_dataset(tmp_path: Path) -> Path:
    """Dataset with a timetable only (no streets, tiles or glyphs)."""

    write_gtfs(tmp_path / "gtfs")
    return tmp_path


@pytest.fixture
def full_dataset(tmp_path: Path) -> Path:
    write_gtfs(tmp_path / "gtfs")
    write_street_graph(tmp_path / "streets.pkl")

    tile = tmp_path / "tiles" / "0" / "0"
    tile.mkdir(parents=True)
    (tile / "0.mvt").write_bytes(b"\x1a\x02tile")

    glyphs = tmp_path / "glyphs" / "Noto Sans Regular"
    glyphs.mkdir(parents=True)
    (glyphs / "0-255.pbf").write_bytes(b"glyph-bytes")
    return tmp_path

