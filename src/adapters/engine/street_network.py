from __future__ import annotations

import logging
import pickle
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import networkx as nx
import osmnx as ox

from src.domain.algorithms.geo_utils import haversine_distance_m
from src.domain.models import GeoPoint

logger = logging.getLogger(__name__)


def load_street_graph(path: Path) -> Any:
    """Load a prebuilt street graph (.graphml or pickled networkx graph)."""

    suffix = path.suffix.lower()
    if suffix == ".graphml":
        # The OSMnx loader keeps numeric attributes (edge "length", node x/y)
        # typed; a generic GraphML loader would leave them as strings.
        return ox.load_graphml(path)
    if suffix in {".pkl", ".pickle"}:
        with path.open("rb") as fp:
            return pickle.load(fp)
    raise ValueError(f"Unsupported street graph format: {path}")


@dataclass(slots=True)
class StreetNetwork:
    """Walkable street graph; nodes carry lon/lat in x/y, edges a metre length."""

    graph: Any

    def __post_init__(self) -> None:
        if self.graph.number_of_nodes() == 0:
            raise ValueError("Street graph has no nodes")

    def nearest_node(self, point: GeoPoint) -> Any:
        try:
            return ox.distance.nearest_nodes(self.graph, X=point.lon, Y=point.lat)
        except Exception:
            # Unprojected graphs need optional spatial-index packages; scan instead.
            pass

        best_node: Any | None = None
        best_d2 = float("inf")
        for node_id, data in self.graph.nodes(data=True):
            try:
                lon = float(data["x"])
                lat = float(data["y"])
            except (KeyError, TypeError, ValueError):
                continue
            d2 = (lat - point.lat) ** 2 + (lon - point.lon) ** 2
            if d2 < best_d2:
                best_d2 = d2
                best_node = node_id

        if best_node is None:
            raise ValueError("Street graph contains no georeferenced nodes")
        return best_node

    def node_point(self, node: Any) -> GeoPoint:
        data = self.graph.nodes[node]
        return GeoPoint(lat=float(data["y"]), lon=float(data["x"]))

    def walk_distance_m(self, a: GeoPoint, b: GeoPoint) -> float | None:
        return self.node_distance_m(self.nearest_node(a), self.nearest_node(b), a, b)

    def node_distance_m(
        self, a_node: Any, b_node: Any, a: GeoPoint, b: GeoPoint
    ) -> float | None:
        """Street distance between two points snapped to the given nodes.

        Includes the straight-line hops from each point to its node.
        """

        try:
            length = nx.shortest_path_length(self.graph, a_node, b_node, weight="length")
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None
        return (
            float(length)
            + haversine_distance_m(a, self.node_point(a_node))
            + haversine_distance_m(self.node_point(b_node), b)
        )

    def street_name(self, point: GeoPoint) -> str | None:
        """Name of the street nearest to `point`, if the edge carries one."""

        try:
            u, v, k = ox.distance.nearest_edges(self.graph, X=point.lon, Y=point.lat)
            data = self.graph.get_edge_data(u, v, k)
        except Exception:
            node = self.nearest_node(point)
            data = next(
                (d for _, _, d in self.graph.edges(node, data=True) if d.get("name")),
                None,
            )

        if not isinstance(data, dict):
            return None
        name = data.get("name")
        if isinstance(name, (list, tuple)) and name:
            name = name[0]
        if isinstance(name, str):
            return name.strip() or None
        return None


@dataclass(slots=True)
class StopMatches:
    """Stop id → nearest street node, for stops within `max_distance_m`."""

    node_by_stop: dict[str, Any]

    @classmethod
    def build(
        cls, network: StreetNetwork, stops: dict[str, Any], *, max_distance_m: float
    ) -> "StopMatches":
        node_by_stop: dict[str, Any] = {}
        for stop_id, stop in stops.items():
            node = network.nearest_node(stop.location)
            if haversine_distance_m(stop.location, network.node_point(node)) <= max_distance_m:
                node_by_stop[stop_id] = node
        logger.info(
            "Matched %d of %d stops to the street network", len(node_by_stop), len(stops)
        )
        return cls(node_by_stop=node_by_stop)

    def node(self, stop_id: str) -> Any | None:
        return self.node_by_stop.get(stop_id)
