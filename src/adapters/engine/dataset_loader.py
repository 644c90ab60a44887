from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from src.adapters.engine.file_stores import FileGlyphStore, FileTileStore
from src.adapters.engine.geocoder import (
    LocalGeocodeEndpoint,
    LocalReverseGeocodeEndpoint,
    NameFormatter,
    QueryCache,
    StopNameIndex,
)
from src.adapters.engine.gtfs_repository import GtfsDirectoryRepository
from src.adapters.engine.modes import mode_for_route_type
from src.adapters.engine.planner import LocalInitialEndpoint, LocalPlanEndpoint
from src.adapters.engine.stop_index import StopIndex
from src.adapters.engine.street_network import StopMatches, StreetNetwork, load_street_graph
from src.app.ports.output import IDatasetLoader
from src.app.ports.output.engine_api import Mode
from src.app.services import dispatch_table as endpoints
from src.domain.exceptions import InitializationError
from src.domain.models import Instance, Subsystem
from src.domain.models.gtfs import GtfsFeed

logger = logging.getLogger(__name__)

CONFIG_FILE = "config.yml"


@dataclass(frozen=True, slots=True)
class DatasetConfig:
    """Dataset layout, from `<dataset>/config.yml` or auto-detected.

    A key set to a path must point at an existing file or directory; a key
    set to false disables that part even if the default location exists.
    """

    data_path: Path
    street_graph: Path | None = None
    timetable: Path | None = None
    tiles: Path | None = None
    glyphs: Path | None = None
    geocoding: bool = True
    reverse_geocoding: bool = True
    max_matching_distance_m: float = 250.0
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def read(cls, data_path: Path) -> "DatasetConfig":
        config_path = data_path / CONFIG_FILE
        raw: Any = {}
        if config_path.exists():
            try:
                with config_path.open("r", encoding="utf-8") as fp:
                    raw = yaml.safe_load(fp) or {}
            except yaml.YAMLError as exc:
                raise InitializationError(f"Invalid {config_path}: {exc}") from exc
            if not isinstance(raw, dict):
                raise InitializationError(f"{config_path} must contain a mapping")

        def resolve(value: Any, *defaults: str) -> Path | None:
            if value is False:
                return None
            if isinstance(value, dict):
                # `timetable: {datasets: {name: {path: ...}}}`
                datasets = value.get("datasets") or {}
                first = next(iter(datasets.values()), None) if isinstance(datasets, dict) else None
                value = first.get("path") if isinstance(first, dict) else value.get("path")
            if isinstance(value, str) and value.strip():
                path = Path(value.strip())
                path = path if path.is_absolute() else data_path / path
                if not path.exists():
                    raise InitializationError(f"Configured path does not exist: {path}")
                return path
            for default in defaults:
                candidate = data_path / default
                if candidate.exists():
                    return candidate
            return None

        try:
            max_matching = float(raw.get("max_matching_distance", 250.0))
        except (TypeError, ValueError) as exc:
            raise InitializationError(f"Invalid max_matching_distance in {config_path}") from exc

        return cls(
            data_path=data_path,
            street_graph=resolve(
                raw.get("street_graph", raw.get("osm")),
                "streets.graphml",
                "streets.pkl",
            ),
            timetable=resolve(raw.get("timetable"), "gtfs"),
            tiles=resolve(raw.get("tiles"), "tiles"),
            glyphs=resolve(raw.get("glyphs"), "glyphs"),
            geocoding=bool(raw.get("geocoding", True)),
            reverse_geocoding=bool(raw.get("reverse_geocoding", True)),
            max_matching_distance_m=max_matching,
            raw=raw,
        )


def _stop_statistics(feed: GtfsFeed) -> tuple[dict[str, int], dict[str, set[Mode]]]:
    departures: dict[str, int] = {}
    modes: dict[str, set[Mode]] = {}
    for c in feed.connections:
        departures[c.dep_stop_id] = departures.get(c.dep_stop_id, 0) + 1
        route = feed.route_for_trip(c.trip_id)
        mode = mode_for_route_type(route.route_type if route else None)
        modes.setdefault(c.dep_stop_id, set()).add(mode)
        modes.setdefault(c.arr_stop_id, set()).add(mode)
    return departures, modes


@dataclass(slots=True)
class LocalDatasetLoader(IDatasetLoader):
    """Loads an Instance from a dataset directory on local disk.

    Layout (all parts optional): `streets.graphml` (street graph), `gtfs/`
    (timetable), `tiles/` and `glyphs/`, or as configured in `config.yml`.
    """

    default_itineraries: int = 5

    def load(self, data_path: str | Path) -> Instance:
        path = Path(data_path)
        if not path.is_dir():
            raise InitializationError(f"Dataset directory not found: {path}")

        config = DatasetConfig.read(path)
        try:
            subsystems = self._load_subsystems(config)
        except InitializationError:
            raise
        except Exception as exc:
            raise InitializationError(f"Failed to load dataset {path}: {exc}") from exc

        return Instance(
            data_path=path,
            subsystems=subsystems,
            handlers=self._handlers(subsystems),
            config=dict(config.raw),
        )

    def _load_subsystems(self, config: DatasetConfig) -> dict[Subsystem, Any]:
        subsystems: dict[Subsystem, Any] = {}

        network: StreetNetwork | None = None
        if config.street_graph is not None:
            network = StreetNetwork(load_street_graph(config.street_graph))
            subsystems[Subsystem.STREETS] = network
            subsystems[Subsystem.STREET_LOOKUP] = network.graph

        feed: GtfsFeed | None = None
        if config.timetable is not None:
            feed = GtfsDirectoryRepository(config.timetable).load_feed()
            stop_index = StopIndex.from_stops(feed.stops_by_id.values())
            subsystems[Subsystem.TIMETABLE] = feed
            subsystems[Subsystem.TAGS] = feed.stops_by_id
            subsystems[Subsystem.STOP_RTREE] = stop_index
            if feed.shapes_by_id:
                subsystems[Subsystem.SHAPES] = feed.shapes_by_id

            if network is not None:
                subsystems[Subsystem.STOP_MATCHES] = StopMatches.build(
                    network,
                    feed.stops_by_id,
                    max_distance_m=config.max_matching_distance_m,
                )

            if config.geocoding or config.reverse_geocoding:
                formatter = NameFormatter()
                departures, modes = _stop_statistics(feed)
                subsystems[Subsystem.GEOCODE_TEXT] = StopNameIndex.build(
                    feed.stops_by_id.values(),
                    formatter,
                    departures_by_stop=departures,
                    modes_by_stop=modes,
                )
                subsystems[Subsystem.GEOCODE_FORMATTER] = formatter
                if config.geocoding:
                    subsystems[Subsystem.GEOCODE_CACHE] = QueryCache()
                if config.reverse_geocoding:
                    subsystems[Subsystem.REVERSE_INDEX] = stop_index

        if config.tiles is not None:
            subsystems[Subsystem.TILES] = FileTileStore(config.tiles)
        if config.glyphs is not None:
            subsystems[Subsystem.GLYPHS] = FileGlyphStore(config.glyphs)

        logger.info(
            "Loaded subsystems for %s: %s",
            config.data_path,
            ", ".join(sorted(s.value for s in subsystems)) or "none",
        )
        return subsystems

    def _handlers(self, subsystems: Mapping[Subsystem, Any]) -> dict[str, Any]:
        handlers: dict[str, Any] = {}
        feed = subsystems.get(Subsystem.TIMETABLE)
        network = subsystems.get(Subsystem.STREETS)

        if feed is not None:
            handlers[endpoints.INITIAL] = LocalInitialEndpoint(feed=feed)

        if Subsystem.STOP_MATCHES in subsystems:
            handlers[endpoints.PLAN] = LocalPlanEndpoint(
                feed=feed,
                network=network,
                matches=subsystems[Subsystem.STOP_MATCHES],
                stops=subsystems[Subsystem.STOP_RTREE],
                default_itineraries=self.default_itineraries,
            )

        if Subsystem.GEOCODE_CACHE in subsystems:
            handlers[endpoints.GEOCODE] = LocalGeocodeEndpoint(
                index=subsystems[Subsystem.GEOCODE_TEXT],
                formatter=subsystems[Subsystem.GEOCODE_FORMATTER],
                cache=subsystems[Subsystem.GEOCODE_CACHE],
            )

        if Subsystem.REVERSE_INDEX in subsystems and network is not None:
            handlers[endpoints.REVERSE_GEOCODE] = LocalReverseGeocodeEndpoint(
                stops=subsystems[Subsystem.REVERSE_INDEX],
                index=subsystems[Subsystem.GEOCODE_TEXT],
                network=network,
            )

        return handlers
