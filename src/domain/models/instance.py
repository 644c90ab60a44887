from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any


class Subsystem(str, Enum):
    """Independently loadable parts of a dataset."""

    STREETS = "streets"
    STREET_LOOKUP = "street_lookup"
    PLATFORMS = "platforms"
    ELEVATIONS = "elevations"
    TIMETABLE = "timetable"
    TAGS = "tags"
    STOP_RTREE = "stop_rtree"
    STOP_MATCHES = "stop_matches"
    TIMEZONES = "timezones"
    SHAPES = "shapes"
    REALTIME = "realtime"
    RAILVIZ = "railviz"
    RENTALS = "rentals"
    FLEX_AREAS = "flex_areas"
    GEOCODE_TEXT = "geocode_text"
    GEOCODE_FORMATTER = "geocode_formatter"
    GEOCODE_CACHE = "geocode_cache"
    REVERSE_INDEX = "reverse_index"
    TILES = "tiles"
    GLYPHS = "glyphs"


@dataclass(frozen=True, slots=True)
class Instance:
    """A loaded dataset.

    Subsystems absent from `subsystems` are simply not loaded; a present
    entry is always complete. `handlers` maps dispatch-table endpoint names
    to the engine objects serving them. The gateway never mutates either
    mapping.
    """

    data_path: Path
    subsystems: Mapping[Subsystem, Any] = field(default_factory=dict)
    handlers: Mapping[str, Any] = field(default_factory=dict)
    config: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if any(v is None for v in self.subsystems.values()):
            raise ValueError("Subsystems must be loaded or absent, not None")
        for name in ("subsystems", "handlers", "config"):
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    def has(self, subsystem: Subsystem) -> bool:
        return subsystem in self.subsystems

    def get(self, subsystem: Subsystem) -> Any | None:
        return self.subsystems.get(subsystem)

    def missing(self, required: Iterable[Subsystem]) -> frozenset[Subsystem]:
        return frozenset(s for s in required if s not in self.subsystems)

    def handler(self, endpoint: str) -> Any | None:
        return self.handlers.get(endpoint)
