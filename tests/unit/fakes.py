from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.app.ports.output import IDatasetLoader, IGlyphStore, ITileStore
from src.domain.models import ApiRequest, Instance


@dataclass(slots=True)
class FakeLoader(IDatasetLoader):
    instance: Instance | None = None
    error: Exception | None = None
    released: list[Instance] = field(default_factory=list)

    def load(self, data_path: str | Path) -> Instance:
        if self.error is not None:
            raise self.error
        assert self.instance is not None
        return self.instance

    def release(self, instance: Instance) -> None:
        self.released.append(instance)


@dataclass(slots=True)
class RecordingHandler:
    """Endpoint handler returning a fixed value and recording its requests."""

    result: Any = None
    error: Exception | None = None
    calls: list[ApiRequest] = field(default_factory=list)

    def __call__(self, request: ApiRequest) -> Any:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.result


@dataclass(slots=True)
class MemoryTileStore(ITileStore):
    tiles: dict[tuple[int, int, int], bytes] = field(default_factory=dict)

    def get_tile(self, z: int, x: int, y: int) -> bytes | None:
        return self.tiles.get((z, x, y))


@dataclass(slots=True)
class MemoryGlyphStore(IGlyphStore):
    glyphs: dict[str, bytes] = field(default_factory=dict)
    requested: list[str] = field(default_factory=list)

    def get_glyph(self, name: str) -> bytes:
        self.requested.append(name)
        return self.glyphs[name]
