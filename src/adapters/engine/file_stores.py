from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from src.app.ports.output import IGlyphStore, ITileStore

MAX_ZOOM = 32


@dataclass(slots=True)
class FileTileStore(ITileStore):
    """Pre-rendered vector tiles laid out as `<root>/<z>/<x>/<y>.mvt`."""

    root: Path
    suffixes: tuple[str, ...] = (".mvt", ".pbf")

    def get_tile(self, z: int, x: int, y: int) -> bytes | None:
        if not 0 <= z <= MAX_ZOOM or not (0 <= x < 2**z and 0 <= y < 2**z):
            return None
        for suffix in self.suffixes:
            path = self.root / str(z) / str(x) / f"{y}{suffix}"
            if path.is_file():
                return path.read_bytes()
        return None


@dataclass(slots=True)
class FileGlyphStore(IGlyphStore):
    """SDF glyph ranges laid out as `<root>/<fontstack>/<start>-<end>.pbf`."""

    root: Path

    def get_glyph(self, name: str) -> bytes:
        root = self.root.resolve()
        path = (root / name).resolve()
        if root not in path.parents or not path.is_file():
            raise KeyError(name)
        return path.read_bytes()
