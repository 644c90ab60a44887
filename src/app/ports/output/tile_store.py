from __future__ import annotations

from abc import ABC, abstractmethod


class ITileStore(ABC):
    """Port for rendered vector tiles."""

    @abstractmethod
    def get_tile(self, z: int, x: int, y: int) -> bytes | None:
        """Return the encoded tile, or None when the tile does not exist."""
