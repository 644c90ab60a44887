from __future__ import annotations

from abc import ABC, abstractmethod


class IGlyphStore(ABC):
    """Port for SDF font glyph ranges."""

    @abstractmethod
    def get_glyph(self, name: str) -> bytes:
        """Return the glyph range `<fontstack>/<range>.pbf`; raise KeyError if absent."""
