from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class BinaryResult:
    """Tile or glyph lookup result; `data_base64` is set iff `found`."""

    found: bool = False
    data_base64: str | None = None

    def __post_init__(self) -> None:
        if self.found != (self.data_base64 is not None):
            raise ValueError("data_base64 must be present exactly when found")


TileResult = BinaryResult
GlyphResult = BinaryResult
