from .dataset_loader import IDatasetLoader
from .endpoint_handler import IEndpointHandler
from .glyph_store import IGlyphStore
from .tile_store import ITileStore

__all__ = [
    "IDatasetLoader",
    "IEndpointHandler",
    "IGlyphStore",
    "ITileStore",
]
