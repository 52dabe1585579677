# ============================================================================
# PRODUCERS MODULE
# ============================================================================
# STATUS: Producer exports
# PURPOSE: Production strategies and the registry that selects them
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
Producers Module

Importing this package registers the built-in strategies:
    PixelKind.IMAGE     → TiledImageProducer
    PixelKind.ELEVATION → TiledElevationProducer
"""

from producers.base import DataStoreProducer
from producers.registry import (
    register_producer,
    get_producer_class,
    create_producer,
    list_producers,
    unregister_producer,
)
from producers.tile_writer import TileWriter, RasterioTileWriter
from producers.tiled import (
    TiledRasterProducer,
    TiledImageProducer,
    TiledElevationProducer,
)

__all__ = [
    "DataStoreProducer",
    "register_producer",
    "get_producer_class",
    "create_producer",
    "list_producers",
    "unregister_producer",
    "TileWriter",
    "RasterioTileWriter",
    "TiledRasterProducer",
    "TiledImageProducer",
    "TiledElevationProducer",
]
