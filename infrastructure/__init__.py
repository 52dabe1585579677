# ============================================================================
# INFRASTRUCTURE MODULE
# ============================================================================
# STATUS: Infrastructure - Raster readers and file stores
# PURPOSE: Access to source rasters and install directories
# CREATED: 18 OCT 2026
# ============================================================================
"""
Infrastructure module for the dataset installer.

Provides:
- RasterReaderFactory: ordered raster readers (rasterio by default)
- BasicFileStore: install directories from FileStoreConfig

Usage:
    from infrastructure import BasicFileStore, RasterReaderFactory

    store = BasicFileStore.for_directory("/data/ww")
    reader = RasterReaderFactory.default().find_reader_for("/imagery/a.tif")
"""

from infrastructure.readers import (
    RasterReader,
    RasterioRasterReader,
    RasterReaderFactory,
)
from infrastructure.file_store import (
    FileStore,
    BasicFileStore,
)

__all__ = [
    "RasterReader",
    "RasterioRasterReader",
    "RasterReaderFactory",
    "FileStore",
    "BasicFileStore",
]
