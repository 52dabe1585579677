# ============================================================================
# MODELS MODULE
# ============================================================================
# STATUS: Model exports
# PURPOSE: Central export point for installer data models
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================
"""
Models Module - Central Export Point

Pydantic models for values that are validated or serialized (sectors,
file sets, RasterServer documents) and dataclasses for transient runtime
state (descriptors, rasters, results).
"""

from core.models.sector import Sector
from core.models.file_set import FileSet
from core.models.production import (
    ProductionParameters,
    RasterDescriptor,
    DataRaster,
    CachedDataRaster,
    ProductionResult,
)
from core.models.raster_server import (
    RasterServerConfig,
    RasterServerSource,
    RasterServerProperty,
    raster_server_config_path,
    RASTER_SERVER_SUFFIX,
)

__all__ = [
    "Sector",
    "FileSet",
    "ProductionParameters",
    "RasterDescriptor",
    "DataRaster",
    "CachedDataRaster",
    "ProductionResult",
    "RasterServerConfig",
    "RasterServerSource",
    "RasterServerProperty",
    "raster_server_config_path",
    "RASTER_SERVER_SUFFIX",
]
