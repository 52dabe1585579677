# ============================================================================
# CORE MODULE
# ============================================================================
# STATUS: Core module initialization
# PURPOSE: Export core contracts, errors and models
# LAST_REVIEWED: 18 OCT 2026
# ============================================================================

from core.contracts import (
    PixelKind,
    DataType,
    ProductionState,
    ConfigType,
    ParamKey,
    SERVICE_NAME_LOCAL_RASTER_SERVER,
)
from core.errors import (
    InstallerError,
    InvalidInputError,
    MissingParameterError,
    UnsupportedSourceError,
    SkippableSourceError,
    ProductionCancelledError,
)
from core.models import (
    Sector,
    FileSet,
    ProductionParameters,
    RasterDescriptor,
    CachedDataRaster,
    ProductionResult,
    RasterServerConfig,
)

__all__ = [
    # Enums
    "PixelKind",
    "DataType",
    "ProductionState",
    "ConfigType",
    "ParamKey",
    "SERVICE_NAME_LOCAL_RASTER_SERVER",
    # Errors
    "InstallerError",
    "InvalidInputError",
    "MissingParameterError",
    "UnsupportedSourceError",
    "SkippableSourceError",
    "ProductionCancelledError",
    # Models
    "Sector",
    "FileSet",
    "ProductionParameters",
    "RasterDescriptor",
    "CachedDataRaster",
    "ProductionResult",
    "RasterServerConfig",
]
