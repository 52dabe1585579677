# ============================================================================
# BASE CONTRACTS & ENUMS
# ============================================================================
# STATUS: Foundation - Core enums and parameter keys
# PURPOSE: Define pixel kinds, production states and parameter key contract
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: PixelKind, ProductionState, ConfigType, ParamKey, DataType
# DEPENDENCIES: enum
# ============================================================================
"""
Base contracts for the dataset installer.

These define the minimal vocabulary that crosses boundaries:
- Raster readers (pixel kind detection)
- Producers (production parameter keys)
- XML configuration documents (root element types, property names)

The ParamKey values are written verbatim into configuration documents
as <Property name="..."/> entries, so downstream consumers depend on
them byte-for-byte. Do not rename them.
"""

from enum import Enum
from typing import Optional


# ============================================================================
# PIXEL KIND
# ============================================================================

class PixelKind(str, Enum):
    """
    Classification of a raster's content.

    IMAGE and ELEVATION are installable; UNKNOWN means a reader accepted
    the file but could not tell what it holds.
    """
    IMAGE = "image"
    ELEVATION = "elevation"
    UNKNOWN = "unknown"

    def is_known(self) -> bool:
        """Check if this kind can drive a producer."""
        return self in (PixelKind.IMAGE, PixelKind.ELEVATION)

    @classmethod
    def parse(cls, value: Optional[object]) -> "PixelKind":
        """Coerce a loose value (None, str, PixelKind) into a PixelKind."""
        if isinstance(value, PixelKind):
            return value
        if not value:
            return cls.UNKNOWN
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.UNKNOWN


class DataType(str, Enum):
    """Explicit data type hint carried by a FileSet."""
    IMAGERY = "Imagery"
    ELEVATION = "Elevation"


# ============================================================================
# PRODUCTION STATE
# ============================================================================

class ProductionState(str, Enum):
    """
    Production run lifecycle.

    State transitions:
        IDLE -> PARAMETERIZED -> OFFERING -> PRODUCING -> COMPLETED
                                          -> ROLLED_BACK (error)
                                          -> CANCELLED   (token)
    """
    IDLE = "idle"
    PARAMETERIZED = "parameterized"
    OFFERING = "offering"
    PRODUCING = "producing"
    COMPLETED = "completed"
    ROLLED_BACK = "rolled_back"
    CANCELLED = "cancelled"

    def is_terminal(self) -> bool:
        """Check if this is a terminal state (no further transitions)."""
        return self in (
            ProductionState.COMPLETED,
            ProductionState.ROLLED_BACK,
            ProductionState.CANCELLED,
        )


# ============================================================================
# CONFIGURATION DOCUMENT TYPES
# ============================================================================

class ConfigType(str, Enum):
    """Root element types of a data configuration document."""
    LAYER = "Layer"
    ELEVATION_MODEL = "ElevationModel"

    @classmethod
    def from_tag(cls, tag: Optional[str]) -> Optional["ConfigType"]:
        """Match a root tag case-insensitively; None if unrecognized."""
        if not tag:
            return None
        for member in cls:
            if member.value.lower() == tag.lower():
                return member
        return None


# ============================================================================
# PRODUCTION PARAMETER KEYS
# ============================================================================

class ParamKey(str, Enum):
    """
    Named production settings.

    Values match the property names the display runtime reads back from
    installed configuration documents.
    """
    DATASET_NAME = "gov.nasa.worldwind.avkey.DatasetNameKey"
    DATA_CACHE_NAME = "gov.nasa.worldwind.avkey.DataCacheNameKey"
    DISPLAY_NAME = "gov.nasa.worldwind.avkey.DisplayName"
    FILE_STORE_LOCATION = "gov.nasa.worldwind.avkey.FileStoreLocation"
    SERVICE_NAME = "gov.nasa.worldwind.avkey.ServiceName"
    PRODUCER_ENABLE_FULL_PYRAMID = "gov.nasa.worldwind.avkey.Producer.EnableFullPyramid"
    TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL = "gov.nasa.worldwind.avkey.TiledRasterProducerLimitMaxLevel"
    SECTOR = "gov.nasa.worldwind.avKey.Sector"
    PIXEL_FORMAT = "gov.nasa.worldwind.avkey.PixelFormat"
    LAYER = "gov.nasa.worldwind.avkey.LayerKey"


# Service marker set when installing for on-demand raster serving
SERVICE_NAME_LOCAL_RASTER_SERVER = "LocalRasterServer"

# Flag placed on a preview layer's params so the scene binder can find it
PREVIEW_LAYER = "dataset_installer.PreviewLayer"


__all__ = [
    "PixelKind",
    "DataType",
    "ProductionState",
    "ConfigType",
    "ParamKey",
    "SERVICE_NAME_LOCAL_RASTER_SERVER",
    "PREVIEW_LAYER",
]
