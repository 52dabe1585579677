# ============================================================================
# RASTER READER REGISTRY
# ============================================================================
# STATUS: Infrastructure - Raster format detection and metadata reads
# PURPOSE: Find a reader for a file and read header metadata without decoding
# CREATED: 18 OCT 2026
# ============================================================================
"""
Raster Reader Registry

Readers answer two questions about a candidate file:
1. can_read(): is this a raster format I understand? (cheap, no I/O beyond
   a suffix check and existence test)
2. read_metadata(): what does the header say? Pixel kind, sector, size.
   Opens the file with rasterio, which reads the header only.

RasterReaderFactory holds an ordered list of readers and returns the
first that accepts a file. Callers that need other formats (vendor
decoders, remote sources) register additional readers ahead of the
default one.

Pixel kind detection follows band layout and dtype:
- single band of a signed/float type → elevation
- 1, 3 or 4 bands of uint8 (or 3/4 bands of uint16) → image
- elevation-only suffixes (.dt0/.dt1/.dt2/.hgt/.bil/.dem) → elevation
- anything else → unknown
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import rasterio
from rasterio.warp import transform_bounds

from core.config import ReaderDefaults
from core.contracts import ParamKey, PixelKind
from core.models import Sector

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Extra (non-ParamKey) metadata keys recorded by read_metadata()
WIDTH = "width"
HEIGHT = "height"
BAND_COUNT = "band_count"
DTYPE = "dtype"
CRS = "crs"
PIXEL_SIZE_DEGREES = "pixel_size_degrees"


# ============================================================================
# READER INTERFACE
# ============================================================================

class RasterReader(ABC):
    """Base class for raster readers."""

    name: str = "raster"

    @abstractmethod
    def can_read(self, source: PathLike, params: Optional[Dict[str, Any]] = None) -> bool:
        """Cheap check: does this reader recognize the source?"""

    @abstractmethod
    def read_metadata(self, source: PathLike, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Read header metadata into params.

        Raises on unreadable files; callers decide whether that is fatal.
        """


# ============================================================================
# RASTERIO READER
# ============================================================================

class RasterioRasterReader(RasterReader):
    """Reader for any GDAL-supported raster with a recognized suffix."""

    name = "rasterio"

    def __init__(self, defaults: Optional[ReaderDefaults] = None):
        self.defaults = defaults or ReaderDefaults()

    def can_read(self, source: PathLike, params: Optional[Dict[str, Any]] = None) -> bool:
        path = Path(source)
        if path.suffix.lower() not in self.defaults.raster_suffixes:
            return False
        return path.is_file()

    def read_metadata(self, source: PathLike, params: Dict[str, Any]) -> Dict[str, Any]:
        path = Path(source)
        with rasterio.open(path) as src:
            band_count = src.count
            dtype = str(src.dtypes[0]) if src.dtypes else ""
            width, height = src.width, src.height
            sector = self._sector_for(src)

            params[WIDTH] = width
            params[HEIGHT] = height
            params[BAND_COUNT] = band_count
            params[DTYPE] = dtype
            params[CRS] = str(src.crs) if src.crs else None

        kind = self.detect_pixel_kind(path, band_count, dtype)
        params[ParamKey.PIXEL_FORMAT] = kind
        if sector is not None:
            params[ParamKey.SECTOR] = sector
            if width > 0 and height > 0:
                params[PIXEL_SIZE_DEGREES] = min(sector.delta_lon / width, sector.delta_lat / height)

        logger.debug(
            f"Read metadata {path.name}: {width}x{height}, {band_count} bands, "
            f"{dtype}, kind={kind.value}, sector={sector}"
        )
        return params

    def detect_pixel_kind(self, path: Path, band_count: int, dtype: str) -> PixelKind:
        """Classify a raster from its suffix, band layout and dtype."""
        if path.suffix.lower() in self.defaults.elevation_suffixes:
            return PixelKind.ELEVATION
        if band_count == 1 and dtype in self.defaults.elevation_dtypes:
            return PixelKind.ELEVATION
        if band_count in (1, 3, 4) and dtype == "uint8":
            return PixelKind.IMAGE
        if band_count in (3, 4) and dtype in self.defaults.image_dtypes:
            return PixelKind.IMAGE
        return PixelKind.UNKNOWN

    @staticmethod
    def _sector_for(src) -> Optional[Sector]:
        """Dataset bounds in geographic degrees, or None without a CRS."""
        if src.crs is None:
            return None
        try:
            if src.crs.is_geographic:
                return Sector.from_bounds(tuple(src.bounds))
            return Sector.from_bounds(transform_bounds(src.crs, "EPSG:4326", *src.bounds))
        except Exception as e:
            logger.debug(f"Could not derive sector for {src.name}: {e}")
            return None


# ============================================================================
# FACTORY
# ============================================================================

class RasterReaderFactory:
    """
    Ordered collection of readers.

    Usage:
        factory = RasterReaderFactory.default()
        reader = factory.find_reader_for("/data/ortho.tif")
    """

    def __init__(self, readers: Optional[List[RasterReader]] = None):
        self._readers: List[RasterReader] = list(readers or [])

    @classmethod
    def default(cls, defaults: Optional[ReaderDefaults] = None) -> "RasterReaderFactory":
        return cls([RasterioRasterReader(defaults)])

    @property
    def readers(self) -> List[RasterReader]:
        return list(self._readers)

    def register(self, reader: RasterReader, first: bool = True) -> None:
        """Add a reader; by default it is consulted before existing ones."""
        if first:
            self._readers.insert(0, reader)
        else:
            self._readers.append(reader)
        logger.debug(f"Registered raster reader: {reader.name}")

    def find_reader_for(
        self,
        source: PathLike,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[RasterReader]:
        """First reader that accepts the source, or None."""
        for reader in self._readers:
            try:
                if reader.can_read(source, params):
                    return reader
            except Exception as e:
                logger.debug(f"Reader {reader.name} rejected {source}: {e}")
        return None


__all__ = [
    "RasterReader",
    "RasterioRasterReader",
    "RasterReaderFactory",
    "WIDTH",
    "HEIGHT",
    "BAND_COUNT",
    "DTYPE",
    "CRS",
    "PIXEL_SIZE_DEGREES",
]
