# ============================================================================
# TILED RASTER PRODUCERS
# ============================================================================
# STATUS: Core - Tile pyramid production
# PURPOSE: Build a tile cache and data configuration document from sources
# CREATED: 18 OCT 2026
# ============================================================================
"""
Tiled Raster Producers

Two strategies, selected by pixel kind:
- TiledImageProducer: imagery → <Layer layerType="TiledImageLayer">
- TiledElevationProducer: elevation → <ElevationModel>

Production steps:
1. Union the offered rasters' sectors into the dataset extent
2. Compute the level set from the finest source resolution
3. Write tiles level by level into <install>/<cache>/<level>/<row>/
   (all levels in full-pyramid mode, the first few in on-demand mode)
4. Write the data configuration document <install>/<cache>/<dataset>.xml

Tile layout:
    Level zero tiles are level_zero_delta degrees square, anchored at
    (-90, -180). Each level halves the tile delta. The number of levels
    is the smallest count whose finest level matches the source
    resolution at the configured tile size.

Rollback removes <install>/<cache> entirely.
"""

import math
import shutil
from pathlib import Path
from typing import Iterator, List, Optional, Tuple
from xml.etree import ElementTree as ET

from core.config import TilingDefaults
from core.contracts import (
    ConfigType,
    ParamKey,
    PixelKind,
    SERVICE_NAME_LOCAL_RASTER_SERVER,
)
from core.documents import append_element, append_sector, format_degrees, save_document
from core.errors import InvalidInputError, MissingParameterError
from core.logging import ComponentType, get_logger
from core.models import CachedDataRaster, DataRaster, ProductionParameters, Sector
from infrastructure.readers import DTYPE, PIXEL_SIZE_DEGREES, RasterReaderFactory
from producers.base import DataStoreProducer, PathLike
from producers.registry import register_producer
from producers.tile_writer import RasterioTileWriter, TileWriter
from worker.cancellation import CancellationToken, NeverCancelled
from worker.progress import ProgressCallback, ProgressTracker

logger = get_logger(__name__, ComponentType.PRODUCER)

ELEVATION_MISSING_DATA = -32768

TileSpec = Tuple[int, int, int, Sector]  # level, row, col, sector


class TiledRasterProducer(DataStoreProducer):
    """
    Shared tile pyramid production.

    Subclasses set pixel_kind, config_type and the tiling constants.
    """

    config_type: ConfigType = ConfigType.LAYER

    def __init__(
        self,
        reader_factory: Optional[RasterReaderFactory] = None,
        tile_writer: Optional[TileWriter] = None,
        tiling: Optional[TilingDefaults] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        super().__init__()
        self.reader_factory = reader_factory or RasterReaderFactory.default()
        self.tile_writer = tile_writer or RasterioTileWriter()
        self.tiling = tiling or TilingDefaults()
        self.progress_callback = progress_callback

        self._rasters: List[DataRaster] = []
        self.config_path: Optional[Path] = None
        self.tiles_written = 0

    # =========================================================================
    # LAYOUT (overridden per kind)
    # =========================================================================

    @property
    def tile_size(self) -> int:
        raise NotImplementedError

    @property
    def level_zero_delta(self) -> float:
        raise NotImplementedError

    @property
    def format_suffix(self) -> str:
        raise NotImplementedError

    @property
    def tile_driver(self) -> str:
        raise NotImplementedError

    @property
    def tile_nodata(self):
        return None

    # =========================================================================
    # OFFERING
    # =========================================================================

    @property
    def data_rasters(self) -> List[DataRaster]:
        return list(self._rasters)

    def offer_data_source(self, source: PathLike, params: Optional[ProductionParameters] = None) -> None:
        """
        Classify a source and register it as a cached raster.

        Raises:
            InvalidInputError: no reader, unreadable header, or wrong kind
        """
        path = Path(source)
        params = ProductionParameters(params or {})

        reader = self.reader_factory.find_reader_for(path, params)
        if reader is None:
            raise InvalidInputError(f"Unrecognized source type: {path}", path=str(path))

        if not params.has_key(ParamKey.PIXEL_FORMAT) or not params.has_key(ParamKey.SECTOR):
            try:
                reader.read_metadata(path, params)
            except Exception as e:
                raise InvalidInputError(f"Cannot read raster {path}: {e}", path=str(path)) from e

        kind = PixelKind.parse(params.get(ParamKey.PIXEL_FORMAT))
        if kind != self.pixel_kind:
            raise InvalidInputError(
                f"Incompatible raster {path}: expected {self.pixel_kind.value}, got {kind.value}",
                path=str(path),
            )

        params.setdefault(ParamKey.DATASET_NAME, path.stem)
        raster = CachedDataRaster(source=path, params=params, sector=params.get(ParamKey.SECTOR))
        self._rasters.append(raster)
        logger.debug(f"Offered {path.name} ({kind.value}, sector={raster.sector})")

    # =========================================================================
    # PRODUCTION
    # =========================================================================

    def cache_directory(self) -> Optional[Path]:
        """<install>/<cache> from the current parameters, if both are set."""
        params = self._production_params or self._store_params
        location = params.get_string(ParamKey.FILE_STORE_LOCATION)
        cache_name = params.get_string(ParamKey.DATA_CACHE_NAME)
        if not location or not cache_name:
            return None

        cache_dir = Path(location) / cache_name
        if Path(location).resolve() not in cache_dir.resolve().parents:
            raise InvalidInputError(
                f"Cache name '{cache_name}' does not resolve to a directory inside {location}"
            )
        return cache_dir

    def start_production(self, cancel_token: Optional[CancellationToken] = None) -> None:
        token = cancel_token or NeverCancelled()

        if not self._rasters:
            raise InvalidInputError("No data sources offered for production")

        params = ProductionParameters(self._store_params)
        for key in (ParamKey.DATASET_NAME, ParamKey.DATA_CACHE_NAME, ParamKey.FILE_STORE_LOCATION):
            if params.is_empty(key):
                raise MissingParameterError(key.value)
        dataset_name = params.get_string(ParamKey.DATASET_NAME)
        if params.is_empty(ParamKey.DISPLAY_NAME):
            params[ParamKey.DISPLAY_NAME] = dataset_name
        self._production_params = params
        self._results = []
        self.tiles_written = 0

        token.raise_if_cancelled()

        sector = Sector.union_all(r.sector for r in self._rasters)
        if sector is None:
            raise InvalidInputError("No offered raster has a known geographic extent")
        params[ParamKey.SECTOR] = sector

        num_levels = self.compute_level_count(self._finest_pixel_size())
        levels_to_write = self.levels_to_write(num_levels, params)

        cache_dir = self.cache_directory()
        if cache_dir is None:
            raise MissingParameterError(ParamKey.DATA_CACHE_NAME.value)
        cache_dir.mkdir(parents=True, exist_ok=True)

        logger.info(
            f"Producing {dataset_name}: {len(self._rasters)} source(s), "
            f"{num_levels} level(s), writing {levels_to_write}"
        )

        tiles = list(self.iter_tiles(sector, levels_to_write))
        tracker = ProgressTracker(
            dataset_name=dataset_name,
            total=len(tiles),
            report_callback=self.progress_callback,
        )
        for index, (level, row, col, tile_sector) in enumerate(tiles, start=1):
            token.raise_if_cancelled()
            path = cache_dir / str(level) / str(row) / f"{row}_{col}{self.format_suffix}"
            if self.tile_writer.write_tile(
                self._rasters, tile_sector, self.tile_size, path, self.tile_driver, self.tile_nodata
            ):
                self.tiles_written += 1
            tracker.update(current=index, message=f"Level {level}")
        tracker.complete()

        token.raise_if_cancelled()

        document = self.build_config_document(params, num_levels)
        self.config_path = save_document(document, cache_dir / f"{dataset_name}.xml")
        self._results.append(document)

        logger.info(f"Production complete: {self.tiles_written} tile(s), config {self.config_path}")

    def remove_production_state(self) -> None:
        self._results = []
        self.config_path = None
        cache_dir = self.cache_directory()
        if cache_dir is None or not cache_dir.exists():
            return
        shutil.rmtree(cache_dir)
        logger.info(f"Removed production state: {cache_dir}")

    # =========================================================================
    # LEVEL SET
    # =========================================================================

    def _finest_pixel_size(self) -> Optional[float]:
        sizes = [
            r.params.get(PIXEL_SIZE_DEGREES)
            for r in self._rasters
            if r.params is not None and r.params.get(PIXEL_SIZE_DEGREES)
        ]
        return min(sizes) if sizes else None

    def compute_level_count(self, pixel_size: Optional[float]) -> int:
        """Levels needed for the finest level to match pixel_size."""
        if not pixel_size or pixel_size <= 0:
            return 1
        finest_tile_delta = self.tile_size * pixel_size
        count = math.ceil(math.log2(self.level_zero_delta / finest_tile_delta)) + 1
        return max(1, min(count, self.tiling.max_levels))

    def levels_to_write(self, num_levels: int, params: ProductionParameters) -> int:
        """
        Apply the max-level limit.

        unset → all levels; "0" or "auto" → auto_level_count; N → first N
        """
        if not params.has_key(ParamKey.TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL):
            return num_levels

        limit = str(params.get(ParamKey.TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL)).strip().lower()
        if limit in ("", "0", "auto"):
            return min(num_levels, self.tiling.auto_level_count)
        try:
            requested = int(limit)
        except ValueError:
            logger.warning(f"Invalid max level limit '{limit}', using auto")
            return min(num_levels, self.tiling.auto_level_count)
        if requested < 0:
            return min(num_levels, self.tiling.auto_level_count)
        return min(num_levels, requested)

    def iter_tiles(self, sector: Sector, levels: int) -> Iterator[TileSpec]:
        """Tiles intersecting sector for levels 0..levels-1."""
        for level in range(levels):
            delta = self.level_zero_delta / (2 ** level)
            first_row = int(math.floor((sector.min_latitude + 90.0) / delta))
            last_row = max(first_row, int(math.ceil((sector.max_latitude + 90.0) / delta)) - 1)
            first_col = int(math.floor((sector.min_longitude + 180.0) / delta))
            last_col = max(first_col, int(math.ceil((sector.max_longitude + 180.0) / delta)) - 1)

            for row in range(first_row, last_row + 1):
                for col in range(first_col, last_col + 1):
                    min_lat = -90.0 + row * delta
                    min_lon = -180.0 + col * delta
                    tile_sector = Sector.from_degrees(
                        max(-90.0, min_lat),
                        min(90.0, min_lat + delta),
                        max(-180.0, min_lon),
                        min(180.0, min_lon + delta),
                    )
                    yield level, row, col, tile_sector

    # =========================================================================
    # CONFIGURATION DOCUMENT
    # =========================================================================

    def build_config_document(self, params: ProductionParameters, num_levels: int) -> ET.Element:
        root = self._create_root()

        append_element(root, "DisplayName", params.get_string(ParamKey.DISPLAY_NAME))
        append_element(root, "DatasetName", params.get_string(ParamKey.DATASET_NAME))
        append_element(root, "DataCacheName", params.get_string(ParamKey.DATA_CACHE_NAME))

        service_name = params.get_string(ParamKey.SERVICE_NAME)
        if service_name == SERVICE_NAME_LOCAL_RASTER_SERVER:
            append_element(root, "Service", serviceName=service_name)

        self._append_format(root)

        append_element(root, "FormatSuffix", self.format_suffix)
        append_element(root, "NumLevels", count=num_levels, numEmpty=0)

        origin = append_element(root, "TileOrigin")
        append_element(origin, "LatLon", latitude="-90.0", longitude="-180.0", units="degrees")

        lz = append_element(root, "LevelZeroTileDelta")
        append_element(
            lz, "LatLon",
            latitude=format_degrees(self.level_zero_delta),
            longitude=format_degrees(self.level_zero_delta),
            units="degrees",
        )

        size = append_element(root, "TileSize")
        append_element(size, "Dimension", width=self.tile_size, height=self.tile_size)

        append_sector(root, "Sector", params.require_sector())
        return root

    def _create_root(self) -> ET.Element:
        return ET.Element(self.config_type.value, {"version": "1"})

    def _append_format(self, root: ET.Element) -> None:
        raise NotImplementedError


# ============================================================================
# CONCRETE STRATEGIES
# ============================================================================

@register_producer(PixelKind.IMAGE, description="Tiled image pyramid")
class TiledImageProducer(TiledRasterProducer):
    """Produces a tiled image layer."""

    pixel_kind = PixelKind.IMAGE
    config_type = ConfigType.LAYER

    @property
    def tile_size(self) -> int:
        return self.tiling.image_tile_size

    @property
    def level_zero_delta(self) -> float:
        return self.tiling.image_level_zero_delta

    @property
    def format_suffix(self) -> str:
        return self.tiling.image_suffix

    @property
    def tile_driver(self) -> str:
        return self.tiling.image_driver

    def _create_root(self) -> ET.Element:
        return ET.Element("Layer", {"version": "1", "layerType": "TiledImageLayer"})

    def _append_format(self, root: ET.Element) -> None:
        append_element(root, "ImageFormat", self.tiling.image_format)
        formats = append_element(root, "AvailableImageFormats")
        append_element(formats, "ImageFormat", self.tiling.image_format)


@register_producer(PixelKind.ELEVATION, description="Tiled elevation pyramid")
class TiledElevationProducer(TiledRasterProducer):
    """Produces a tiled elevation model."""

    pixel_kind = PixelKind.ELEVATION
    config_type = ConfigType.ELEVATION_MODEL

    @property
    def tile_size(self) -> int:
        return self.tiling.elevation_tile_size

    @property
    def level_zero_delta(self) -> float:
        return self.tiling.elevation_level_zero_delta

    @property
    def format_suffix(self) -> str:
        return self.tiling.elevation_suffix

    @property
    def tile_driver(self) -> str:
        return self.tiling.elevation_driver

    @property
    def tile_nodata(self):
        return ELEVATION_MISSING_DATA

    def _data_type(self) -> str:
        dtypes = {r.params.get(DTYPE) for r in self._rasters if r.params is not None}
        if dtypes and dtypes <= {"int16", "uint8"}:
            return "Int16"
        return "Float32"

    def _append_format(self, root: ET.Element) -> None:
        append_element(root, "ImageFormat", self.tiling.elevation_format)
        append_element(root, "DataType", type=self._data_type(), byteOrder="LittleEndian")
        append_element(root, "MissingData", signal=format_degrees(ELEVATION_MISSING_DATA))


__all__ = [
    "TiledRasterProducer",
    "TiledImageProducer",
    "TiledElevationProducer",
    "ELEVATION_MISSING_DATA",
]
