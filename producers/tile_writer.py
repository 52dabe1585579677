# ============================================================================
# TILE WRITER
# ============================================================================
# STATUS: Infrastructure - Tile rendering via rasterio
# PURPOSE: Mosaic source rasters into one pyramid tile and write it
# CREATED: 18 OCT 2026
# ============================================================================
"""
Tile Writer

Producers decide WHICH tiles exist and where they go; a TileWriter
renders one tile. Resampling, reprojection and mosaicking are delegated
to rasterio (WarpedVRT + rasterio.merge.merge); nothing here touches
pixels directly.

Tiles are written in geographic coordinates (EPSG:4326). Sources in
another CRS are warped on the fly through a WarpedVRT.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import ExitStack
from pathlib import Path
from typing import List

import numpy as np
import rasterio
from rasterio.merge import merge
from rasterio.vrt import WarpedVRT

from core.models import CachedDataRaster, Sector

logger = logging.getLogger(__name__)

GEOGRAPHIC_CRS = "EPSG:4326"


class TileWriter(ABC):
    """Renders a single pyramid tile."""

    @abstractmethod
    def write_tile(
        self,
        rasters: List[CachedDataRaster],
        sector: Sector,
        tile_size: int,
        path: Path,
        driver: str,
        nodata=None,
    ) -> bool:
        """
        Write the tile covering sector to path.

        Returns:
            False if nothing was written (no overlapping raster, or only nodata)
        """


class RasterioTileWriter(TileWriter):
    """TileWriter backed by rasterio.merge."""

    def write_tile(
        self,
        rasters: List[CachedDataRaster],
        sector: Sector,
        tile_size: int,
        path: Path,
        driver: str,
        nodata=None,
    ) -> bool:
        overlapping = [
            r for r in rasters
            if r.sector is not None and r.sector.intersects(sector) and r.local_file() is not None
        ]
        if not overlapping:
            return False

        res = (sector.delta_lon / tile_size, sector.delta_lat / tile_size)

        with ExitStack() as stack:
            datasets = []
            for raster in overlapping:
                src = stack.enter_context(rasterio.open(raster.local_file()))
                if src.crs is not None and not src.crs.is_geographic:
                    src = stack.enter_context(WarpedVRT(src, crs=GEOGRAPHIC_CRS))
                datasets.append(src)

            data, transform = merge(
                datasets,
                bounds=sector.to_bounds(),
                res=res,
                nodata=nodata,
            )

        if nodata is not None and np.all(data == nodata):
            logger.debug(f"Skipping empty tile {path}")
            return False

        path.parent.mkdir(parents=True, exist_ok=True)
        profile = {
            "driver": driver,
            "width": data.shape[2],
            "height": data.shape[1],
            "count": data.shape[0],
            "dtype": str(data.dtype),
            "crs": GEOGRAPHIC_CRS,
            "transform": transform,
        }
        if nodata is not None:
            profile["nodata"] = nodata

        with rasterio.open(path, "w", **profile) as dst:
            dst.write(data)

        logger.debug(f"Wrote tile {path} from {len(overlapping)} source(s)")
        return True


__all__ = [
    "TileWriter",
    "RasterioTileWriter",
]
