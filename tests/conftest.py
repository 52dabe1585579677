# ============================================================================
# SHARED TEST FIXTURES
# ============================================================================
# STATUS: Tests - Shared fixtures
# PURPOSE: Raster files written with rasterio and fake collaborators
# CREATED: 18 OCT 2026
# ============================================================================

from pathlib import Path
from typing import List, Optional

import numpy as np
import pytest
import rasterio
from rasterio.transform import from_bounds

from core.config import reset_defaults
from core.models import Sector
from producers import TileWriter


def write_geotiff(
    path: Path,
    bounds=(-106.0, 40.0, -105.0, 41.0),
    width: int = 64,
    height: int = 64,
    count: int = 3,
    dtype: str = "uint8",
    crs: Optional[str] = "EPSG:4326",
    fill=100,
) -> Path:
    """Write a small GeoTIFF covering bounds (west, south, east, north)."""
    profile = {
        "driver": "GTiff",
        "width": width,
        "height": height,
        "count": count,
        "dtype": dtype,
        "transform": from_bounds(*bounds, width, height),
    }
    if crs is not None:
        profile["crs"] = crs
    with rasterio.open(path, "w", **profile) as dst:
        dst.write(np.full((count, height, width), fill, dtype=dtype))
    return path


class RecordingTileWriter(TileWriter):
    """TileWriter that records calls and touches the tile path."""

    def __init__(self, cancel_after: Optional[int] = None, token=None):
        self.calls: List[tuple] = []
        self._cancel_after = cancel_after
        self._token = token

    def write_tile(self, rasters, sector: Sector, tile_size, path, driver, nodata=None) -> bool:
        self.calls.append((sector, tile_size, Path(path), driver))
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"tile")
        if self._cancel_after is not None and len(self.calls) >= self._cancel_after:
            self._token.cancel("Cancelled in test")
        return True


@pytest.fixture(autouse=True)
def _reset_defaults():
    reset_defaults()
    yield
    reset_defaults()


@pytest.fixture
def image_tif(tmp_path):
    return write_geotiff(tmp_path / "Imagery_2010_Tile_A.tif")


@pytest.fixture
def image_tif_b(tmp_path):
    return write_geotiff(
        tmp_path / "Imagery_2010_Tile_B.tif",
        bounds=(-105.0, 40.0, -104.0, 41.0),
    )


@pytest.fixture
def elevation_tif(tmp_path):
    return write_geotiff(
        tmp_path / "n40w106_dem.tif",
        count=1,
        dtype="int16",
        fill=1600,
    )


@pytest.fixture
def store_dir(tmp_path):
    directory = tmp_path / "store"
    directory.mkdir()
    return directory
