# ============================================================================
# CLASSIFIER AND RECONCILER TESTS
# ============================================================================
# STATUS: Tests - Raster classification and pixel kind reconciliation
# PURPOSE: Verify tolerant classification and strict reconciliation
# CREATED: 18 OCT 2026
# ============================================================================
"""
Classifier and Reconciler Tests

Covers:
1. is_data_raster() never raises for bad files
2. determine_common_pixel_kind() on uniform, mixed and empty sets
3. Producer selection from a file set
4. RasterioRasterReader detection on real GeoTIFFs

Run with:
    pytest tests/test_classifier.py -v
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from core.contracts import ParamKey, PixelKind
from core.errors import InvalidInputError
from core.models import FileSet, ProductionParameters, Sector
from infrastructure.readers import (
    BAND_COUNT,
    PIXEL_SIZE_DEGREES,
    RasterioRasterReader,
    RasterReaderFactory,
)
from producers import TiledElevationProducer, TiledImageProducer
from services.classifier import RasterClassifier

from tests.conftest import write_geotiff


# ============================================================================
# HELPERS
# ============================================================================

def _fake_factory(kinds):
    """
    Reader factory whose reader reports kinds[path name].

    Names mapped to None have no reader; names mapped to an Exception make
    read_metadata raise it.
    """
    def find_reader_for(source, params=None):
        kind = kinds.get(Path(source).name, None)
        if kind is None:
            return None
        reader = MagicMock()

        def read_metadata(src, p):
            if isinstance(kind, Exception):
                raise kind
            p[ParamKey.PIXEL_FORMAT] = kind
            return p

        reader.read_metadata.side_effect = read_metadata
        return reader

    factory = MagicMock(spec=RasterReaderFactory)
    factory.find_reader_for.side_effect = find_reader_for
    return factory


# ============================================================================
# CLASSIFICATION
# ============================================================================

class TestIsDataRaster:
    """Tests for single-file classification."""

    def test_image(self):
        classifier = RasterClassifier(_fake_factory({"a.tif": PixelKind.IMAGE}))
        params = ProductionParameters()
        assert classifier.is_data_raster("/d/a.tif", params)
        assert params[ParamKey.PIXEL_FORMAT] == PixelKind.IMAGE

    def test_no_reader_is_false(self):
        classifier = RasterClassifier(_fake_factory({}))
        assert not classifier.is_data_raster("/d/readme.txt")

    def test_read_failure_is_false(self):
        classifier = RasterClassifier(_fake_factory({"bad.tif": IOError("truncated")}))
        assert not classifier.is_data_raster("/d/bad.tif")

    def test_known_kind_skips_read(self):
        factory = _fake_factory({"a.tif": IOError("should not be read")})
        classifier = RasterClassifier(factory)
        params = ProductionParameters({ParamKey.PIXEL_FORMAT: PixelKind.ELEVATION})
        assert classifier.is_data_raster("/d/a.tif", params)

    def test_none_source_raises(self):
        with pytest.raises(InvalidInputError):
            RasterClassifier(_fake_factory({})).is_data_raster(None)

    def test_classify_descriptor(self):
        classifier = RasterClassifier(_fake_factory({"a.hgt": PixelKind.ELEVATION}))
        descriptor = classifier.classify("/d/a.hgt")
        assert descriptor.is_raster
        assert descriptor.pixel_kind == PixelKind.ELEVATION
        assert descriptor.path == Path("/d/a.hgt")


# ============================================================================
# RECONCILIATION
# ============================================================================

class TestDetermineCommonPixelKind:
    """Tests for pixel kind reconciliation."""

    def test_uniform_image_set(self):
        classifier = RasterClassifier(_fake_factory({
            "a.tif": PixelKind.IMAGE,
            "b.tif": PixelKind.IMAGE,
        }))
        kind = classifier.determine_common_pixel_kind(FileSet.of("/d/a.tif", "/d/b.tif"))
        assert kind == PixelKind.IMAGE

    def test_non_rasters_skipped(self):
        classifier = RasterClassifier(_fake_factory({"a.hgt": PixelKind.ELEVATION}))
        kind = classifier.determine_common_pixel_kind(
            FileSet.of("/d/readme.txt", "/d/a.hgt", "/d/a.aux.xml")
        )
        assert kind == PixelKind.ELEVATION

    def test_mixed_set_names_offending_file(self):
        classifier = RasterClassifier(_fake_factory({
            "a.tif": PixelKind.IMAGE,
            "b.hgt": PixelKind.ELEVATION,
        }))
        with pytest.raises(InvalidInputError) as exc_info:
            classifier.determine_common_pixel_kind(FileSet.of("/d/a.tif", "/d/b.hgt"))
        assert "b.hgt" in str(exc_info.value)
        assert exc_info.value.path == "/d/b.hgt"

    def test_unknown_kind_raises(self):
        classifier = RasterClassifier(_fake_factory({"odd.tif": PixelKind.UNKNOWN}))
        with pytest.raises(InvalidInputError) as exc_info:
            classifier.determine_common_pixel_kind(FileSet.of("/d/odd.tif"))
        assert "odd.tif" in str(exc_info.value)

    def test_empty_set_raises(self):
        classifier = RasterClassifier(_fake_factory({}))
        with pytest.raises(InvalidInputError):
            classifier.determine_common_pixel_kind(FileSet())
        with pytest.raises(InvalidInputError):
            classifier.determine_common_pixel_kind(None)

    def test_no_rasters_raises(self):
        classifier = RasterClassifier(_fake_factory({}))
        with pytest.raises(InvalidInputError):
            classifier.determine_common_pixel_kind(FileSet.of("/d/readme.txt"))


# ============================================================================
# PRODUCER SELECTION
# ============================================================================

class TestCreateProducerFromFiles:
    """Tests for reconcile + select."""

    def test_image_producer(self):
        classifier = RasterClassifier(_fake_factory({"a.tif": PixelKind.IMAGE}))
        producer = classifier.create_producer_from_files(FileSet.of("/d/a.tif"))
        assert isinstance(producer, TiledImageProducer)

    def test_elevation_producer(self):
        classifier = RasterClassifier(_fake_factory({"a.hgt": PixelKind.ELEVATION}))
        producer = classifier.create_producer_from_files(FileSet.of("/d/a.hgt"))
        assert isinstance(producer, TiledElevationProducer)

    def test_empty_set_fails_before_reading(self):
        factory = _fake_factory({})
        with pytest.raises(InvalidInputError):
            RasterClassifier(factory).create_producer_from_files(FileSet())
        factory.find_reader_for.assert_not_called()


# ============================================================================
# RASTERIO READER
# ============================================================================

class TestRasterioRasterReader:
    """Tests against real GeoTIFFs."""

    def test_rgb_is_image(self, image_tif):
        params = RasterioRasterReader().read_metadata(image_tif, {})
        assert params[ParamKey.PIXEL_FORMAT] == PixelKind.IMAGE
        assert params[BAND_COUNT] == 3
        sector = params[ParamKey.SECTOR]
        assert sector == Sector.from_degrees(40.0, 41.0, -106.0, -105.0)
        assert params[PIXEL_SIZE_DEGREES] == pytest.approx(1.0 / 64)

    def test_single_band_int16_is_elevation(self, elevation_tif):
        params = RasterioRasterReader().read_metadata(elevation_tif, {})
        assert params[ParamKey.PIXEL_FORMAT] == PixelKind.ELEVATION

    def test_two_band_float_is_unknown(self, tmp_path):
        path = write_geotiff(tmp_path / "two.tif", count=2, dtype="float32", fill=1.0)
        params = RasterioRasterReader().read_metadata(path, {})
        assert params[ParamKey.PIXEL_FORMAT] == PixelKind.UNKNOWN

    def test_projected_bounds_transformed(self, tmp_path):
        path = write_geotiff(
            tmp_path / "utm.tif",
            bounds=(500000.0, 4400000.0, 510000.0, 4410000.0),
            crs="EPSG:32613",
        )
        sector = RasterioRasterReader().read_metadata(path, {})[ParamKey.SECTOR]
        assert 39.0 < sector.min_latitude < sector.max_latitude < 41.0
        assert -106.0 < sector.min_longitude < sector.max_longitude < -104.0

    def test_no_crs_no_sector(self, tmp_path):
        path = write_geotiff(tmp_path / "plain.tif", crs=None)
        params = RasterioRasterReader().read_metadata(path, {})
        assert ParamKey.SECTOR not in params

    def test_can_read_requires_existing_raster_suffix(self, tmp_path, image_tif):
        reader = RasterioRasterReader()
        assert reader.can_read(image_tif)
        assert not reader.can_read(tmp_path / "missing.tif")
        (tmp_path / "notes.txt").write_text("hello")
        assert not reader.can_read(tmp_path / "notes.txt")

    def test_classifier_on_real_files(self, tmp_path, image_tif, elevation_tif):
        (tmp_path / "readme.txt").write_text("sidecar")
        classifier = RasterClassifier(RasterReaderFactory.default())

        assert classifier.determine_common_pixel_kind(
            FileSet.of(image_tif, tmp_path / "readme.txt")
        ) == PixelKind.IMAGE
        with pytest.raises(InvalidInputError):
            classifier.determine_common_pixel_kind(FileSet.of(image_tif, elevation_tif))

    def test_factory_register_first(self):
        factory = RasterReaderFactory.default()
        custom = MagicMock()
        custom.name = "custom"
        custom.can_read.return_value = True
        factory.register(custom)
        assert factory.find_reader_for("/d/anything.xyz") is custom

    def test_factory_swallows_can_read_errors(self):
        broken = MagicMock()
        broken.name = "broken"
        broken.can_read.side_effect = RuntimeError("boom")
        assert RasterReaderFactory([broken]).find_reader_for("/d/a.tif") is None
