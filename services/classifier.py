# ============================================================================
# RASTER CLASSIFIER AND FORMAT RECONCILER
# ============================================================================
# STATUS: Service - Source classification
# PURPOSE: Decide which files are rasters and which pixel kind a set shares
# CREATED: 18 OCT 2026
# ============================================================================
"""
Raster Classifier and Format Reconciler

Classification is tolerant: a file no reader recognizes, or whose header
cannot be read, is simply not a data raster. Nothing here raises for a
bad file.

Reconciliation is strict: every raster in a set must share one pixel
kind, and the first file that breaks that rule fails the whole set with
a message naming it. Non-raster files (world files, readmes, .aux.xml
sidecars) are skipped.

Usage:
    classifier = RasterClassifier()
    kind = classifier.determine_common_pixel_kind(file_set)
    producer = classifier.create_producer_from_files(file_set)
"""

from pathlib import Path
from typing import Any, Optional, Union

from core.contracts import ParamKey, PixelKind
from core.errors import InvalidInputError
from core.logging import ComponentType, get_logger
from core.models import FileSet, ProductionParameters, RasterDescriptor
from infrastructure.readers import RasterReaderFactory
from producers import DataStoreProducer, create_producer

logger = get_logger(__name__, ComponentType.CLASSIFIER)


class RasterClassifier:
    """Classifies files through a RasterReaderFactory."""

    def __init__(self, reader_factory: Optional[RasterReaderFactory] = None):
        self.reader_factory = reader_factory or RasterReaderFactory.default()

    # =========================================================================
    # CLASSIFICATION
    # =========================================================================

    def is_data_raster(self, source: Any, params: Optional[ProductionParameters] = None) -> bool:
        """
        True if a reader recognizes source as image or elevation data.

        params is filled with whatever the reader learned (pixel kind,
        sector, size) so callers can reuse it.

        Raises:
            InvalidInputError: source is None
        """
        if source is None:
            message = "Source is None"
            logger.error(message)
            raise InvalidInputError(message)

        params = params if params is not None else ProductionParameters()
        reader = self.reader_factory.find_reader_for(source, params)
        if reader is None:
            return False

        if ParamKey.PIXEL_FORMAT not in params:
            try:
                reader.read_metadata(source, params)
            except Exception as e:
                logger.debug(f"Exception while reading {source}: {e}")

        return PixelKind.parse(params.get(ParamKey.PIXEL_FORMAT)).is_known()

    def classify(self, path: Union[str, Path]) -> RasterDescriptor:
        """Describe a single file."""
        params = ProductionParameters()
        is_raster = self.is_data_raster(path, params)
        return RasterDescriptor(
            path=Path(path),
            is_raster=is_raster,
            pixel_kind=PixelKind.parse(params.get(ParamKey.PIXEL_FORMAT)),
            sector=params.get(ParamKey.SECTOR),
            attributes={k: v for k, v in params.items() if not isinstance(k, ParamKey)},
        )

    # =========================================================================
    # RECONCILIATION
    # =========================================================================

    def determine_common_pixel_kind(self, file_set: Optional[FileSet]) -> PixelKind:
        """
        The pixel kind shared by every raster in the set.

        Raises:
            InvalidInputError: empty set, a raster with no kind, mixed
                kinds, or no raster at all
        """
        if file_set is None or file_set.is_empty:
            message = "File set is empty"
            logger.error(message)
            raise InvalidInputError(message)

        common: Optional[PixelKind] = None
        for path in file_set.files:
            params = ProductionParameters()
            reader = self.reader_factory.find_reader_for(path, params)
            if reader is None:
                logger.debug(f"Skipping non-raster file: {path}")
                continue

            if ParamKey.PIXEL_FORMAT not in params:
                try:
                    reader.read_metadata(path, params)
                except Exception as e:
                    logger.debug(f"Exception while reading {path}: {e}")

            kind = PixelKind.parse(params.get(ParamKey.PIXEL_FORMAT))
            if not kind.is_known():
                message = f"Unrecognized source type: {path.absolute()}"
                logger.error(message)
                raise InvalidInputError(message, path=str(path))

            if common is None:
                common = kind
            elif kind != common:
                message = (
                    f"Incompatible raster {path.absolute()}: "
                    f"unexpected raster type {kind.value}, expected {common.value}"
                )
                logger.error(message)
                raise InvalidInputError(message, path=str(path))

        if common is None:
            message = f"No recognized rasters among {len(file_set)} file(s)"
            logger.error(message)
            raise InvalidInputError(message)

        logger.debug(f"Common pixel kind for {len(file_set)} file(s): {common.value}")
        return common

    def create_producer_from_files(self, file_set: Optional[FileSet], **producer_kwargs) -> DataStoreProducer:
        """Reconcile the set and instantiate the matching producer."""
        if file_set is None or file_set.is_empty:
            message = "File set is empty"
            logger.error(message)
            raise InvalidInputError(message)

        kind = self.determine_common_pixel_kind(file_set)
        producer_kwargs.setdefault("reader_factory", self.reader_factory)
        return create_producer(kind, **producer_kwargs)


__all__ = [
    "RasterClassifier",
]
