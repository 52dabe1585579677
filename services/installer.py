# ============================================================================
# DATA INSTALLER
# ============================================================================
# STATUS: Service - Installation pipeline entry point
# PURPOSE: Files in, installed dataset (tile cache + config documents) out
# CREATED: 18 OCT 2026
# ============================================================================
"""
Data Installer

Runs the whole pipeline for one file set:

    classify/reconcile → select producer → resolve install location
      → suggest (and optionally confirm) a name → produce
      → write RasterServer sidecar → configuration document

Outcomes:
- Success: the data configuration document (Layer / ElevationModel)
- Cancelled (token, or name_provider returned None): None, nothing left
  on disk
- Failure: the exception propagates after rollback

Usage:
    installer = DataInstaller(file_store=BasicFileStore.for_directory("/data/ww"))
    document = installer.install_data_from_files(FileSet.of("/imagery/a.tif"))

    report = installer.install(file_set, cancel_token=token)
    print(report.to_dict())
"""

import asyncio
import functools
import time
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Optional
from xml.etree.ElementTree import Element

from core.config import InstallerConfig, TilingDefaults, get_defaults
from core.contracts import PixelKind, ProductionState
from core.errors import InvalidInputError
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models import FileSet
from infrastructure.file_store import BasicFileStore, FileStore
from infrastructure.readers import RasterReaderFactory
from producers import TileWriter
from services.classifier import RasterClassifier
from services.install_location import resolve_install_location
from services.naming import sanitize_dataset_name, suggest_dataset_name, validate_dataset_name
from services.production import ProductionCoordinator
from services.raster_server import create_raster_server_config
from worker.cancellation import CancellationToken
from worker.progress import ProgressCallback

logger = get_logger(__name__, ComponentType.COORDINATOR)

# Receives the suggested name; returns the name to use, or None to cancel
NameProvider = Callable[[Optional[str]], Optional[str]]


@dataclass
class InstallReport:
    """Outcome of one installation."""
    install_id: str
    state: ProductionState = ProductionState.IDLE
    dataset_name: Optional[str] = None
    pixel_kind: Optional[PixelKind] = None
    install_location: Optional[Path] = None
    config_path: Optional[Path] = None
    raster_server_path: Optional[Path] = None
    source_count: int = 0
    duration_ms: int = 0
    error: Optional[str] = None
    document: Optional[Element] = field(default=None, repr=False)

    @property
    def succeeded(self) -> bool:
        return self.state == ProductionState.COMPLETED and self.document is not None

    @property
    def cancelled(self) -> bool:
        return self.state == ProductionState.CANCELLED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "install_id": self.install_id,
            "state": self.state.value,
            "dataset_name": self.dataset_name,
            "pixel_kind": self.pixel_kind.value if self.pixel_kind else None,
            "install_location": str(self.install_location) if self.install_location else None,
            "config_path": str(self.config_path) if self.config_path else None,
            "raster_server_path": str(self.raster_server_path) if self.raster_server_path else None,
            "source_count": self.source_count,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


class DataInstaller:
    """Installs tiled image layers and elevation models from source files."""

    def __init__(
        self,
        config: Optional[InstallerConfig] = None,
        file_store: Optional[FileStore] = None,
        reader_factory: Optional[RasterReaderFactory] = None,
        tile_writer: Optional[TileWriter] = None,
        tiling: Optional[TilingDefaults] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        """
        Args:
            config: Mode switches; defaults to get_defaults().installer
            file_store: Where datasets go; defaults to BasicFileStore.from_env()
            reader_factory: Raster readers for classification and offering
            tile_writer: Tile renderer passed to the producer
            tiling: Tile layout passed to the producer
            progress_callback: Receives ProgressReport during production
        """
        defaults = get_defaults()
        self.config = config or defaults.installer
        self.file_store = file_store if file_store is not None else BasicFileStore.from_env()
        self.reader_factory = reader_factory or RasterReaderFactory.default(defaults.readers)
        self.tile_writer = tile_writer
        self.tiling = tiling or defaults.tiling
        self.progress_callback = progress_callback
        self.classifier = RasterClassifier(self.reader_factory)

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def install_data_from_files(
        self,
        file_set: FileSet,
        cancel_token: Optional[CancellationToken] = None,
        name_provider: Optional[NameProvider] = None,
    ) -> Optional[Element]:
        """
        Install a file set.

        Returns:
            The data configuration document, or None if cancelled
        """
        return self.install(file_set, cancel_token, name_provider).document

    async def install_async(
        self,
        file_set: FileSet,
        cancel_token: Optional[CancellationToken] = None,
        name_provider: Optional[NameProvider] = None,
    ) -> Optional[Element]:
        """
        install_data_from_files() on a worker thread.

        The event loop stays free, so the caller can cancel through the
        token while production runs.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            functools.partial(self.install_data_from_files, file_set, cancel_token, name_provider),
        )

    def install(
        self,
        file_set: FileSet,
        cancel_token: Optional[CancellationToken] = None,
        name_provider: Optional[NameProvider] = None,
    ) -> InstallReport:
        """Install a file set and describe the outcome."""
        token = cancel_token or CancellationToken()
        report = InstallReport(install_id=uuid.uuid4().hex[:12])
        start_time = time.time()

        with log_context(install_id=report.install_id):
            try:
                self._install(file_set, token, name_provider, report)
            finally:
                report.duration_ms = int((time.time() - start_time) * 1000)

        logger.info(
            f"Install {report.install_id} finished: state={report.state.value}, "
            f"dataset={report.dataset_name}, duration={report.duration_ms}ms"
        )
        return report

    # =========================================================================
    # PIPELINE
    # =========================================================================

    def _install(
        self,
        file_set: FileSet,
        token: CancellationToken,
        name_provider: Optional[NameProvider],
        report: InstallReport,
    ) -> None:
        producer_kwargs: Dict[str, Any] = {
            "tiling": self.tiling,
            "progress_callback": self.progress_callback,
        }
        if self.tile_writer is not None:
            producer_kwargs["tile_writer"] = self.tile_writer

        producer = self.classifier.create_producer_from_files(file_set, **producer_kwargs)
        report.pixel_kind = producer.pixel_kind
        report.source_count = len(file_set)

        install_location = resolve_install_location(self.file_store)
        if install_location is None:
            message = "No default install location"
            logger.error(message)
            raise InvalidInputError(message)
        report.install_location = install_location

        dataset_name = suggest_dataset_name(file_set, producer.pixel_kind)
        if name_provider is not None:
            dataset_name = name_provider(dataset_name)
            if dataset_name is None:
                logger.info("Import cancelled: no dataset name given")
                report.state = ProductionState.CANCELLED
                return
        if dataset_name is None:
            raise InvalidInputError("No dataset name could be derived")
        dataset_name = validate_dataset_name(sanitize_dataset_name(dataset_name))
        report.dataset_name = dataset_name

        log_checkpoint("install_started", {
            "dataset_name": dataset_name,
            "pixel_kind": producer.pixel_kind.value,
            "files": len(file_set),
        }, logger.logger)

        coordinator = ProductionCoordinator(self.config)
        result = coordinator.run(producer, file_set, install_location, dataset_name, token)
        report.state = result.state
        report.config_path = result.config_path

        if result.document is None:
            return

        try:
            report.raster_server_path = create_raster_server_config(install_location, producer)
        except Exception:
            coordinator.rollback()
            report.state = ProductionState.ROLLED_BACK
            raise

        if token.is_cancelled:
            logger.info("Cancelled after production; removing installed data")
            coordinator.rollback()
            report.state = ProductionState.CANCELLED
            report.config_path = None
            report.raster_server_path = None
            return

        report.document = result.document
        log_checkpoint("install_completed", {
            "config_path": str(report.config_path) if report.config_path else None,
            "raster_server_path": str(report.raster_server_path) if report.raster_server_path else None,
        }, logger.logger)


__all__ = [
    "DataInstaller",
    "InstallReport",
    "NameProvider",
]
