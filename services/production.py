# ============================================================================
# PRODUCTION COORDINATOR
# ============================================================================
# STATUS: Service - Production state machine
# PURPOSE: Drive a producer through offer / produce and roll back on failure
# CREATED: 18 OCT 2026
# ============================================================================
"""
Production Coordinator

State machine for one production run:

    IDLE → PARAMETERIZED → OFFERING → PRODUCING → COMPLETED
                               │            │
                               └────────────┴──→ CANCELLED   (token observed)
                                            └──→ ROLLED_BACK (any other error)

Guarantees:
- The cancellation token is checked between file offers and once before
  production starts; the producer checks it per tile.
- Cancellation and failure both roll back before anything is returned or
  re-raised, so a partial cache never survives.
- Cancellation is a None document, not an exception. Failures re-raise.
- A producer exception raised after the token was cancelled counts as
  cancellation; producers may signal it with their own error type.

Parameter shapes (from InstallerConfig):
    on-demand (default): SERVICE_NAME=LocalRasterServer,
                         TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL=config.max_level
    full pyramid:        PRODUCER_ENABLE_FULL_PYRAMID=True, no limit
"""

from pathlib import Path
from typing import Optional, Union
from xml.etree.ElementTree import Element

from core.config import InstallerConfig, get_defaults
from core.contracts import ParamKey, ProductionState, SERVICE_NAME_LOCAL_RASTER_SERVER
from core.errors import ProductionCancelledError
from core.logging import ComponentType, get_logger, log_checkpoint, log_context
from core.models import FileSet, ProductionParameters, ProductionResult
from producers import DataStoreProducer
from worker.cancellation import CancellationToken, NeverCancelled

logger = get_logger(__name__, ComponentType.COORDINATOR)


class ProductionCoordinator:
    """Runs producers for the installer."""

    def __init__(self, config: Optional[InstallerConfig] = None):
        """
        Args:
            config: Mode switches; defaults to the environment-derived config
        """
        self.config = config or get_defaults().installer
        self.state = ProductionState.IDLE
        self._producer: Optional[DataStoreProducer] = None

    # =========================================================================
    # PARAMETERS
    # =========================================================================

    def build_parameters(
        self,
        install_location: Union[str, Path],
        dataset_name: str,
    ) -> ProductionParameters:
        """Production parameters for one run."""
        params = ProductionParameters()
        params[ParamKey.DATASET_NAME] = dataset_name
        params[ParamKey.DATA_CACHE_NAME] = dataset_name
        params[ParamKey.FILE_STORE_LOCATION] = str(Path(install_location).absolute())

        if self.config.enable_full_pyramid:
            params[ParamKey.PRODUCER_ENABLE_FULL_PYRAMID] = True
        else:
            params[ParamKey.SERVICE_NAME] = SERVICE_NAME_LOCAL_RASTER_SERVER
            params[ParamKey.TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL] = self.config.max_level or "0"

        return params

    # =========================================================================
    # RUN
    # =========================================================================

    def run(
        self,
        producer: DataStoreProducer,
        file_set: FileSet,
        install_location: Union[str, Path],
        dataset_name: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> ProductionResult:
        """
        Offer every file, produce, and collect the configuration document.

        Returns:
            ProductionResult; document is None when cancelled

        Raises:
            Whatever the producer raised, after rollback
        """
        token = cancel_token or NeverCancelled()
        self._producer = producer
        self.state = ProductionState.IDLE

        with log_context(
            dataset_name=dataset_name,
            cache_name=dataset_name,
            producer=type(producer).__name__,
        ):
            params = self.build_parameters(install_location, dataset_name)
            producer.set_store_parameters(params)
            self.state = ProductionState.PARAMETERIZED
            log_checkpoint("production_parameterized", {
                "install_location": params[ParamKey.FILE_STORE_LOCATION],
                "full_pyramid": self.config.enable_full_pyramid,
            }, logger.logger)

            try:
                with log_context(phase="offering"):
                    self.state = ProductionState.OFFERING
                    for path in file_set.files:
                        token.raise_if_cancelled()
                        producer.offer_data_source(path, None)

                token.raise_if_cancelled()

                with log_context(phase="producing"):
                    self.state = ProductionState.PRODUCING
                    producer.start_production(token)

            except ProductionCancelledError as e:
                logger.info(f"Production cancelled: {e}")
                self.rollback()
                self.state = ProductionState.CANCELLED
                log_checkpoint("production_cancelled", None, logger.logger)
                return ProductionResult(state=self.state)

            except Exception as e:
                if token.is_cancelled:
                    logger.info(f"Production stopped after cancellation: {e}")
                    self.rollback()
                    self.state = ProductionState.CANCELLED
                    log_checkpoint("production_cancelled", {"error": str(e)}, logger.logger)
                    return ProductionResult(state=self.state)

                logger.error(f"Production failed: {e}")
                self.rollback()
                self.state = ProductionState.ROLLED_BACK
                log_checkpoint("production_rolled_back", {"error": str(e)}, logger.logger)
                raise

            self.state = ProductionState.COMPLETED
            document = self._first_document(producer)
            if document is None:
                logger.warning("Production reported success but returned no configuration document")

            log_checkpoint("production_completed", {
                "has_document": document is not None,
            }, logger.logger)

            return ProductionResult(
                document=document,
                state=self.state,
                config_path=getattr(producer, "config_path", None),
                data_rasters=producer.data_rasters,
            )

    def rollback(self) -> None:
        """
        Discard the producer's on-disk state.

        Idempotent; safe after a completed run. Errors are logged so the
        original failure is the one that propagates.
        """
        if self._producer is None:
            return
        try:
            self._producer.remove_production_state()
        except Exception as e:
            logger.error(f"Rollback failed: {e}", exc_info=True)

    @staticmethod
    def _first_document(producer: DataStoreProducer) -> Optional[Element]:
        for result in producer.production_results:
            if isinstance(result, Element):
                return result
            break
        return None


__all__ = [
    "ProductionCoordinator",
]
