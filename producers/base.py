# ============================================================================
# DATA STORE PRODUCER INTERFACE
# ============================================================================
# STATUS: Core - Producer backend contract
# PURPOSE: Offer / produce / rollback interface driven by the coordinator
# CREATED: 18 OCT 2026
# ============================================================================
"""
Data Store Producer

A producer converts offered source files into an installed data store
(a tile cache plus its configuration document). The production
coordinator drives every producer through the same calls:

    producer.set_store_parameters(params)
    for path in files:
        producer.offer_data_source(path)
    producer.start_production(cancel_token)
    producer.production_results        # [configuration Element]
    producer.remove_production_state() # rollback, idempotent

start_production() raises ProductionCancelledError when it observes a
cancelled token, and any other exception on failure. It never rolls back
by itself; rollback is the coordinator's job.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, List, Optional, Union

from core.contracts import ParamKey, PixelKind
from core.models import DataRaster, ProductionParameters
from worker.cancellation import CancellationToken

PathLike = Union[str, Path]


class DataStoreProducer(ABC):
    """Base class for production strategies."""

    #: Pixel kind this producer installs
    pixel_kind: PixelKind = PixelKind.UNKNOWN

    def __init__(self):
        self._store_params = ProductionParameters()
        self._production_params: Optional[ProductionParameters] = None
        self._results: List[Any] = []

    # =========================================================================
    # PARAMETERS
    # =========================================================================

    def set_store_parameters(self, params: ProductionParameters) -> None:
        """Replace the store parameters for the next production run."""
        self._store_params = ProductionParameters(params or {})

    @property
    def store_parameters(self) -> ProductionParameters:
        return self._store_params

    @property
    def production_parameters(self) -> Optional[ProductionParameters]:
        """
        Parameters of the last production run.

        Store parameters plus values computed during production (sector,
        display name). None until production starts.
        """
        return self._production_params

    @property
    def dataset_name(self) -> Optional[str]:
        params = self._production_params or self._store_params
        return params.get_string(ParamKey.DATASET_NAME)

    # =========================================================================
    # PRODUCTION
    # =========================================================================

    @abstractmethod
    def offer_data_source(self, source: PathLike, params: Optional[ProductionParameters] = None) -> None:
        """Register one source file. Raises InvalidInputError if unusable."""

    @abstractmethod
    def start_production(self, cancel_token: Optional[CancellationToken] = None) -> None:
        """Convert the offered sources. Long-running."""

    @abstractmethod
    def remove_production_state(self) -> None:
        """Discard on-disk state from production. Safe to call repeatedly."""

    @property
    def production_results(self) -> List[Any]:
        return list(self._results)

    @property
    def data_rasters(self) -> List[DataRaster]:
        """Rasters registered through offer_data_source()."""
        return []


__all__ = [
    "DataStoreProducer",
]
