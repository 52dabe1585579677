# ============================================================================
# PRODUCTION MODELS
# ============================================================================
# STATUS: Core model - Production run data
# PURPOSE: Production parameters, registered rasters and run results
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: ProductionParameters, RasterDescriptor, DataRaster,
#          CachedDataRaster, ProductionResult
# DEPENDENCIES: dataclasses
# ============================================================================
"""
Production Models

Runtime (not persisted) data exchanged between the classifier, the
producers and the production coordinator.

ProductionParameters is a plain dict keyed by ParamKey so producers,
emitters and the scene binder can share one mapping without a schema
change every time a setting is added.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from xml.etree.ElementTree import Element

from core.contracts import ParamKey, PixelKind, ProductionState
from core.errors import MissingParameterError
from core.models.sector import Sector


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


class ProductionParameters(dict):
    """
    Named settings that configure one production run.

    Keys are ParamKey members; values are whatever the setting needs
    (strings for names, Sector for the extent, bool for flags).
    """

    def has_key(self, key: ParamKey) -> bool:
        return key in self

    def is_empty(self, key: ParamKey) -> bool:
        return _is_empty(self.get(key))

    def get_string(self, key: ParamKey, default: Optional[str] = None) -> Optional[str]:
        value = self.get(key)
        if _is_empty(value):
            return default
        return str(value)

    def require(self, key: ParamKey) -> Any:
        """Return the value for key, raising MissingParameterError if unset."""
        if key not in self or self[key] is None:
            raise MissingParameterError(key.value)
        return self[key]

    def require_sector(self) -> Sector:
        value = self.get(ParamKey.SECTOR)
        if not isinstance(value, Sector):
            raise MissingParameterError(ParamKey.SECTOR.value)
        return value

    def copy_values(
        self,
        target: "ProductionParameters",
        keys: Iterable[ParamKey],
        overwrite: bool = False,
    ) -> "ProductionParameters":
        """Copy the listed keys into target, skipping unset ones."""
        for key in keys:
            if key not in self:
                continue
            if not overwrite and key in target:
                continue
            target[key] = self[key]
        return target


@dataclass
class RasterDescriptor:
    """Per-file metadata produced by the classifier."""
    path: Path
    is_raster: bool
    pixel_kind: PixelKind = PixelKind.UNKNOWN
    sector: Optional[Sector] = None
    attributes: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DataRaster:
    """A raster registered with a producer."""
    source: Any
    params: Optional[ProductionParameters] = None
    sector: Optional[Sector] = None

    @property
    def dataset_name(self) -> Optional[str]:
        if self.params is None:
            return None
        return self.params.get_string(ParamKey.DATASET_NAME)


@dataclass
class CachedDataRaster(DataRaster):
    """
    A raster backed by a locally addressable source file.

    Only cached rasters can be listed as RasterServer sources.
    """

    def local_file(self) -> Optional[Path]:
        """Resolve the source to a local file path, or None."""
        source = self.source
        if _is_empty(source):
            return None
        if isinstance(source, Path):
            return source.absolute()
        if isinstance(source, str):
            if source.startswith("file://"):
                return Path(source[len("file://"):]).absolute()
            if "://" in source:
                return None
            return Path(source).absolute()
        return None


@dataclass
class ProductionResult:
    """
    Outcome of a production run.

    document is None when the run was cancelled or the producer reported
    success without a configuration document.
    """
    document: Optional[Element] = None
    state: ProductionState = ProductionState.IDLE
    config_path: Optional[Path] = None
    data_rasters: List[DataRaster] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.state == ProductionState.CANCELLED
