# ============================================================================
# RASTER SERVER CONFIG EMITTER
# ============================================================================
# STATUS: Service - On-demand serving sidecar
# PURPOSE: Write <dataset>.RasterServer.xml next to an installed tile cache
# CREATED: 18 OCT 2026
# ============================================================================
"""
Raster Server Config Emitter

In on-demand mode the producer writes only the coarse levels. The
sidecar written here lists the original source files so the runtime can
synthesize finer tiles itself.

Rules:
- No LocalRasterServer marker in the production parameters → nothing
  is written (full-pyramid installs never get a sidecar).
- Cache name, dataset name and sector are required. Missing any of them
  raises MissingParameterError.
- A raster that is not a CachedDataRaster raises UnsupportedSourceError.
- A cached raster whose source cannot be resolved to a local file is
  logged at WARNING and left out. One bad source does not abort the
  dataset.
"""

from pathlib import Path
from typing import List, Optional, Union

from core.contracts import ParamKey, SERVICE_NAME_LOCAL_RASTER_SERVER
from core.errors import MissingParameterError, SkippableSourceError, UnsupportedSourceError
from core.logging import ComponentType, get_logger
from core.models import (
    CachedDataRaster,
    DataRaster,
    ProductionParameters,
    RasterServerConfig,
    RasterServerProperty,
    RasterServerSource,
    Sector,
    raster_server_config_path,
)
from producers import DataStoreProducer

logger = get_logger(__name__, ComponentType.EMITTER)

# Parameters copied into <Property> elements
PROPERTY_KEYS = (
    ParamKey.DATA_CACHE_NAME,
    ParamKey.DATASET_NAME,
    ParamKey.DISPLAY_NAME,
)


def _require(params: ProductionParameters, key: ParamKey):
    if not params.has_key(key):
        message = f"Missing required parameter: {key.value}"
        logger.error(message)
        raise MissingParameterError(key.value)
    return params[key]


def build_source(raster: CachedDataRaster) -> RasterServerSource:
    """
    Source entry for one cached raster.

    Raises:
        SkippableSourceError: empty source, non-local source, or no params
    """
    if raster.source is None or str(raster.source).strip() == "":
        raise SkippableSourceError("Data source is None")

    local_file = raster.local_file()
    if local_file is None:
        raise SkippableSourceError(f"Unrecognized data source: {raster.source}")

    if raster.params is None:
        raise SkippableSourceError(f"Params are None for data source: {raster.source}")

    sector = raster.sector
    if sector is None:
        value = raster.params.get(ParamKey.SECTOR)
        if isinstance(value, Sector):
            sector = value

    return RasterServerSource(path=str(local_file), type="file", sector=sector)


def build_sources(rasters: List[DataRaster]) -> List[RasterServerSource]:
    sources = []
    for raster in rasters:
        if not isinstance(raster, CachedDataRaster):
            message = (
                f"Unrecognized raster type {type(raster).__name__} "
                f"for dataset {raster.dataset_name}"
            )
            logger.error(message)
            raise UnsupportedSourceError(message)
        try:
            sources.append(build_source(raster))
        except SkippableSourceError as e:
            logger.warning(f"Skipping raster server source: {e}")
    return sources


def build_properties(params: ProductionParameters) -> List[RasterServerProperty]:
    """Property entries for the whitelisted keys, skipping empty values."""
    properties = []
    for key in PROPERTY_KEYS:
        if key not in params:
            continue
        value = params[key]
        if value is None or not str(value).strip():
            continue
        properties.append(RasterServerProperty(name=key.value, value=str(value)))
    return properties


def create_raster_server_config(
    install_location: Union[str, Path],
    producer: Optional[DataStoreProducer],
) -> Optional[Path]:
    """
    Write the RasterServer sidecar for a finished production.

    Args:
        install_location: Directory the dataset was installed into
        producer: Producer of the finished run

    Returns:
        Path of the written document, or None when not required

    Raises:
        MissingParameterError: cache name, dataset name or sector missing
        UnsupportedSourceError: a raster is not locally cached
    """
    params = None
    if producer is not None:
        params = producer.production_parameters
    if params is None:
        params = ProductionParameters()

    if params.get(ParamKey.SERVICE_NAME) != SERVICE_NAME_LOCAL_RASTER_SERVER:
        logger.debug("RasterServer document not required")
        return None

    cache_name = _require(params, ParamKey.DATA_CACHE_NAME)
    dataset_name = _require(params, ParamKey.DATASET_NAME)

    if params.is_empty(ParamKey.DISPLAY_NAME):
        params[ParamKey.DISPLAY_NAME] = dataset_name

    sector = params.get(ParamKey.SECTOR)
    if not isinstance(sector, Sector):
        message = f"Missing required parameter: {ParamKey.SECTOR.value}"
        logger.error(message)
        raise MissingParameterError(ParamKey.SECTOR.value)

    path = raster_server_config_path(install_location, str(cache_name), str(dataset_name))

    config = RasterServerConfig(
        sector=sector,
        sources=build_sources(producer.data_rasters),
        properties=build_properties(params),
    )
    config.write(path)

    logger.info(f"Wrote RasterServer document with {len(config.sources)} source(s): {path}")
    return path


__all__ = [
    "create_raster_server_config",
    "build_source",
    "build_sources",
    "build_properties",
    "PROPERTY_KEYS",
]
