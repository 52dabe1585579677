# ============================================================================
# PRODUCER REGISTRY
# ============================================================================
# STATUS: Core - Producer registration and lookup
# PURPOSE: Map a reconciled pixel kind to a production strategy
# CREATED: 18 OCT 2026
# ============================================================================
"""
Producer Registry

Central registry of production strategies. The installer looks up the
producer class for the pixel kind shared by a file set and instantiates
a fresh producer per installation.

Design:
- Producers are registered at import time via decorator
- Registry is a simple dict (PixelKind -> producer class)
- Fail-fast on duplicate registration
- Selection is a pure function of the kind: no side effects beyond
  constructing the producer
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Type

from core.contracts import PixelKind
from core.errors import DuplicateProducerError, InvalidInputError
from producers.base import DataStoreProducer

logger = logging.getLogger(__name__)


_producers: Dict[PixelKind, Type[DataStoreProducer]] = {}
_producer_metadata: Dict[PixelKind, Dict[str, Any]] = {}


def register_producer(
    kind: PixelKind,
    *,
    description: str = "",
) -> Callable[[Type[DataStoreProducer]], Type[DataStoreProducer]]:
    """
    Class decorator registering a producer for a pixel kind.

    Example:
        @register_producer(PixelKind.IMAGE, description="Tiled imagery")
        class TiledImageProducer(TiledRasterProducer):
            ...
    """
    def decorator(cls: Type[DataStoreProducer]) -> Type[DataStoreProducer]:
        if kind in _producers:
            raise DuplicateProducerError(kind.value)

        _producers[kind] = cls
        _producer_metadata[kind] = {
            "kind": kind.value,
            "description": description,
            "class": cls.__name__,
            "module": cls.__module__,
            "registered_at": datetime.now(timezone.utc).isoformat(),
        }

        logger.debug(f"Registered producer: {kind.value} ({cls.__module__}.{cls.__name__})")
        return cls

    return decorator


def get_producer_class(kind: PixelKind) -> Optional[Type[DataStoreProducer]]:
    """Producer class for a kind, or None."""
    return _producers.get(kind)


def create_producer(kind: Any, **kwargs) -> DataStoreProducer:
    """
    Instantiate the producer for a reconciled pixel kind.

    Args:
        kind: PixelKind (or its string value)
        **kwargs: Passed to the producer constructor

    Raises:
        InvalidInputError if no producer handles the kind
    """
    parsed = PixelKind.parse(kind)
    producer_cls = _producers.get(parsed) if parsed.is_known() else None
    if producer_cls is None:
        message = f"Unexpected raster type: {kind}"
        logger.error(message)
        raise InvalidInputError(message)
    return producer_cls(**kwargs)


def list_producers() -> List[Dict[str, Any]]:
    """List all registered producers with metadata."""
    return list(_producer_metadata.values())


def unregister_producer(kind: PixelKind) -> None:
    """Remove a registration. Primarily for testing."""
    _producers.pop(kind, None)
    _producer_metadata.pop(kind, None)


__all__ = [
    "register_producer",
    "get_producer_class",
    "create_producer",
    "list_producers",
    "unregister_producer",
]
