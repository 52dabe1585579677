# ============================================================================
# INSTALL-LOCATION RESOLVER
# ============================================================================
# STATUS: Service - Install directory lookup
# PURPOSE: Pick the directory a dataset is installed into
# CREATED: 18 OCT 2026
# ============================================================================
"""
Install-Location Resolver

Prefers the first location the store flags for installs, otherwise the
store's generic write location. Read-only: nothing is created here.
"""

from pathlib import Path
from typing import Optional

from core.errors import InvalidInputError
from core.logging import ComponentType, get_logger
from infrastructure.file_store import FileStore

logger = get_logger(__name__, ComponentType.STORE)


def resolve_install_location(store: Optional[FileStore]) -> Optional[Path]:
    """
    Directory to install into.

    Returns:
        The first install location, else the write location (may be None
        if the store has neither)

    Raises:
        InvalidInputError: store is None
    """
    if store is None:
        message = "File store is None"
        logger.error(message)
        raise InvalidInputError(message)

    for location in store.locations():
        if store.is_install_location(location):
            return Path(location)

    write_location = store.write_location()
    return Path(write_location) if write_location is not None else None


__all__ = [
    "resolve_install_location",
]
