# ============================================================================
# FILE STORE INFRASTRUCTURE
# ============================================================================
# STATUS: Infrastructure - Local persistent storage locations
# PURPOSE: Candidate directories for installed datasets
# CREATED: 18 OCT 2026
# ============================================================================
"""
File Store Infrastructure

A FileStore exposes the directories installed datasets may live in:
- locations(): every candidate directory, in search order
- is_install_location(dir): whether a directory is meant for installs
- write_location(): the directory new data goes to when no install
  location is flagged

BasicFileStore is built from FileStoreConfig. It never creates
directories on lookup; producers create the cache directory they write.

Usage:
    store = BasicFileStore(FileStoreConfig.for_directory("/data/ww"))
    store.locations()        # [PosixPath('/data/ww')]
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

from core.config import FileStoreConfig
from core.errors import InvalidInputError

logger = logging.getLogger(__name__)


class FileStore(ABC):
    """Persistent-storage abstraction consumed by the installer."""

    @abstractmethod
    def locations(self) -> List[Path]:
        """Candidate directories in search order."""

    @abstractmethod
    def is_install_location(self, location: Union[str, Path]) -> bool:
        """True if the directory is flagged for installed data."""

    @abstractmethod
    def write_location(self) -> Optional[Path]:
        """Generic write directory."""


class BasicFileStore(FileStore):
    """
    File store backed by a FileStoreConfig.

    The write location is the first location flagged `write`, falling back
    to the first location of any kind.
    """

    def __init__(self, config: FileStoreConfig):
        if config is None:
            raise InvalidInputError("BasicFileStore requires a FileStoreConfig")
        self.config = config
        logger.debug(f"BasicFileStore initialized with {len(config.locations)} location(s)")

    @classmethod
    def for_directory(cls, directory: Union[str, Path]) -> "BasicFileStore":
        return cls(FileStoreConfig.for_directory(directory))

    @classmethod
    def from_env(cls) -> Optional["BasicFileStore"]:
        """Store from DATA_FILE_STORE_CONFIG / DATA_FILE_STORE_DIR, or None."""
        config = FileStoreConfig.from_env()
        return cls(config) if config is not None else None

    def locations(self) -> List[Path]:
        return [loc.path for loc in self.config.locations]

    def is_install_location(self, location: Union[str, Path]) -> bool:
        target = Path(location)
        return any(loc.install and loc.path == target for loc in self.config.locations)

    def write_location(self) -> Optional[Path]:
        for loc in self.config.locations:
            if loc.write:
                return loc.path
        if self.config.locations:
            return self.config.locations[0].path
        return None


__all__ = [
    "FileStore",
    "BasicFileStore",
]
