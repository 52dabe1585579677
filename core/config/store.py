# ============================================================================
# FILE STORE CONFIGURATION
# ============================================================================
# STATUS: Core - File store location settings
# PURPOSE: Describe candidate storage locations for installed datasets
# CREATED: 18 OCT 2026
# ============================================================================
"""
File Store Configuration

Describes the directories a BasicFileStore searches. Each location may be
flagged as an install location (preferred target for new datasets) and one
may be flagged as the write location (fallback target).

Example YAML:
    locations:
      - path: /data/worldwind/install
        install: true
      - path: ~/.cache/worldwind
        write: true
"""

import os
from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator


class StoreLocation(BaseModel):
    """A single candidate directory."""
    path: Path
    install: bool = Field(default=False, description="Preferred target for installs")
    write: bool = Field(default=False, description="Fallback write target")

    @field_validator("path", mode="before")
    @classmethod
    def expand_path(cls, v):
        return Path(os.path.expanduser(str(v)))


class FileStoreConfig(BaseModel):
    """Ordered candidate locations for a file store."""
    locations: List[StoreLocation] = Field(default_factory=list)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "FileStoreConfig":
        """Load from a YAML file with a top-level `locations` list."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)

    @classmethod
    def for_directory(cls, directory: Union[str, Path]) -> "FileStoreConfig":
        """Single-directory store that is both install and write location."""
        return cls(locations=[StoreLocation(path=directory, install=True, write=True)])

    @classmethod
    def from_env(cls) -> Optional["FileStoreConfig"]:
        """Build from DATA_FILE_STORE_CONFIG or DATA_FILE_STORE_DIR, if set."""
        config_path = os.getenv("DATA_FILE_STORE_CONFIG")
        if config_path:
            return cls.from_yaml(config_path)
        directory = os.getenv("DATA_FILE_STORE_DIR")
        if directory:
            return cls.for_directory(directory)
        return None
