# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Module

Provides centralized configuration and defaults for the dataset installer.
"""

from core.config.defaults import (
    InstallerConfig,
    TilingDefaults,
    ReaderDefaults,
    Defaults,
    get_defaults,
    reset_defaults,
)
from core.config.store import FileStoreConfig, StoreLocation

__all__ = [
    "InstallerConfig",
    "TilingDefaults",
    "ReaderDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
    "FileStoreConfig",
    "StoreLocation",
]
