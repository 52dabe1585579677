# ============================================================================
# VERSION - RASTER DATASET INSTALLER
# ============================================================================
"""
Version information for the raster dataset installer.

This is the single source of truth for the application version.
Updated manually for each release.
"""
__version__ = "0.3.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-18"

# Version written into the RasterServer sidecar root element
RASTER_SERVER_DOC_VERSION = "1.0"
CODENAME = "Dataset Installer"
