# ============================================================================
# SERVICES MODULE
# ============================================================================
# STATUS: Core - Installation pipeline services
# PURPOSE: Classification, naming, production, config emission, binding
# CREATED: 18 OCT 2026
# ============================================================================
"""
Services Module

Pipeline stages for installing a dataset. DataInstaller composes them.

Usage:
    from services import DataInstaller

    installer = DataInstaller(file_store=store)
    document = installer.install_data_from_files(file_set)
"""

from .classifier import RasterClassifier
from .install_location import resolve_install_location
from .naming import suggest_dataset_name, sanitize_dataset_name, validate_dataset_name
from .production import ProductionCoordinator
from .raster_server import create_raster_server_config
from .scene_binder import Scene, add_to_scene
from .installer import DataInstaller, InstallReport

__all__ = [
    "RasterClassifier",
    "resolve_install_location",
    "suggest_dataset_name",
    "sanitize_dataset_name",
    "validate_dataset_name",
    "ProductionCoordinator",
    "create_raster_server_config",
    "Scene",
    "add_to_scene",
    "DataInstaller",
    "InstallReport",
]
