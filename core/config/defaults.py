# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# STATUS: Core - Default configuration values
# PURPOSE: Installer mode switches, tiling layout and reader recognition
# CREATED: 18 OCT 2026
# ============================================================================
"""
Configuration Defaults

Provides defaults for installation runs.
These can be overridden via environment variables, a YAML file, or by
constructing the dataclasses directly.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- InstallerConfig is passed explicitly to the production coordinator;
  get_defaults() exists for callers (CLI, scripts) that do not build one
"""

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import yaml


def _env_bool(name: str, default: bool) -> bool:
    """Read a boolean environment variable."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class InstallerConfig:
    """
    Mode switches for a production run.

    enable_full_pyramid=False (default) installs for on-demand raster
    serving: the producer writes only the coarse levels and a
    RasterServer sidecar lets the runtime synthesize the rest.
    """
    enable_full_pyramid: bool = False

    # "0" and "auto" both mean: let the producer pick the cutoff
    max_level: str = "0"

    @classmethod
    def from_env(cls) -> "InstallerConfig":
        """Create from environment variables."""
        return cls(
            enable_full_pyramid=_env_bool("PRODUCER_ENABLE_FULL_PYRAMID", False),
            max_level=os.getenv("TILED_RASTER_PRODUCER_LIMIT_MAX_LEVEL", "0"),
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstallerConfig":
        """Create from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {k: v for k, v in (data or {}).items() if k in known}
        if "max_level" in values:
            values["max_level"] = str(values["max_level"])
        return cls(**values)


@dataclass(frozen=True)
class TilingDefaults:
    """
    Defaults for the tile pyramid layout.

    Level zero tiles start at (-90, -180) and halve in size per level.
    """
    image_tile_size: int = 512
    elevation_tile_size: int = 150
    image_level_zero_delta: float = 36.0  # degrees
    elevation_level_zero_delta: float = 20.0  # degrees

    # Levels written when the max-level limit is "auto"
    auto_level_count: int = 2
    max_levels: int = 20

    image_format: str = "image/png"
    image_suffix: str = ".png"
    image_driver: str = "PNG"
    elevation_format: str = "application/bil32"
    elevation_suffix: str = ".bil"
    elevation_driver: str = "EHdr"

    @classmethod
    def from_env(cls) -> "TilingDefaults":
        """Create from environment variables."""
        return cls(
            image_tile_size=int(os.getenv("IMAGE_TILE_SIZE", 512)),
            elevation_tile_size=int(os.getenv("ELEVATION_TILE_SIZE", 150)),
            auto_level_count=int(os.getenv("AUTO_LEVEL_COUNT", 2)),
        )


@dataclass(frozen=True)
class ReaderDefaults:
    """
    Defaults for raster recognition.

    Suffix checks are the cheap first gate before a header read.
    """
    raster_suffixes: Tuple[str, ...] = (
        ".tif", ".tiff", ".gtif", ".jp2", ".png", ".jpg", ".jpeg",
        ".img", ".ntf", ".nitf", ".dt0", ".dt1", ".dt2", ".hgt",
        ".bil", ".asc", ".dem", ".vrt",
    )
    elevation_suffixes: Tuple[str, ...] = (".dt0", ".dt1", ".dt2", ".hgt", ".bil", ".dem")
    elevation_dtypes: Tuple[str, ...] = ("int16", "int32", "uint16", "float32", "float64")
    image_dtypes: Tuple[str, ...] = ("uint8", "uint16")

    @classmethod
    def from_env(cls) -> "ReaderDefaults":
        """Create from environment variables."""
        extra = os.getenv("EXTRA_RASTER_SUFFIXES")
        if not extra:
            return cls()
        suffixes = tuple(s.strip().lower() for s in extra.split(",") if s.strip())
        return cls(raster_suffixes=cls.raster_suffixes + suffixes)


# ============================================================================
# GLOBAL DEFAULTS INSTANCE
# ============================================================================

@dataclass
class Defaults:
    """Container for all default configurations."""
    installer: InstallerConfig = field(default_factory=InstallerConfig)
    tiling: TilingDefaults = field(default_factory=TilingDefaults)
    readers: ReaderDefaults = field(default_factory=ReaderDefaults)

    @classmethod
    def from_env(cls) -> "Defaults":
        """Create all defaults from environment variables."""
        return cls(
            installer=InstallerConfig.from_env(),
            tiling=TilingDefaults.from_env(),
            readers=ReaderDefaults.from_env(),
        )

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "Defaults":
        """
        Create defaults from a YAML file.

        Only the `installer` section is read from the file; the rest
        comes from the environment.

        Example:
            installer:
              enable_full_pyramid: false
              max_level: auto
        """
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        env = cls.from_env()
        return cls(
            installer=InstallerConfig.from_dict(data.get("installer", {})),
            tiling=env.tiling,
            readers=env.readers,
        )


_defaults: Optional[Defaults] = None


def get_defaults() -> Defaults:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = Defaults.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "InstallerConfig",
    "TilingDefaults",
    "ReaderDefaults",
    "Defaults",
    "get_defaults",
    "reset_defaults",
]
