# ============================================================================
# FILE SET MODEL
# ============================================================================
# STATUS: Core model - Installation input
# PURPOSE: Ordered source files plus optional name/scale/type hints
# LAST_REVIEWED: 18 OCT 2026
# EXPORTS: FileSet
# DEPENDENCIES: pydantic
# ============================================================================
"""
File Set Model

The input to one installation call. A FileSet is frozen: once handed to
the pipeline its files and hints do not change.
"""

from pathlib import Path
from typing import Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from core.contracts import DataType


class FileSet(BaseModel):
    """
    Source files to install.

    An empty FileSet is constructible (callers may build one from a
    directory scan that found nothing) but every installation entry point
    rejects it with InvalidInputError.
    """
    files: Tuple[Path, ...] = Field(default_factory=tuple)
    name: Optional[str] = Field(default=None, description="Explicit dataset name")
    scale: Optional[str] = Field(default=None, description="Map scale, appended to name")
    data_type: Optional[DataType] = Field(default=None, description="Imagery/Elevation hint")

    model_config = {"frozen": True}

    @field_validator("files", mode="before")
    @classmethod
    def coerce_paths(cls, v):
        if v is None:
            return ()
        return tuple(Path(p) for p in v)

    @classmethod
    def of(cls, *paths, **kwargs) -> "FileSet":
        """Convenience constructor: FileSet.of("/a.tif", "/b.tif", name="x")."""
        return cls(files=paths, **kwargs)

    def __len__(self) -> int:
        return len(self.files)

    @property
    def is_empty(self) -> bool:
        return len(self.files) == 0

    @property
    def is_imagery(self) -> bool:
        return self.data_type == DataType.IMAGERY

    @property
    def is_elevation(self) -> bool:
        return self.data_type == DataType.ELEVATION
