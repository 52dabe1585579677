# ============================================================================
# DATASET NAMER
# ============================================================================
# STATUS: Service - Dataset name suggestion
# PURPOSE: Derive a readable dataset name from the files being installed
# CREATED: 18 OCT 2026
# ============================================================================
"""
Dataset Namer

The suggested name is a deterministic function of the file set:

1. An explicit FileSet.name wins (with " <scale>" appended if set).
2. Otherwise take the character-wise common prefix of the absolute
   paths (suffix removed, illegal file-name characters replaced).
3. Split the prefix on separator characters, drop one-character tokens
   and case-insensitive repeats of the previous token, keep the last
   four tokens.
4. Join with spaces and append " Imagery" or " Elevations".

Example:
    /d/Imagery_2010_Tile_A.tif, /d/Imagery_2010_Tile_B.tif
      → prefix "/d/Imagery_2010_Tile_"
      → tokens ["Imagery", "2010", "Tile"]
      → "Imagery 2010 Tile Imagery"
"""

import re
from pathlib import Path
from typing import List, Optional

from core.contracts import PixelKind
from core.errors import InvalidInputError
from core.models import FileSet

PLACEHOLDER_NAME = "change me"
MAX_NAME_WORDS = 4

# Characters not allowed in file names on common platforms
_ILLEGAL_FILE_NAME_CHARS = re.compile(r"[?/\\=+<>:;,\"|^\[\]]")

_SEPARATORS = " _:/\\-=!@#$%^&()[]{}|\".,<>;`+"
_TOKEN_SPLIT = re.compile("[" + re.escape(_SEPARATORS) + "]+")


def sanitize_dataset_name(name: str) -> str:
    """Replace characters that cannot appear in a file name with '_'."""
    return _ILLEGAL_FILE_NAME_CHARS.sub("_", name)


def validate_dataset_name(name: Optional[str]) -> str:
    """
    Check a sanitized name can be used as a cache directory name.

    Raises:
        InvalidInputError: empty, whitespace-only, "." or ".."
    """
    if name is None or not name.strip():
        raise InvalidInputError("Dataset name is empty")
    if name.strip() in (".", ".."):
        raise InvalidInputError(f"Dataset name '{name}' is not a valid directory name")
    return name


def _strip_suffix(path: str) -> str:
    suffix = Path(path).suffix
    return path[: -len(suffix)] if suffix else path


def _common_prefix(names: List[str]) -> str:
    prefix = ""
    for name in names:
        if not prefix:
            prefix = name
            continue
        size = min(len(name), len(prefix))
        for i in range(size):
            if name[i] != prefix[i]:
                prefix = prefix[:i]
                break
        else:
            prefix = prefix[:size]
    return prefix


def _kind_suffix(file_set: FileSet, kind: Optional[PixelKind]) -> str:
    if kind == PixelKind.IMAGE:
        return " Imagery"
    if kind == PixelKind.ELEVATION:
        return " Elevations"
    if file_set.is_imagery:
        return " Imagery"
    if file_set.is_elevation:
        return " Elevations"
    return ""


def suggest_dataset_name(file_set: Optional[FileSet], kind: Optional[PixelKind] = None) -> Optional[str]:
    """
    Suggest a dataset name for a file set.

    Args:
        file_set: Files being installed
        kind: Reconciled pixel kind (falls back to the file set's hint)

    Returns:
        Suggested name, or None for an empty set
    """
    if file_set is None or file_set.is_empty:
        return None

    if file_set.name is not None:
        if file_set.scale is not None:
            return f"{file_set.name} {file_set.scale}"
        return file_set.name

    names = [
        sanitize_dataset_name(_strip_suffix(str(path.absolute())))
        for path in file_set.files
        if str(path)
    ]
    prefix = _common_prefix(names)

    words: List[str] = []
    last_word: Optional[str] = None
    for word in _TOKEN_SPLIT.split(prefix):
        if len(word) < 2:
            continue
        if last_word is not None and word.lower() == last_word.lower():
            continue
        last_word = word
        words.append(word)

    words = words[-MAX_NAME_WORDS:]
    if words:
        return (" ".join(words) + _kind_suffix(file_set, kind)).strip()

    return prefix if prefix else PLACEHOLDER_NAME


__all__ = [
    "suggest_dataset_name",
    "sanitize_dataset_name",
    "validate_dataset_name",
    "PLACEHOLDER_NAME",
]
