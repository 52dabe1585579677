# ============================================================================
# INSTALLER EXCEPTIONS
# ============================================================================
# STATUS: Foundation - Error taxonomy
# PURPOSE: Exceptions raised across classification, production and emission
# CREATED: 18 OCT 2026
# ============================================================================
"""
Installer Exceptions

Taxonomy:
- InvalidInputError: empty/mixed/unrecognized file sets, missing store.
  Fatal to the current call, no retry.
- MissingParameterError / UnsupportedSourceError: fatal during config
  emission; the artifact would otherwise be silently incomplete.
- SkippableSourceError: one raster's source cannot be resolved. Caught,
  logged and excluded by the emitter.
- ProductionCancelledError: raised inside a producer when the cancellation
  token fires. Callers never see it; the coordinator turns it into a
  None result after rollback.
"""

from typing import Optional


class InstallerError(Exception):
    """Base exception for installer errors."""
    pass


class InvalidInputError(InstallerError, ValueError):
    """Raised when the input to an installation cannot be processed."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)


class MissingParameterError(InstallerError):
    """Raised when a required production parameter is absent."""

    def __init__(self, parameter: str):
        self.parameter = parameter
        super().__init__(f"Missing required parameter: {parameter}")


class UnsupportedSourceError(InstallerError):
    """Raised when a producer raster is not a locally addressable cached file."""
    pass


class SkippableSourceError(InstallerError):
    """Raised when a single raster source cannot be resolved."""
    pass


class ProductionCancelledError(InstallerError):
    """Raised by a producer when a cancellation request is observed."""

    def __init__(self, message: str = "Production cancelled"):
        super().__init__(message)


class DuplicateProducerError(InstallerError):
    """Raised when a producer is already registered for a pixel kind."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Producer already registered for kind: {kind}")


__all__ = [
    "InstallerError",
    "InvalidInputError",
    "MissingParameterError",
    "UnsupportedSourceError",
    "SkippableSourceError",
    "ProductionCancelledError",
    "DuplicateProducerError",
]
