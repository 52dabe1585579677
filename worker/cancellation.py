# ============================================================================
# CANCELLATION TOKEN
# ============================================================================
# STATUS: Core - Cooperative cancellation
# PURPOSE: Let the initiating context stop a production run on a worker
# CREATED: 18 OCT 2026
# ============================================================================
"""
Cancellation Token

Production runs on a worker thread; the caller keeps a CancellationToken
and calls cancel() (e.g. from a Cancel button or Ctrl-C handler).

Cancellation is cooperative. The token is checked:
- between file offers
- once before entering the producing phase
- by producers between tiles

A cancelled run is rolled back and reported as a None result, not an
error.
"""

import threading
from typing import Optional

from core.errors import ProductionCancelledError


class CancellationToken:
    """Thread-safe, one-way cancellation flag."""

    def __init__(self):
        self._event = threading.Event()
        self._reason: Optional[str] = None

    def cancel(self, reason: str = "Cancelled by user") -> None:
        """Request cancellation. Idempotent."""
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def raise_if_cancelled(self) -> None:
        """Raise ProductionCancelledError if cancel() was called."""
        if self._event.is_set():
            raise ProductionCancelledError(self._reason or "Production cancelled")

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or timeout; returns is_cancelled."""
        return self._event.wait(timeout)


class NeverCancelled(CancellationToken):
    """Token for runs that cannot be cancelled."""

    def cancel(self, reason: str = "Cancelled by user") -> None:
        return None


__all__ = [
    "CancellationToken",
    "NeverCancelled",
]
