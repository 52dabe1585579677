# ============================================================================
# WORKER MODULE
# ============================================================================
# STATUS: Core - Background execution components
# PURPOSE: Cancellation, progress tracking and the install executor
# CREATED: 18 OCT 2026
# ============================================================================
"""
Worker Module

Components for running installs off the initiating thread:
- cancellation: Cooperative cancellation token
- progress: Progress tracking and reporting
- executor: Async install execution (import worker.executor directly;
  it depends on services, which depend on this package)
"""

from worker.cancellation import (
    CancellationToken,
    NeverCancelled,
)
from worker.progress import (
    ProgressTracker,
    ProgressReport,
    ProgressCallback,
)

__all__ = [
    "CancellationToken",
    "NeverCancelled",
    "ProgressTracker",
    "ProgressReport",
    "ProgressCallback",
]
