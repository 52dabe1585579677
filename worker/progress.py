# ============================================================================
# PROGRESS TRACKING
# ============================================================================
# STATUS: Core - Progress tracking for long-running production
# PURPOSE: Track and report tile production progress
# CREATED: 18 OCT 2026
# ============================================================================
"""
Progress Tracking

Lets producers report progress while writing tiles. The display layer
(a progress bar, the CLI) supplies a callback; the tracker throttles so a
pyramid with thousands of tiles does not flood it.

Design:
- Throttled: time interval and percent change gates
- Callback-based: the callback receives a ProgressReport
- Callback failures are logged, never propagated into production

Usage:
    tracker = ProgressTracker(
        dataset_name="ortho",
        total=tile_count,
        report_callback=print,
    )

    for i, tile in enumerate(tiles):
        write(tile)
        tracker.update(current=i + 1, message=f"Level {tile.level}")

    tracker.complete()
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class ProgressReport:
    """A single progress update."""
    dataset_name: str
    current: int
    total: int
    percent: float
    message: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    elapsed_seconds: Optional[float] = None
    eta_seconds: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict."""
        return {
            "dataset_name": self.dataset_name,
            "current": self.current,
            "total": self.total,
            "percent": self.percent,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
            "elapsed_seconds": self.elapsed_seconds,
            "eta_seconds": self.eta_seconds,
        }


ProgressCallback = Callable[[ProgressReport], None]


class ProgressTracker:
    """
    Tracker for production progress.

    Handles throttling and reporting.
    """

    def __init__(
        self,
        dataset_name: str,
        total: int = 100,
        report_callback: Optional[ProgressCallback] = None,
        min_report_interval: float = 0.5,  # seconds
        min_percent_change: float = 1.0,  # percent
    ):
        """
        Initialize progress tracker.

        Args:
            dataset_name: Dataset being produced
            total: Total items to process
            report_callback: Function receiving ProgressReport
            min_report_interval: Minimum seconds between reports
            min_percent_change: Minimum percent change to trigger report
        """
        self.dataset_name = dataset_name
        self.total = max(1, total)  # Avoid division by zero
        self._callback = report_callback
        self._min_interval = min_report_interval
        self._min_percent_change = min_percent_change

        self._current = 0
        self._last_reported_percent = 0.0
        self._last_report_time = 0.0
        self._start_time = time.monotonic()
        self._message = ""

    @property
    def current(self) -> int:
        return self._current

    @property
    def percent(self) -> float:
        return min(100.0, (self._current / self.total) * 100)

    @property
    def elapsed_seconds(self) -> float:
        return time.monotonic() - self._start_time

    @property
    def eta_seconds(self) -> Optional[float]:
        """Estimated time remaining in seconds."""
        if self._current == 0:
            return None
        elapsed = self.elapsed_seconds
        if elapsed <= 0:
            return None
        rate = self._current / elapsed
        return (self.total - self._current) / rate

    def update(
        self,
        current: Optional[int] = None,
        increment: int = 0,
        message: str = "",
        force_report: bool = False,
    ) -> bool:
        """
        Update progress.

        Returns:
            True if progress was reported
        """
        if current is not None:
            self._current = min(current, self.total)
        else:
            self._current = min(self._current + increment, self.total)

        if message:
            self._message = message

        if not force_report and not self._should_report():
            return False

        self._report()
        return True

    def complete(self, message: str = "Completed") -> None:
        """Force a final report at 100%."""
        self._current = self.total
        self._message = message
        self._report()

    def _should_report(self) -> bool:
        now = time.monotonic()
        if now - self._last_report_time < self._min_interval:
            return False
        if abs(self.percent - self._last_reported_percent) < self._min_percent_change:
            return False
        return True

    def _report(self) -> None:
        self._last_report_time = time.monotonic()
        self._last_reported_percent = self.percent

        report = ProgressReport(
            dataset_name=self.dataset_name,
            current=self._current,
            total=self.total,
            percent=self.percent,
            message=self._message,
            elapsed_seconds=self.elapsed_seconds,
            eta_seconds=self.eta_seconds,
        )

        logger.debug(
            f"Progress: {report.percent:.1f}% ({report.current}/{report.total}) "
            f"- {report.message}"
        )

        if self._callback:
            try:
                self._callback(report)
            except Exception as e:
                logger.warning(f"Failed to report progress: {e}")


__all__ = [
    "ProgressTracker",
    "ProgressReport",
    "ProgressCallback",
]
