# ============================================================================
# INSTALL EXECUTOR
# ============================================================================
# STATUS: Core - Background installation engine
# PURPOSE: Run installs off the event loop with timeout and cancellation
# CREATED: 18 OCT 2026
# ============================================================================
"""
Install Executor

Runs DataInstaller.install() on worker threads so the initiating context
stays responsive. Provides:
- Timeout enforcement (the token is cancelled, then the install is
  awaited so its rollback finishes before we return)
- Error capture into the InstallReport
- Bounded concurrency for batches

Concurrent installs must not share a cache name. Callers that install
the same dataset twice serialize those calls themselves.
"""

import asyncio
import logging
import time
import traceback
import uuid
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from core.contracts import ProductionState
from core.errors import InstallerError
from core.models import FileSet
from services.installer import DataInstaller, InstallReport, NameProvider
from services.naming import suggest_dataset_name
from worker.cancellation import CancellationToken

logger = logging.getLogger(__name__)


# ============================================================================
# EXECUTOR
# ============================================================================

class InstallExecutor:
    """
    Executes one installation on a worker thread.

    Takes a FileSet, runs the installer, returns an InstallReport. Never
    raises for installer failures; they are recorded on the report.
    """

    def __init__(
        self,
        installer: DataInstaller,
        timeout_seconds: Optional[float] = None,
        thread_pool: Optional[ThreadPoolExecutor] = None,
    ):
        """
        Args:
            installer: Configured DataInstaller
            timeout_seconds: Cancel installs running longer than this
            thread_pool: Pool for installs (default: loop's default pool)
        """
        self.installer = installer
        self.timeout_seconds = timeout_seconds
        self._pool = thread_pool

    async def execute(
        self,
        file_set: FileSet,
        cancel_token: Optional[CancellationToken] = None,
        name_provider: Optional[NameProvider] = None,
    ) -> InstallReport:
        token = cancel_token or CancellationToken()
        start_time = time.time()
        loop = asyncio.get_running_loop()

        future = loop.run_in_executor(
            self._pool,
            self.installer.install,
            file_set,
            token,
            name_provider,
        )

        try:
            if self.timeout_seconds is None:
                return await future
            return await asyncio.wait_for(asyncio.shield(future), timeout=self.timeout_seconds)

        except asyncio.TimeoutError:
            logger.error(f"Install timed out after {self.timeout_seconds}s, cancelling")
            token.cancel(f"Timed out after {self.timeout_seconds} seconds")
            try:
                report = await future
            except Exception as e:
                return self._failure(e, file_set, start_time)
            report.error = f"Install timed out after {self.timeout_seconds} seconds"
            return report

        except InstallerError as e:
            logger.error(f"Install failed: {e}")
            return self._failure(e, file_set, start_time)

        except Exception as e:
            logger.exception("Install failed with exception")
            return self._failure(e, file_set, start_time)

    @staticmethod
    def _failure(error: Exception, file_set: FileSet, start_time: float) -> InstallReport:
        """Report for an install that raised; named after its file set."""
        error_msg = f"{type(error).__name__}: {error}"
        report = InstallReport(
            install_id=uuid.uuid4().hex[:12],
            state=ProductionState.ROLLED_BACK,
            dataset_name=suggest_dataset_name(file_set),
            source_count=len(file_set),
            duration_ms=int((time.time() - start_time) * 1000),
            error=error_msg[:2000],
        )
        if not isinstance(error, InstallerError):
            logger.debug("".join(traceback.format_exception(type(error), error, error.__traceback__)))
        return report


# ============================================================================
# BATCH EXECUTOR
# ============================================================================

class BatchInstallExecutor:
    """
    Executes several installs concurrently.

    Uses a semaphore to limit concurrency.
    """

    def __init__(
        self,
        installer: DataInstaller,
        max_concurrent: int = 1,
        timeout_seconds: Optional[float] = None,
    ):
        self.max_concurrent = max(1, max_concurrent)
        self._semaphore = asyncio.Semaphore(self.max_concurrent)
        self._executor = InstallExecutor(installer, timeout_seconds)

    async def execute_batch(
        self,
        file_sets: List[FileSet],
        cancel_token: Optional[CancellationToken] = None,
    ) -> List[InstallReport]:
        """
        Install every file set; reports are returned in input order.

        One token cancels the whole batch.
        """
        token = cancel_token or CancellationToken()

        async def run_one(file_set: FileSet) -> InstallReport:
            async with self._semaphore:
                return await self._executor.execute(file_set, token)

        reports = await asyncio.gather(*(run_one(fs) for fs in file_sets))

        succeeded = sum(1 for r in reports if r.succeeded)
        logger.info(f"Batch complete: {succeeded}/{len(reports)} installed")
        return list(reports)


__all__ = [
    "InstallExecutor",
    "BatchInstallExecutor",
]
