"""
Run logger: one audit row per pipeline invocation, best effort.

A failed audit write is logged and reported through the return value; it never
changes how the run itself ends.
"""

from __future__ import annotations

import asyncio

from burn_tracker.burn_logging import get_logger
from burn_tracker.core.exceptions import RunLoggingFailed
from burn_tracker.database.models import RunSummary
from burn_tracker.database.store import BurnStore

logger = get_logger(__name__)


class RunLogger:
    def __init__(self, store: BurnStore | None, *, raise_on_error: bool = False) -> None:
        self._store = store
        self._raise_on_error = raise_on_error

    async def record_run(self, summary: RunSummary) -> bool:
        """Append summary to burn_tracker_logs. Returns True on success."""
        try:
            if self._store is None:
                raise RunLoggingFailed("no store available for run log")
            loop = asyncio.get_running_loop()
            row_id = await loop.run_in_executor(None, self._store.append_run_log, summary)
        except Exception as e:
            logger.error(
                "run_logging_failed",
                error=str(e),
                success=summary.success,
                total_checked=summary.total_checked,
            )
            if self._raise_on_error:
                if isinstance(e, RunLoggingFailed):
                    raise
                raise RunLoggingFailed(f"Failed to log burn run: {e}") from e
            return False
        logger.info(
            "run_logged",
            run_log_id=row_id,
            success=summary.success,
            total_checked=summary.total_checked,
            new_burns=summary.new_burns,
            execution_time_ms=summary.execution_time_ms,
        )
        return True
