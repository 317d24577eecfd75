"""
Reconciler: insert only burn events whose signature is not stored yet.

Per candidate: existence check, then insert. An existing row is authoritative
and never updated. A storage error on one candidate is logged and that
candidate is dropped; the rest are still reconciled. Counters live in the
returned ReconcileResult, so concurrent reconcile() calls never share state.

Check and insert are separate calls, not one transaction. The UNIQUE
constraint on signature turns a lost race into a skip instead of a duplicate.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterable, TypeVar

from burn_tracker.burn_logging import get_logger
from burn_tracker.core.exceptions import StorageError
from burn_tracker.database.models import BurnEvent, ReconcileResult
from burn_tracker.database.store import BurnStore

logger = get_logger(__name__)

T = TypeVar("T")


class Reconciler:
    """Deduplicates candidate burn events against a BurnStore."""

    def __init__(self, store: BurnStore) -> None:
        self._store = store

    async def _run_blocking(self, fn: Callable[..., T], *args: Any) -> T:
        """Run a blocking store call in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, fn, *args)

    async def reconcile_one(self, event: BurnEvent) -> ReconcileResult:
        try:
            if await self._run_blocking(self._store.burn_event_exists, event.signature):
                logger.debug("reconcile_skipped_existing", signature=event.signature)
                return ReconcileResult(skipped=1)
            if await self._run_blocking(self._store.insert_burn_event, event):
                logger.info(
                    "reconcile_inserted",
                    signature=event.signature,
                    amount=event.amount,
                    from_address=event.from_address,
                )
                return ReconcileResult(inserted=1)
            return ReconcileResult(skipped=1)
        except StorageError as e:
            logger.error("reconcile_storage_error", signature=event.signature, error=str(e))
            return ReconcileResult(failed=1)

    async def reconcile(self, events: Iterable[BurnEvent]) -> ReconcileResult:
        """Reconcile events in order; returns inserted / skipped / failed counts."""
        events = list(events)
        if not events:
            return ReconcileResult()
        logger.info("reconcile_started", candidate_count=len(events))
        result = ReconcileResult()
        for event in events:
            result = result + await self.reconcile_one(event)
        logger.info(
            "reconcile_complete",
            inserted=result.inserted,
            skipped=result.skipped,
            failed=result.failed,
        )
        return result
