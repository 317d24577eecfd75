"""
Pipeline run: list signatures → fetch + classify → reconcile → audit log.

run_once() is one complete invocation. Listing failure (RpcUnavailable) or any
unexpected exception ends the run as failed; the run logger still gets exactly
one attempt to record the outcome. Per-item failures (fetch, storage) are
contained and show up only in logs and run notes.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from dataclasses import dataclass, field
from typing import Iterable

from burn_tracker.agent_worker.batch_processor import BatchProcessor
from burn_tracker.burn_logging import bind_run, clear_run, get_logger
from burn_tracker.config.settings import TrackerSettings, validate_signature_limit
from burn_tracker.core.retry import Sleeper
from burn_tracker.database.models import BurnEvent, ReconcileResult, RunSummary
from burn_tracker.database.reconciler import Reconciler
from burn_tracker.database.run_logger import RunLogger
from burn_tracker.database.store import BurnStore, get_store
from burn_tracker.solana_listener.models import SignatureInfo
from burn_tracker.solana_listener.rpc_client import SolanaRpcClient

logger = get_logger(__name__)


@dataclass
class TrackResult:
    """Outcome of listing + classifying; nothing persisted yet."""

    total_checked: int
    burn_events: list[BurnEvent] = field(default_factory=list)
    success: bool = True
    error: str | None = None


@dataclass
class RunOutcome:
    summary: RunSummary
    burn_events: list[BurnEvent] = field(default_factory=list)
    reconcile: ReconcileResult = field(default_factory=ReconcileResult)
    logged: bool = False
    """True if the run log row was written."""


def build_client(settings: TrackerSettings, *, sleep: Sleeper = asyncio.sleep) -> SolanaRpcClient:
    return SolanaRpcClient(
        settings.rpc_url,
        max_retries=settings.max_retries,
        timeout_sec=settings.rpc_timeout_sec,
        sleep=sleep,
    )


class BurnTracker:
    """Finds burns among the target wallet's recent transactions."""

    def __init__(
        self,
        client: SolanaRpcClient,
        settings: TrackerSettings,
        *,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._client = client
        self._settings = settings
        self._processor = BatchProcessor(
            client,
            token_label=settings.token_mint,
            batch_size=settings.batch_size,
            batch_delay_sec=settings.batch_delay_sec,
            sleep=sleep,
        )

    async def track_burns(self, limit: int | None = None) -> TrackResult:
        """List recent signatures and classify them. Never raises."""
        if limit is None:
            limit = self._settings.signature_limit
        logger.info(
            "track_burns_started",
            target_wallet=self._settings.target_wallet,
            limit=limit,
        )
        try:
            validate_signature_limit(limit)
            signatures = await self._client.list_recent_signatures(
                self._settings.target_wallet, limit
            )
            burn_events = await self._processor.process(signatures)
        except Exception as e:
            logger.exception("track_burns_failed", error=str(e), error_type=type(e).__name__)
            return TrackResult(total_checked=0, success=False, error=str(e))
        logger.info(
            "track_burns_complete",
            total_checked=len(signatures),
            burns_found=len(burn_events),
        )
        return TrackResult(total_checked=len(signatures), burn_events=burn_events)

    async def classify_signatures(self, signatures: Iterable[str]) -> list[BurnEvent]:
        """Classify explicit signatures (no listing call); block time comes from each transaction."""
        infos = [SignatureInfo(signature=s.strip()) for s in signatures if s and s.strip()]
        return await self._processor.process(infos)


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


async def run_once(
    settings: TrackerSettings,
    *,
    store: BurnStore | None = None,
    client: SolanaRpcClient | None = None,
    limit: int | None = None,
    sleep: Sleeper = asyncio.sleep,
) -> RunOutcome:
    """Execute one full pipeline run and record it in burn_tracker_logs."""
    start = time.monotonic()
    run_log = bind_run(uuid.uuid4().hex[:12])
    run_log.info("run_started", target_wallet=settings.target_wallet)

    owns_client = client is None
    outcome: RunOutcome
    try:
        if store is None:
            store = get_store(settings.database_url)
        if client is None:
            client = build_client(settings, sleep=sleep)
        tracker = BurnTracker(client, settings, sleep=sleep)
        result = await tracker.track_burns(limit)
        if result.success:
            reconciled = await Reconciler(store).reconcile(result.burn_events)
            outcome = RunOutcome(
                summary=RunSummary(
                    total_checked=result.total_checked,
                    new_burns=reconciled.inserted,
                    success=True,
                    notes=(
                        f"detected={len(result.burn_events)} inserted={reconciled.inserted} "
                        f"skipped={reconciled.skipped} failed={reconciled.failed}"
                    ),
                ),
                burn_events=result.burn_events,
                reconcile=reconciled,
            )
        else:
            outcome = RunOutcome(
                summary=RunSummary(
                    total_checked=result.total_checked,
                    new_burns=0,
                    success=False,
                    error_text=result.error,
                )
            )
    except Exception as e:
        run_log.exception("run_failed", error=str(e))
        outcome = RunOutcome(summary=RunSummary.failed(str(e)))
    finally:
        if owns_client and client is not None:
            await client.aclose()

    outcome.summary.execution_time_ms = _elapsed_ms(start)
    try:
        outcome.logged = await RunLogger(store).record_run(outcome.summary)
        run_log.info(
            "run_complete",
            success=outcome.summary.success,
            total_checked=outcome.summary.total_checked,
            burns=len(outcome.burn_events),
            inserted=outcome.reconcile.inserted,
            skipped=outcome.reconcile.skipped,
            execution_time_ms=outcome.summary.execution_time_ms,
        )
    finally:
        clear_run()
    return outcome


async def import_signatures(
    signatures: Iterable[str],
    settings: TrackerSettings,
    *,
    store: BurnStore | None = None,
    client: SolanaRpcClient | None = None,
    sleep: Sleeper = asyncio.sleep,
) -> tuple[list[BurnEvent], ReconcileResult]:
    """Classify known signatures and persist the burns among them."""
    owns_client = client is None
    client = client or build_client(settings, sleep=sleep)
    try:
        burn_events = await BurnTracker(client, settings, sleep=sleep).classify_signatures(signatures)
    finally:
        if owns_client:
            await client.aclose()
    if not burn_events:
        logger.info("import_no_burns_found")
        return burn_events, ReconcileResult()
    store = store or get_store(settings.database_url)
    return burn_events, await Reconciler(store).reconcile(burn_events)
