"""
Batch processor: fetch + classify signatures with bounded concurrency.

Signatures are split into consecutive batches. Items in a batch are fetched and
classified concurrently; a batch is fully drained before the next one starts,
with a fixed pause between batches to stay under RPC rate limits. An item
whose transaction cannot be fetched is dropped without affecting the batch.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Sequence

from burn_tracker.analysis_engine.burn_classifier import classify_transaction
from burn_tracker.burn_logging import get_logger
from burn_tracker.core.retry import Sleeper
from burn_tracker.database.models import BurnEvent, to_iso, unix_to_iso
from burn_tracker.solana_listener.models import SignatureInfo, TransactionRecord
from burn_tracker.solana_listener.rpc_client import SolanaRpcClient

logger = get_logger(__name__)

DEFAULT_BATCH_SIZE = 10
DEFAULT_BATCH_DELAY_SEC = 0.1


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def chunked(items: Sequence[SignatureInfo], size: int) -> list[Sequence[SignatureInfo]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


class BatchProcessor:
    """Drives the burn classifier over a sequence of signatures."""

    def __init__(
        self,
        client: SolanaRpcClient,
        *,
        token_label: str,
        batch_size: int = DEFAULT_BATCH_SIZE,
        batch_delay_sec: float = DEFAULT_BATCH_DELAY_SEC,
        sleep: Sleeper = asyncio.sleep,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self._client = client
        self._token_label = token_label
        self._batch_size = batch_size
        self._batch_delay_sec = batch_delay_sec
        self._sleep = sleep
        self._clock = clock

    def _build_event(
        self,
        sig: SignatureInfo,
        record: TransactionRecord,
        amount: int,
        from_address: str | None,
    ) -> BurnEvent:
        scrape_time = to_iso(self._clock())
        block_time = sig.block_time if sig.block_time is not None else record.block_time
        timestamp = scrape_time
        if block_time is not None:
            try:
                timestamp = unix_to_iso(block_time)
            except (OverflowError, OSError, TypeError, ValueError) as e:
                logger.warning(
                    "batch_block_time_invalid",
                    signature=sig.signature,
                    block_time=repr(block_time),
                    error=str(e),
                )
        return BurnEvent(
            signature=sig.signature,
            timestamp=timestamp,
            from_address=from_address,
            amount=str(amount),
            token=self._token_label,
            scrape_time=scrape_time,
        )

    async def process_one(self, sig: SignatureInfo) -> BurnEvent | None:
        """Fetch and classify one signature; None for non-burns and failed fetches."""
        record = await self._client.fetch_transaction(sig.signature)
        if record is None:
            return None
        result = classify_transaction(record)
        if not result.is_burn or result.amount is None:
            logger.debug("batch_item_not_burn", signature=sig.signature, reason=result.reason.value)
            return None
        return self._build_event(sig, record, result.amount, result.from_address)

    async def _process_contained(self, sig: SignatureInfo) -> BurnEvent | None:
        """process_one(), with any failure logged and the item dropped."""
        try:
            return await self.process_one(sig)
        except Exception as e:
            logger.warning(
                "batch_item_failed",
                signature=sig.signature,
                error=str(e),
                error_type=type(e).__name__,
            )
            return None

    async def process(
        self,
        signatures: Sequence[SignatureInfo],
        batch_size: int | None = None,
    ) -> list[BurnEvent]:
        """Return burn events in batch order (input order within a batch)."""
        size = batch_size if batch_size is not None else self._batch_size
        if size < 1:
            raise ValueError("batch_size must be >= 1")
        batches = chunked(list(signatures), size)
        logger.info(
            "batch_processing_started",
            signature_count=len(signatures),
            batch_size=size,
            batch_count=len(batches),
        )

        burn_events: list[BurnEvent] = []
        for index, batch in enumerate(batches, start=1):
            if index > 1:
                await self._sleep(self._batch_delay_sec)
            results = await asyncio.gather(*(self._process_contained(sig) for sig in batch))
            batch_burns = [event for event in results if event is not None]
            burn_events.extend(batch_burns)
            logger.info(
                "batch_processed",
                batch=index,
                batch_count=len(batches),
                items=len(batch),
                burns_found=len(batch_burns),
            )
        return burn_events
