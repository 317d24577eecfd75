"""
Solana JSON-RPC client: signature listing and transaction fetch with retry.

- list_recent_signatures(): getSignaturesForAddress, most recent first. Raises
  RpcUnavailable once every attempt has failed; the run cannot proceed.
- fetch_transaction(): getTransaction at "confirmed" commitment. Returns None
  once every attempt has failed.

Both paths share retry_async(); listing backs off from a 1.0s base delay,
transaction fetches from 0.1s.
"""

from __future__ import annotations

import asyncio
import itertools
from typing import Any

import httpx

from burn_tracker.burn_logging import get_logger
from burn_tracker.config.env import mask_url
from burn_tracker.core.exceptions import RpcUnavailable, TransactionFetchFailed
from burn_tracker.core.retry import Sleeper, retry_async
from burn_tracker.solana_listener.models import SignatureInfo, TransactionRecord

logger = get_logger(__name__)

DEFAULT_MAX_RETRIES = 3
LIST_BASE_DELAY_SEC = 1.0
FETCH_BASE_DELAY_SEC = 0.1
DEFAULT_TIMEOUT_SEC = 30.0
COMMITMENT = "confirmed"
MAX_SUPPORTED_TRANSACTION_VERSION = 0

# JSON-RPC request id counter
_request_ids = itertools.count(1)


def _build_rpc_body(method: str, params: list[Any]) -> dict[str, Any]:
    return {
        "jsonrpc": "2.0",
        "id": next(_request_ids),
        "method": method,
        "params": params,
    }


class SolanaRpcClient:
    """
    Async Solana RPC adapter for one endpoint.

    Pass http_client to share a connection pool (or a mock transport in tests);
    otherwise the client owns one and closes it in aclose() / async with.
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        list_base_delay_sec: float = LIST_BASE_DELAY_SEC,
        fetch_base_delay_sec: float = FETCH_BASE_DELAY_SEC,
        timeout_sec: float = DEFAULT_TIMEOUT_SEC,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        if not rpc_url.strip():
            raise ValueError("rpc_url must be non-empty")
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        self._rpc_url = rpc_url.strip().rstrip("/")
        self._max_retries = max_retries
        self._list_base_delay = list_base_delay_sec
        self._fetch_base_delay = fetch_base_delay_sec
        self._sleep = sleep
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=httpx.Timeout(timeout_sec))

    @property
    def rpc_url(self) -> str:
        return self._rpc_url

    async def __aenter__(self) -> "SolanaRpcClient":
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _call(self, method: str, params: list[Any]) -> Any:
        """Perform one JSON-RPC call; raise on transport, HTTP, or RPC error."""
        resp = await self._client.post(self._rpc_url, json=_build_rpc_body(method, params))
        resp.raise_for_status()
        data = resp.json()
        if "error" in data:
            err = data["error"]
            if isinstance(err, dict):
                raise RuntimeError(
                    f"Solana RPC error: {err.get('message', err)} (code={err.get('code')})"
                )
            raise RuntimeError(f"Solana RPC error: {err}")
        return data.get("result")

    async def list_recent_signatures(self, address: str, limit: int = 100) -> list[SignatureInfo]:
        """Return up to limit signatures for address, most recent first."""
        logger.info(
            "rpc_list_signatures",
            address=address,
            limit=limit,
            rpc_url=mask_url(self._rpc_url),
        )

        async def _list() -> list[Any]:
            result = await self._call("getSignaturesForAddress", [address, {"limit": limit}])
            if not isinstance(result, list):
                raise RuntimeError("Solana RPC returned no signature list")
            return result

        try:
            raw = await retry_async(
                _list,
                max_attempts=self._max_retries,
                base_delay_sec=self._list_base_delay,
                label="rpc_list_signatures",
                sleep=self._sleep,
                address=address,
            )
        except Exception as e:
            logger.error(
                "rpc_list_signatures_give_up",
                address=address,
                max_retries=self._max_retries,
                error=str(e),
            )
            raise RpcUnavailable(
                f"Failed to fetch signatures after {self._max_retries} attempts: {e}",
                attempts=self._max_retries,
            ) from e

        infos: list[SignatureInfo] = []
        for item in raw:
            if not isinstance(item, dict) or "signature" not in item:
                continue
            try:
                infos.append(SignatureInfo.from_rpc_item(item))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.debug("rpc_signature_item_skipped", error=str(e))
        logger.info("rpc_signatures_found", address=address, signature_count=len(infos))
        return infos

    async def get_transaction(self, signature: str) -> TransactionRecord | None:
        """
        Fetch one transaction; None when the node does not know it at this commitment.
        Raises TransactionFetchFailed once every attempt has failed.
        """
        params = [
            signature,
            {
                "encoding": "json",
                "commitment": COMMITMENT,
                "maxSupportedTransactionVersion": MAX_SUPPORTED_TRANSACTION_VERSION,
            },
        ]
        try:
            result = await retry_async(
                lambda: self._call("getTransaction", params),
                max_attempts=self._max_retries,
                base_delay_sec=self._fetch_base_delay,
                label="rpc_fetch_tx",
                sleep=self._sleep,
                signature=signature,
            )
        except Exception as e:
            raise TransactionFetchFailed(
                signature, attempts=self._max_retries, error=str(e)
            ) from e
        if result is None:
            logger.debug("rpc_tx_not_found", signature=signature)
            return None
        try:
            return TransactionRecord.from_rpc_result(signature, result)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("rpc_tx_malformed", signature=signature, error=str(e))
            return None

    async def fetch_transaction(self, signature: str) -> TransactionRecord | None:
        """Like get_transaction(), but a fetch that exhausted its retries yields None."""
        try:
            return await self.get_transaction(signature)
        except TransactionFetchFailed as e:
            logger.error(
                "rpc_fetch_tx_give_up",
                signature=signature,
                attempts=e.attempts,
                error=str(e),
            )
            return None
