"""
Test doubles for Solana RPC: an httpx MockTransport-backed JSON-RPC node and
builders for getTransaction payloads.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx

from burn_tracker.solana_listener.rpc_client import SolanaRpcClient

RPC_URL = "http://rpc.test"
MINT = "XNETmint1111111111111111111111111111111111"
OWNER = "9QCfNuQuxct1Xk9ytFYgxc5fThmTzL4pHQnSjjrVUrka"
OTHER_OWNER = "7F1WzVNQ1Qpurqxxdyv3UrFQR3uoNepULVW9A4bAJ5nZ"
BLOCK_TIME = 1700000000
BLOCK_TIME_ISO = "2023-11-14T22:13:20.000Z"

BURN_LOGS = [
    "Program TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA invoke [1]",
    "Program log: Instruction: Burn",
    "Program TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA success",
]
BURN_CHECKED_LOGS = [
    "Program TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA invoke [1]",
    "Program log: Instruction: BurnChecked",
    "Program TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA success",
]
TRANSFER_LOGS = [
    "Program TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA invoke [1]",
    "Program log: Instruction: Transfer",
    "Program TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA success",
]


def balance(index: int, amount: int | str, *, mint: str = MINT, owner: str = OWNER, decimals: int = 9) -> dict[str, Any]:
    """One pre/post token balance entry as returned by getTransaction (json encoding)."""
    return {
        "accountIndex": index,
        "mint": mint,
        "owner": owner,
        "uiTokenAmount": {"amount": str(amount), "decimals": decimals, "uiAmountString": None},
    }


def tx_result(
    logs: list[str] | None,
    pre: list[dict[str, Any]] | None,
    post: list[dict[str, Any]] | None,
    *,
    block_time: int | None = BLOCK_TIME,
) -> dict[str, Any]:
    """getTransaction result object (transaction, meta, blockTime, slot)."""
    return {
        "slot": 250_000_000,
        "blockTime": block_time,
        "transaction": {"message": {"accountKeys": [OWNER]}, "signatures": ["x"]},
        "meta": {
            "err": None,
            "logMessages": logs,
            "preTokenBalances": pre,
            "postTokenBalances": post,
        },
    }


def signature_item(signature: str, block_time: int | None = BLOCK_TIME) -> dict[str, Any]:
    return {
        "signature": signature,
        "slot": 250_000_000,
        "err": None,
        "memo": None,
        "blockTime": block_time,
        "confirmationStatus": "finalized",
    }


class SleepRecorder:
    """Async sleep replacement that records requested delays without waiting."""

    def __init__(self, timeline: list[tuple[str, Any]] | None = None) -> None:
        self.delays: list[float] = []
        self.timeline = timeline

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if self.timeline is not None:
            self.timeline.append(("sleep", delay))


class FakeSolanaRpc:
    """
    Minimal JSON-RPC node: getSignaturesForAddress and getTransaction.

    failures[method] = n fails the next n calls with HTTP 503 (-1: always).
    failing_signatures always fail getTransaction with HTTP 500.
    """

    def __init__(self) -> None:
        self.signatures: list[dict[str, Any]] = []
        self.transactions: dict[str, dict[str, Any] | None] = {}
        self.failures: dict[str, int] = {}
        self.failing_signatures: set[str] = set()
        self.rpc_errors: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, list[Any]]] = []
        self.timeline: list[tuple[str, Any]] = []
        self.http_clients: list[httpx.AsyncClient] = []

    def add_transaction(self, signature: str, result: dict[str, Any] | None) -> None:
        self.signatures.append(signature_item(signature))
        self.transactions[signature] = result

    def calls_for(self, method: str) -> list[list[Any]]:
        return [params for m, params in self.calls if m == method]

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        method = body["method"]
        params = body["params"]
        self.calls.append((method, params))
        self.timeline.append((method, params[0]))

        remaining = self.failures.get(method, 0)
        if remaining != 0:
            if remaining > 0:
                self.failures[method] = remaining - 1
            return httpx.Response(503, json={"message": "Service Unavailable"})
        if method in self.rpc_errors:
            return httpx.Response(
                200, json={"jsonrpc": "2.0", "id": body["id"], "error": self.rpc_errors[method]}
            )

        if method == "getSignaturesForAddress":
            result: Any = self.signatures[: params[1]["limit"]]
        elif method == "getTransaction":
            if params[0] in self.failing_signatures:
                return httpx.Response(500, json={"message": "Internal error"})
            result = self.transactions.get(params[0])
        else:
            return httpx.Response(
                200,
                json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": -32601, "message": "Method not found"}},
            )
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def client(self, *, max_retries: int = 3, sleep: SleepRecorder | None = None) -> SolanaRpcClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        self.http_clients.append(http_client)
        return SolanaRpcClient(
            RPC_URL,
            max_retries=max_retries,
            http_client=http_client,
            sleep=sleep or SleepRecorder(),
        )

    async def aclose(self) -> None:
        """Close every http client handed out; SolanaRpcClient leaves injected clients open."""
        for http_client in self.http_clients:
            if not http_client.is_closed:
                await http_client.aclose()

    def close(self) -> None:
        asyncio.run(self.aclose())
