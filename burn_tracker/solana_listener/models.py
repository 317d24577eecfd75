"""
Data models for Solana RPC responses.

SignatureInfo mirrors one getSignaturesForAddress item; TransactionRecord keeps
only the parts of a getTransaction result the burn classifier reads (log lines
and pre/post token balances). Both are immutable and never persisted.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


def _optional_int(value: Any) -> int | None:
    """int(value), or None when the RPC left the field out. Raises on non-numeric values."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise TypeError(f"expected an integer, got {value!r}")
    return int(value)


@dataclass(frozen=True)
class SignatureInfo:
    """
    Normalized transaction signature info from getSignaturesForAddress.

    The unit of work handed from the RPC client to the batch processor.
    """

    signature: str
    slot: int | None = None
    err: Any = None  # None if success; dict/object from RPC if failed
    block_time: int | None = None  # Unix timestamp; None if not available
    memo: str | None = None
    confirmation_status: str | None = None  # processed | confirmed | finalized

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "SignatureInfo":
        """Build from a single getSignaturesForAddress result item."""
        return cls(
            signature=item["signature"],
            slot=_optional_int(item.get("slot")),
            err=item.get("err"),
            block_time=_optional_int(item.get("blockTime")),
            memo=item.get("memo"),
            confirmation_status=item.get("confirmationStatus"),
        )


@dataclass(frozen=True)
class TokenBalance:
    """One entry of meta.preTokenBalances / meta.postTokenBalances."""

    account_index: int
    mint: str
    owner: str | None
    raw_amount: int
    """Amount in base units (uiTokenAmount.amount), arbitrary precision."""
    decimals: int | None = None

    @classmethod
    def from_rpc_item(cls, item: dict[str, Any]) -> "TokenBalance":
        ui = item.get("uiTokenAmount") or {}
        if not isinstance(ui, dict):
            raise TypeError(f"uiTokenAmount must be an object, got {type(ui).__name__}")
        return cls(
            account_index=int(item["accountIndex"]),
            mint=str(item.get("mint") or ""),
            owner=item.get("owner"),
            raw_amount=int(ui.get("amount") or 0),
            decimals=_optional_int(ui.get("decimals")),
        )


def _balances(raw: Any) -> tuple[TokenBalance, ...] | None:
    if raw is None:
        return None
    return tuple(TokenBalance.from_rpc_item(b) for b in raw if isinstance(b, dict))


@dataclass(frozen=True)
class TransactionMeta:
    """Status/meta block of a fetched transaction."""

    log_messages: tuple[str, ...] | None
    pre_token_balances: tuple[TokenBalance, ...] | None
    post_token_balances: tuple[TokenBalance, ...] | None
    err: Any = None

    @classmethod
    def from_rpc_meta(cls, meta: dict[str, Any]) -> "TransactionMeta":
        logs = meta.get("logMessages")
        return cls(
            log_messages=tuple(str(line) for line in logs) if logs is not None else None,
            pre_token_balances=_balances(meta.get("preTokenBalances")),
            post_token_balances=_balances(meta.get("postTokenBalances")),
            err=meta.get("err"),
        )


@dataclass(frozen=True)
class TransactionRecord:
    """Fetched transaction body; owned by the classification step that fetched it."""

    signature: str
    meta: TransactionMeta | None
    block_time: int | None = None
    slot: int | None = None

    @classmethod
    def from_rpc_result(cls, signature: str, result: dict[str, Any]) -> "TransactionRecord":
        """Build from a getTransaction result object (transaction, meta, blockTime, slot)."""
        if not isinstance(result, dict):
            raise TypeError(f"getTransaction result must be an object, got {type(result).__name__}")
        meta = result.get("meta")
        return cls(
            signature=signature,
            meta=TransactionMeta.from_rpc_meta(meta) if isinstance(meta, dict) else None,
            block_time=_optional_int(result.get("blockTime")),
            slot=_optional_int(result.get("slot")),
        )
