"""
Solana RPC access package.

Polls getSignaturesForAddress for the target wallet and fetches individual
transactions, normalizing RPC payloads into immutable records for the burn
classifier.
"""

from burn_tracker.solana_listener.models import (
    SignatureInfo,
    TokenBalance,
    TransactionMeta,
    TransactionRecord,
)
from burn_tracker.solana_listener.rpc_client import SolanaRpcClient

__all__ = [
    "SignatureInfo",
    "SolanaRpcClient",
    "TokenBalance",
    "TransactionMeta",
    "TransactionRecord",
]
