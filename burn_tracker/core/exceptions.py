"""
Application-level exceptions.

Fatal to a run: RpcUnavailable (signature listing exhausted its retries).
Contained at the item boundary: TransactionFetchFailed, StorageError.
Reported only: RunLoggingFailed.
"""

from __future__ import annotations


class BurnTrackerError(Exception):
    """Base class for burn tracker errors."""


class ConfigError(BurnTrackerError, ValueError):
    """Invalid or missing configuration value."""


class RpcUnavailable(BurnTrackerError):
    """Signature listing failed on every attempt; the run cannot proceed."""

    def __init__(self, message: str, *, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


class TransactionFetchFailed(BurnTrackerError):
    """A single getTransaction call failed on every attempt."""

    def __init__(self, signature: str, *, attempts: int, error: str) -> None:
        super().__init__(
            f"Failed to fetch transaction {signature} after {attempts} attempts: {error}"
        )
        self.signature = signature
        self.attempts = attempts


class StorageError(BurnTrackerError):
    """Existence check, insert, or query against the store failed."""


class RunLoggingFailed(StorageError):
    """The audit record for a run could not be written."""
