"""
Domain models for stored entities.

Burn events (unique by signature) and the per-run audit summary. Plain
dataclasses; the SQLAlchemy tables in store.py map to and from these.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any

BURN_ACTION = "Burn"


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and Z suffix (2024-05-01T12:00:00.000Z)."""
    dt = dt.astimezone(timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def unix_to_iso(ts: int | float) -> str:
    return to_iso(datetime.fromtimestamp(ts, tz=timezone.utc))


def utc_now_iso() -> str:
    return to_iso(datetime.now(timezone.utc))


@dataclass(frozen=True)
class BurnEvent:
    """One detected burn; signature is the sole identity."""

    signature: str
    timestamp: str
    """ISO-8601 block time of the burn transaction."""
    from_address: str | None
    amount: str
    """Burned amount in base units, as a decimal string."""
    token: str
    scrape_time: str
    """ISO-8601 time the burn was detected."""
    action: str = BURN_ACTION
    to_address: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RunSummary:
    """Audit record for one pipeline invocation."""

    total_checked: int
    new_burns: int
    success: bool
    error_text: str | None = None
    execution_time_ms: int = 0
    notes: str | None = None

    @classmethod
    def failed(cls, error_text: str, execution_time_ms: int = 0) -> "RunSummary":
        """Summary for a run that could not complete; counts are zeroed."""
        return cls(
            total_checked=0,
            new_burns=0,
            success=False,
            error_text=error_text,
            execution_time_ms=execution_time_ms,
        )


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of reconciling candidate burn events against the store."""

    inserted: int = 0
    skipped: int = 0
    """Already stored; the existing row is left untouched."""
    failed: int = 0
    """Storage error on check or insert; item dropped for this run."""

    def __add__(self, other: "ReconcileResult") -> "ReconcileResult":
        return ReconcileResult(
            inserted=self.inserted + other.inserted,
            skipped=self.skipped + other.skipped,
            failed=self.failed + other.failed,
        )
