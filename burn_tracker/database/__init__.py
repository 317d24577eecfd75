"""
Persistence layer: burn events (unique by signature) and run audit logs.

SQLite by default via BurnStore / get_store(); any SQLAlchemy URL works.
"""

from burn_tracker.database.models import BurnEvent, ReconcileResult, RunSummary
from burn_tracker.database.reconciler import Reconciler
from burn_tracker.database.run_logger import RunLogger
from burn_tracker.database.store import BurnStore, get_store

__all__ = [
    "BurnEvent",
    "BurnStore",
    "ReconcileResult",
    "Reconciler",
    "RunLogger",
    "RunSummary",
    "get_store",
]
