"""
Agent worker package: pipeline orchestration.

Runs one tracking pass: signature listing, batched fetch + classification,
reconciliation against the store, and the run audit record.
"""

from burn_tracker.agent_worker.batch_processor import BatchProcessor
from burn_tracker.agent_worker.worker import (
    BurnTracker,
    RunOutcome,
    TrackResult,
    import_signatures,
    run_once,
)

__all__ = [
    "BatchProcessor",
    "BurnTracker",
    "RunOutcome",
    "TrackResult",
    "import_signatures",
    "run_once",
]
