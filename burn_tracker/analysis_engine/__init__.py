"""
Analysis engine: burn detection heuristics over fetched transactions.
"""

from burn_tracker.analysis_engine.burn_classifier import (
    BurnClassification,
    ClassificationReason,
    classify_transaction,
)

__all__ = [
    "BurnClassification",
    "ClassificationReason",
    "classify_transaction",
]
