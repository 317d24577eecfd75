"""
Tests for the burn classifier: log markers first, then balance deltas with the
90% threshold and closed-account rule.
"""

from __future__ import annotations

import pytest

from burn_tracker.analysis_engine.burn_classifier import (
    ClassificationReason,
    classify_transaction,
    has_burn_marker,
    is_significant_decrease,
)
from burn_tracker.solana_listener.models import TransactionRecord
from fakes import (
    BURN_CHECKED_LOGS,
    BURN_LOGS,
    MINT,
    OTHER_OWNER,
    OWNER,
    TRANSFER_LOGS,
    balance,
    tx_result,
)

SIG = "5VERv8NMvzbJMEkV8xnrLkEaWRtSz9CosKDYjCJjBRnbJLgp8uirBgmQpjKhoR4tjF3ZpRzrFmBV6UjKdiSZkQUW"


def _record(logs, pre, post) -> TransactionRecord:
    return TransactionRecord.from_rpc_result(SIG, tx_result(logs, pre, post))


def test_missing_record_or_meta_is_not_burn():
    """No record and no meta block both classify as non-burn."""
    assert classify_transaction(None).reason == ClassificationReason.NO_META
    record = TransactionRecord(signature=SIG, meta=None)
    result = classify_transaction(record)
    assert result.is_burn is False
    assert result.reason == ClassificationReason.NO_META


@pytest.mark.parametrize("logs", [None, []])
def test_no_logs_never_burn_even_with_emptied_account(logs):
    """Without log lines, a fully emptied account is still not a burn."""
    record = _record(logs, [balance(1, 1000)], [balance(1, 0)])
    result = classify_transaction(record)
    assert result.is_burn is False
    assert result.reason == ClassificationReason.NO_BURN_MARKER


def test_transfer_logs_with_decrease_not_burn():
    """A Transfer instruction emptying an account is not a burn."""
    record = _record(TRANSFER_LOGS, [balance(1, 1000), balance(2, 0, owner=OTHER_OWNER)],
                     [balance(1, 0), balance(2, 1000, owner=OTHER_OWNER)])
    assert classify_transaction(record).is_burn is False


def test_decrease_of_99_percent_is_burn():
    """Marker + decrease = 0.99 * pre -> burn with amount = decrease."""
    record = _record(BURN_LOGS, [balance(1, 1000)], [balance(1, 10)])
    result = classify_transaction(record)
    assert result.is_burn is True
    assert result.reason == ClassificationReason.BURN
    assert result.amount == 990
    assert result.mint == MINT
    assert result.decimals == 9
    assert result.from_address == OWNER


def test_decrease_of_50_percent_is_not_burn():
    """Marker + decrease = 0.5 * pre is below the threshold -> indeterminate."""
    record = _record(BURN_LOGS, [balance(1, 1000)], [balance(1, 500)])
    result = classify_transaction(record)
    assert result.is_burn is False
    assert result.reason == ClassificationReason.INDETERMINATE
    assert result.amount is None


def test_threshold_boundary():
    """Exactly 90% qualifies; just under does not."""
    assert is_significant_decrease(1000, 100) is True
    assert is_significant_decrease(1000, 101) is False
    assert is_significant_decrease(1000, 1000) is False
    assert is_significant_decrease(0, 0) is False


def test_disappeared_account_burns_full_pre_amount():
    """Closed token account (no post entry) with pre = 1000 -> amount 1000."""
    record = _record(BURN_CHECKED_LOGS, [balance(3, 1000)], [])
    result = classify_transaction(record)
    assert result.is_burn is True
    assert result.amount == 1000


def test_disappeared_zero_balance_account_does_not_qualify():
    """A closed account that held nothing is not a burn delta."""
    record = _record(BURN_LOGS, [balance(3, 0)], [])
    result = classify_transaction(record)
    assert result.is_burn is False
    assert result.reason == ClassificationReason.INDETERMINATE


def test_first_qualifying_entry_wins():
    """Two emptied accounts: only the first pre-balance entry is reported."""
    pre = [balance(1, 500, owner=OWNER), balance(2, 700, owner=OTHER_OWNER)]
    post = [balance(1, 0, owner=OWNER), balance(2, 0, owner=OTHER_OWNER)]
    result = classify_transaction(_record(BURN_LOGS, pre, post))
    assert result.amount == 500
    assert result.from_address == OWNER


def test_scan_continues_past_non_qualifying_entries():
    """Entries that grew or barely moved are skipped; a later emptied account qualifies."""
    pre = [balance(1, 100), balance(2, 1000), balance(4, 50, owner=OTHER_OWNER)]
    post = [balance(1, 200), balance(2, 800), balance(4, 0, owner=OTHER_OWNER)]
    result = classify_transaction(_record(BURN_LOGS, pre, post))
    assert result.is_burn is True
    assert result.amount == 50
    assert result.from_address == OTHER_OWNER


def test_match_requires_same_mint():
    """Post entry with the same index but another mint does not match; pre counts as closed."""
    other_mint = "So11111111111111111111111111111111111111112"
    result = classify_transaction(
        _record(BURN_LOGS, [balance(1, 1000)], [balance(1, 1000, mint=other_mint)])
    )
    assert result.is_burn is True
    assert result.amount == 1000


def test_missing_balance_lists_indeterminate():
    """Marker present but the RPC omitted token balances -> not a burn."""
    result = classify_transaction(_record(BURN_LOGS, None, None))
    assert result.is_burn is False
    assert result.reason == ClassificationReason.INDETERMINATE


def test_large_amounts_keep_precision():
    """Base-unit amounts beyond float precision stay exact."""
    big = 18446744073709551615
    result = classify_transaction(_record(BURN_LOGS, [balance(1, big)], [balance(1, 0)]))
    assert result.amount == big


def test_marker_must_match_exactly():
    """Lines that merely start with the marker text are not burn instructions."""
    assert has_burn_marker(["Program log: Instruction: Burn"]) is True
    assert has_burn_marker(["  Program log: Instruction: BurnChecked  "]) is True
    assert has_burn_marker(["Program log: Instruction: BurnFrom"]) is False
    assert has_burn_marker(["Program log: Instruction: Transfer"]) is False
    assert has_burn_marker(None) is False
