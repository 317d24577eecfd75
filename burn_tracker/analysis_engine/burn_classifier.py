"""
Burn classifier: one fetched transaction in, burn / non-burn out.

Decision order:
  1. No record or no meta block: not a burn.
  2. Log lines must carry an SPL Token "Burn" or "BurnChecked" instruction log.
     Balance deltas alone never make a transaction a burn.
  3. With a marker present, the burned amount comes from token balance deltas,
     scanning pre balances in order and matching post balances by
     (account_index, mint):
       - post entry lower than pre: qualifies only if the decrease is at least
         90% of the pre amount (account emptied or nearly emptied);
       - no post entry and pre > 0: the account was closed, full pre amount burned;
       - anything else: keep scanning.
  4. The first qualifying entry is the result. Marker present but nothing
     qualifies: not a burn (indeterminate amount).

Only one burn is reported per transaction even when several accounts qualify.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from burn_tracker.burn_logging import get_logger
from burn_tracker.solana_listener.models import TokenBalance, TransactionMeta, TransactionRecord

logger = get_logger(__name__)

BURN_LOG_MARKER = "Program log: Instruction: Burn"
BURN_CHECKED_LOG_MARKER = "Program log: Instruction: BurnChecked"
BURN_LOG_MARKERS = frozenset({BURN_LOG_MARKER, BURN_CHECKED_LOG_MARKER})

# Minimum decrease as a fraction of the pre balance: NUMERATOR / DENOMINATOR (90%)
BURN_THRESHOLD_NUMERATOR = 9
BURN_THRESHOLD_DENOMINATOR = 10


class ClassificationReason(str, Enum):
    BURN = "burn"
    NO_META = "no_meta"
    NO_BURN_MARKER = "no_burn_marker"
    INDETERMINATE = "indeterminate"
    """Burn marker present but no qualifying balance delta."""


@dataclass(frozen=True)
class BurnClassification:
    """Classifier output; amount/mint/decimals/from_address set only for burns."""

    is_burn: bool
    reason: ClassificationReason
    amount: int | None = None
    """Burned amount in base units."""
    mint: str | None = None
    decimals: int | None = None
    from_address: str | None = None
    """Owner of the token account the tokens were burned from."""


@dataclass(frozen=True)
class BurnDelta:
    amount: int
    mint: str
    decimals: int | None
    owner: str | None


def _not_burn(reason: ClassificationReason) -> BurnClassification:
    return BurnClassification(is_burn=False, reason=reason)


def has_burn_marker(log_messages: tuple[str, ...] | list[str] | None) -> bool:
    """True if any log line is exactly a Burn / BurnChecked instruction log."""
    if not log_messages:
        return False
    return any(line.strip() in BURN_LOG_MARKERS for line in log_messages)


def is_significant_decrease(pre_amount: int, post_amount: int) -> bool:
    """decrease >= 90% of pre, in integer arithmetic; zero decreases never qualify."""
    decrease = pre_amount - post_amount
    if decrease <= 0:
        return False
    return decrease * BURN_THRESHOLD_DENOMINATOR >= pre_amount * BURN_THRESHOLD_NUMERATOR


def find_burn_delta(meta: TransactionMeta) -> BurnDelta | None:
    """Return the first qualifying burn delta in pre-balance order, or None."""
    pre_balances = meta.pre_token_balances
    post_balances = meta.post_token_balances
    if pre_balances is None or post_balances is None:
        return None

    post_by_key: dict[tuple[int, str], TokenBalance] = {}
    for post in post_balances:
        post_by_key.setdefault((post.account_index, post.mint), post)

    for pre in pre_balances:
        post = post_by_key.get((pre.account_index, pre.mint))
        if post is not None:
            if pre.raw_amount > post.raw_amount:
                if is_significant_decrease(pre.raw_amount, post.raw_amount):
                    return BurnDelta(
                        amount=pre.raw_amount - post.raw_amount,
                        mint=pre.mint,
                        decimals=pre.decimals,
                        owner=pre.owner,
                    )
                logger.debug(
                    "classifier_decrease_below_threshold",
                    account_index=pre.account_index,
                    pre_amount=str(pre.raw_amount),
                    post_amount=str(post.raw_amount),
                )
        elif pre.raw_amount > 0:
            return BurnDelta(
                amount=pre.raw_amount,
                mint=pre.mint,
                decimals=pre.decimals,
                owner=pre.owner,
            )
    return None


def classify_transaction(record: TransactionRecord | None) -> BurnClassification:
    """Classify one fetched transaction as burn or non-burn."""
    if record is None or record.meta is None:
        return _not_burn(ClassificationReason.NO_META)

    meta = record.meta
    if not has_burn_marker(meta.log_messages):
        return _not_burn(ClassificationReason.NO_BURN_MARKER)

    delta = find_burn_delta(meta)
    if delta is None:
        logger.info("classifier_burn_amount_indeterminate", signature=record.signature)
        return _not_burn(ClassificationReason.INDETERMINATE)

    logger.info(
        "classifier_burn_detected",
        signature=record.signature,
        amount=str(delta.amount),
        mint=delta.mint,
        owner=delta.owner,
    )
    return BurnClassification(
        is_burn=True,
        reason=ClassificationReason.BURN,
        amount=delta.amount,
        mint=delta.mint,
        decimals=delta.decimals,
        from_address=delta.owner,
    )
