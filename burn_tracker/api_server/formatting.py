"""
Display formatting for stored burn events.

Amounts are stored in base units; the API adds amountFormatted scaled by the
token's decimals, with thousands separators and no trailing zeros.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any

from burn_tracker.database.models import BURN_ACTION, to_iso

DEFAULT_DECIMALS = 9


def format_amount(amount: str | int | None, decimals: int = DEFAULT_DECIMALS) -> str:
    """'1234500000000' with 9 decimals -> '1,234.5'."""
    if amount is None or amount == "":
        return "0"
    try:
        value = Decimal(str(amount)).scaleb(-decimals)
    except InvalidOperation:
        return str(amount)
    text = f"{value:,f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text or "0"


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 date or datetime; naive values are taken as UTC."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(value: str | None) -> str | None:
    if not value:
        return value
    try:
        return to_iso(parse_iso(value))
    except ValueError:
        return value


def format_burn_event(
    event: dict[str, Any],
    *,
    decimals: int = DEFAULT_DECIMALS,
    default_token: str = "XNET",
) -> dict[str, Any]:
    return {
        "signature": event.get("signature"),
        "timestamp": format_timestamp(event.get("timestamp")),
        "action": event.get("action") or BURN_ACTION,
        "from_address": event.get("from_address"),
        "to_address": event.get("to_address"),
        "amount": event.get("amount"),
        "amountFormatted": format_amount(event.get("amount"), decimals),
        "token": event.get("token") or default_token,
        "scrape_time": format_timestamp(event.get("scrape_time")),
    }
