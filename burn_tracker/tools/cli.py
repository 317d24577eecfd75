"""Argument types shared by the command-line entry points."""

from __future__ import annotations

import argparse

from burn_tracker.config.settings import validate_signature_limit
from burn_tracker.core.exceptions import ConfigError


def signature_limit_arg(raw: str) -> int:
    """argparse type for --limit: an integer in 1..1000."""
    try:
        value = int(raw)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {raw!r}") from None
    try:
        return validate_signature_limit(value)
    except ConfigError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
