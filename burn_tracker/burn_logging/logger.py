"""
Structured JSON logging for the burn tracker pipeline.

Every record carries event_type, level, logger and a UTC ISO timestamp; records
emitted while a run is active also carry its run_id, bound through
structlog.contextvars. RPC URLs are masked before rendering.

Uses only Python stdlib logging and structlog; no burn_tracker imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)

# json (default) or console
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

_API_KEY_PARAM = "api-key="


def _rename_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """structlog's positional 'event' becomes event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def _mask_url_fields(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Hide api-key query values in any *url field (RPC providers put keys there)."""
    for key, value in event_dict.items():
        if key.endswith("url") and isinstance(value, str) and _API_KEY_PARAM in value:
            event_dict[key] = value.split(_API_KEY_PARAM)[0] + _API_KEY_PARAM + "***"
    return event_dict


def configure_structlog(level: int = LOG_LEVEL_VALUE, fmt: str = LOG_FORMAT) -> None:
    """Configure structlog: contextvars, level, UTC timestamp, event_type, JSON or console."""
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
        structlog.processors.format_exc_info,
        _mask_url_fields,
        _rename_event,
    ]
    if fmt == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("reconcile_inserted", signature=sig, amount="1000")

    Output (JSON): {"signature": "...", "amount": "1000", "logger": "module.name",
    "level": "info", "timestamp": "...", "event_type": "reconcile_inserted"}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_run(run_id: str) -> structlog.BoundLogger:
    """
    Tag every log record in the current context with run_id until clear_run().

    Returns a logger for the run's own start/finish events.
    """
    structlog.contextvars.bind_contextvars(run_id=run_id)
    return get_logger("burn_tracker.run")


def clear_run() -> None:
    structlog.contextvars.unbind_contextvars("run_id")
