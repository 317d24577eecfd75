"""
Structured logging for the burn tracker.

JSON logs with timestamp, event_type and per-stage fields.
"""

from burn_tracker.burn_logging.logger import bind_run, clear_run, get_logger

__all__ = ["bind_run", "clear_run", "get_logger"]
