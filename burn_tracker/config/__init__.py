"""
Configuration management for the burn tracker.

Loads and validates settings from environment variables and an optional
.env file. Exposes a single source of truth for all service configuration.
"""

from burn_tracker.config.settings import TrackerSettings, get_settings  # noqa: F401

__all__ = ["TrackerSettings", "get_settings"]
