"""
Application settings.

Loads configuration from environment variables (and .env), validates required
values, and exposes a typed TrackerSettings object for the RPC client, batch
processor, store, and API server.
"""

from __future__ import annotations

from dataclasses import dataclass

from solders.pubkey import Pubkey

from burn_tracker.config.env import env_str, get_database_url, get_rpc_url, load_tracker_env
from burn_tracker.core.exceptions import ConfigError

DEFAULT_TARGET_WALLET = "B9SXSuPwpzmYUgk1GRfuW9R9QDMJ6P9SfTybSoawHiLj"
DEFAULT_TOKEN_LABEL = "XNET"
MAX_SIGNATURE_LIMIT = 1000


@dataclass(frozen=True)
class TrackerSettings:
    """Resolved configuration for one process."""

    rpc_url: str
    target_wallet: str
    token_mint: str = DEFAULT_TOKEN_LABEL
    max_retries: int = 3
    batch_size: int = 10
    batch_delay_sec: float = 0.1
    signature_limit: int = 100
    rpc_timeout_sec: float = 30.0
    database_url: str = "sqlite:///burn_tracker.db"
    token_decimals: int = 9
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    def __post_init__(self) -> None:
        if not self.rpc_url:
            raise ConfigError("rpc_url must be non-empty")
        validate_address(self.target_wallet)
        if self.max_retries < 1:
            raise ConfigError("max_retries must be >= 1")
        if self.batch_size < 1:
            raise ConfigError("batch_size must be >= 1")
        if self.batch_delay_sec < 0:
            raise ConfigError("batch_delay_sec must be >= 0")
        validate_signature_limit(self.signature_limit)


def validate_signature_limit(limit: int) -> int:
    """getSignaturesForAddress accepts 1..1000. Raises ConfigError otherwise."""
    if not (1 <= limit <= MAX_SIGNATURE_LIMIT):
        raise ConfigError(f"signature limit must be between 1 and {MAX_SIGNATURE_LIMIT}, got {limit}")
    return limit


def validate_address(address: str) -> None:
    """Validate a base58 Solana public key. Raises ConfigError if invalid."""
    address = (address or "").strip()
    if not address:
        raise ConfigError("target wallet must be non-empty")
    try:
        Pubkey.from_string(address)
    except Exception as e:
        raise ConfigError(f"Invalid Solana address {address!r}: {e}") from e


def _env_int(name: str, default: int) -> int:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _env_float(name: str, default: float) -> float:
    raw = env_str(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def get_settings() -> TrackerSettings:
    """Build settings from the environment. Raises ConfigError on invalid values."""
    load_tracker_env()
    return TrackerSettings(
        rpc_url=get_rpc_url(),
        target_wallet=env_str("TARGET_WALLET", DEFAULT_TARGET_WALLET),
        token_mint=env_str("TOKEN_MINT", DEFAULT_TOKEN_LABEL),
        max_retries=_env_int("MAX_RPC_RETRIES", 3),
        batch_size=_env_int("BATCH_SIZE", 10),
        batch_delay_sec=_env_float("BATCH_DELAY_MS", 100.0) / 1000.0,
        signature_limit=_env_int("SIGNATURE_LIMIT", 100),
        rpc_timeout_sec=_env_float("RPC_TIMEOUT_SEC", 30.0),
        database_url=get_database_url(),
        token_decimals=_env_int("TOKEN_DECIMALS", 9),
        api_host=env_str("API_HOST", "0.0.0.0"),
        api_port=_env_int("API_PORT", 8000),
    )
