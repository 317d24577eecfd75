"""
Environment variable loading for the burn tracker.

- RPC_URL / SOLANA_RPC_URL: Solana RPC endpoint (default: mainnet-beta)
- DATABASE_URL: SQLAlchemy URL; otherwise SQLite file at DB_PATH
- Loads .env from project root when available.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Project root: config is burn_tracker/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_PACKAGE_DIR = _CONFIG_DIR.parent
_ROOT = _PACKAGE_DIR.parent
_ENV_PATH = _ROOT / ".env"

MAINNET_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_DB_PATH = "burn_tracker.db"


def load_tracker_env() -> None:
    """Load .env from project root (falls back to cwd). Safe to call multiple times."""
    if _ENV_PATH.is_file():
        load_dotenv(_ENV_PATH)
    else:
        load_dotenv()


def env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or "").strip() or default


def get_rpc_url() -> str:
    """
    Resolve Solana RPC URL from env.
    Order: RPC_URL > SOLANA_RPC_URL > mainnet-beta.
    """
    load_tracker_env()
    return env_str("RPC_URL") or env_str("SOLANA_RPC_URL") or MAINNET_RPC_URL


def get_database_url() -> str:
    """Return DATABASE_URL if set; else SQLite from DB_PATH or burn_tracker.db."""
    load_tracker_env()
    url = env_str("DATABASE_URL")
    if url:
        return url
    return f"sqlite:///{env_str('DB_PATH', DEFAULT_DB_PATH)}"


def mask_url(url: str) -> str:
    """Hide api keys in RPC URLs before logging them."""
    if "api-key=" in url:
        return url.split("api-key=")[0] + "api-key=***"
    return url
