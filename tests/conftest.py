"""
Pytest fixtures for burn tracker tests. Uses a temporary SQLite DB per test
and an in-process fake Solana RPC node.
"""

from __future__ import annotations

import pytest

from fakes import OWNER, RPC_URL, FakeSolanaRpc


@pytest.fixture
def db_url(tmp_path):
    return f"sqlite:///{tmp_path / 'burns.db'}"


@pytest.fixture
def store(db_url):
    """BurnStore on a fresh SQLite file with tables created."""
    from burn_tracker.database.store import get_store

    s = get_store(db_url)
    yield s
    s.dispose()


@pytest.fixture
def settings(db_url):
    from burn_tracker.config.settings import TrackerSettings

    return TrackerSettings(
        rpc_url=RPC_URL,
        target_wallet=OWNER,
        token_mint="XNET",
        max_retries=3,
        batch_size=10,
        batch_delay_sec=0.1,
        database_url=db_url,
    )


@pytest.fixture
def fake_rpc():
    fake = FakeSolanaRpc()
    yield fake
    fake.close()
