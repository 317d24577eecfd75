"""
Tests for retry_async: attempt count, exponential backoff, no sleep after the last attempt.
"""

from __future__ import annotations

import asyncio

import pytest

from burn_tracker.core.retry import backoff_delay, retry_async
from fakes import SleepRecorder


def test_backoff_delay_doubles_per_attempt():
    assert backoff_delay(1.0, 1) == 2.0
    assert backoff_delay(1.0, 2) == 4.0
    assert backoff_delay(0.1, 1) == pytest.approx(0.2)


def test_retry_exhausted_reraises_last_error():
    sleeper = SleepRecorder()
    calls = []

    async def _op():
        calls.append(1)
        raise RuntimeError(f"boom {len(calls)}")

    with pytest.raises(RuntimeError, match="boom 3"):
        asyncio.run(
            retry_async(_op, max_attempts=3, base_delay_sec=1.0, label="test", sleep=sleeper)
        )
    assert len(calls) == 3
    assert sleeper.delays == [2.0, 4.0]


def test_retry_returns_first_success():
    sleeper = SleepRecorder()
    calls = []

    async def _op():
        calls.append(1)
        if len(calls) < 2:
            raise ConnectionError("transient")
        return "ok"

    result = asyncio.run(
        retry_async(_op, max_attempts=3, base_delay_sec=0.1, label="test", sleep=sleeper)
    )
    assert result == "ok"
    assert len(calls) == 2
    assert sleeper.delays == [pytest.approx(0.2)]


def test_single_attempt_never_sleeps():
    sleeper = SleepRecorder()

    async def _op():
        raise ValueError("nope")

    with pytest.raises(ValueError):
        asyncio.run(
            retry_async(_op, max_attempts=1, base_delay_sec=1.0, label="test", sleep=sleeper)
        )
    assert sleeper.delays == []


def test_max_attempts_must_be_positive():
    async def _op():
        return 1

    with pytest.raises(ValueError, match="max_attempts"):
        asyncio.run(retry_async(_op, max_attempts=0, base_delay_sec=1.0, label="test"))
