"""
Dry run of burn detection against the live RPC; writes nothing.

Usage:
  python -m burn_tracker.tools.dry_run --limit 10
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from burn_tracker.agent_worker.worker import BurnTracker, TrackResult, build_client
from burn_tracker.burn_logging import get_logger
from burn_tracker.config import TrackerSettings, get_settings
from burn_tracker.config.env import mask_url
from burn_tracker.core.exceptions import ConfigError
from burn_tracker.tools.cli import signature_limit_arg

logger = get_logger(__name__)


async def detect(settings: TrackerSettings, limit: int) -> TrackResult:
    async with build_client(settings) as client:
        return await BurnTracker(client, settings).track_burns(limit)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Detect recent burns without storing them.")
    parser.add_argument("--limit", type=signature_limit_arg, default=10)
    args = parser.parse_args(argv)

    try:
        settings = get_settings()
    except ConfigError as e:
        logger.error("dry_run_config_error", error=str(e))
        return 1
    print(f"Target wallet: {settings.target_wallet}")
    print(f"RPC URL: {mask_url(settings.rpc_url)}")

    result = asyncio.run(detect(settings, args.limit))
    print(f"Success: {result.success}")
    print(f"Total checked: {result.total_checked}")
    print(f"Burn events found: {len(result.burn_events)}")
    for index, event in enumerate(result.burn_events, start=1):
        print(f"{index}. {event.signature}")
        print(f"   Time: {event.timestamp}  Amount: {event.amount}  From: {event.from_address}  Token: {event.token}")
    if result.error:
        print(f"Error: {result.error}")
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
