"""
Import burns from known transaction signatures.

Fetches and classifies each signature (no wallet listing), then stores the
burns found. Already-stored signatures are skipped.

Usage:
  python -m burn_tracker.tools.import_burns SIG [SIG ...]
  python -m burn_tracker.tools.import_burns --file signatures.txt
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from burn_tracker.agent_worker.worker import import_signatures
from burn_tracker.burn_logging import get_logger
from burn_tracker.config import get_settings
from burn_tracker.core.exceptions import BurnTrackerError

logger = get_logger(__name__)


def read_signatures(args: argparse.Namespace) -> list[str]:
    sigs = list(args.signatures or [])
    if args.file:
        for line in Path(args.file).read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line and not line.startswith("#"):
                sigs.append(line)
    # Keep first occurrence order
    return list(dict.fromkeys(sigs))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import burn events from known signatures.")
    parser.add_argument("signatures", nargs="*", help="Transaction signatures (base58)")
    parser.add_argument("--file", help="File with one signature per line")
    args = parser.parse_args(argv)

    signatures = read_signatures(args)
    if not signatures:
        parser.error("no signatures given")

    try:
        settings = get_settings()
        events, result = asyncio.run(import_signatures(signatures, settings))
    except BurnTrackerError as e:
        logger.error("import_failed", error=str(e))
        return 1

    for event in events:
        print(f"BURN {event.signature} amount={event.amount} from={event.from_address} at={event.timestamp}")
    print(
        f"processed={len(signatures)} burns={len(events)} "
        f"inserted={result.inserted} skipped={result.skipped} failed={result.failed}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
