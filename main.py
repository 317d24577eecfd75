"""
Main entrypoint: one burn tracking run (list → classify → reconcile → run log).

Exits 0 on success and 1 when the run failed (signature listing exhausted its
retries or an unexpected error occurred). Meant to be invoked by an external
scheduler; runs must not overlap.

Env: RPC_URL, TARGET_WALLET, TOKEN_MINT, MAX_RPC_RETRIES, BATCH_SIZE, DATABASE_URL / DB_PATH, etc.

Read API: python main.py --serve (API_HOST / API_PORT), or
  uvicorn burn_tracker.api_server.app:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import argparse
import asyncio
import os
import sys

# Configure structured JSON logging before other imports that may log
from burn_tracker.burn_logging import get_logger
from burn_tracker.tools.cli import signature_limit_arg

logger = get_logger("main")


def serve(settings) -> int:
    """Run the read-only API with uvicorn in the main thread."""
    from burn_tracker.api_server.server import create_app
    import uvicorn

    app = create_app(settings=settings)
    logger.info("main_server_starting", host=settings.api_host, port=settings.api_port)
    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Track token burns for the configured wallet (one run).")
    parser.add_argument(
        "--limit",
        type=signature_limit_arg,
        default=None,
        help="Recent signatures to check, 1..1000 (default: SIGNATURE_LIMIT or 100)",
    )
    parser.add_argument("--serve", action="store_true", help="Serve the read API instead of running the tracker")
    args = parser.parse_args(argv)

    from burn_tracker.agent_worker.worker import run_once
    from burn_tracker.config import get_settings
    from burn_tracker.core.exceptions import ConfigError

    try:
        settings = get_settings()
    except ConfigError as e:
        logger.error("main_config_error", error=str(e))
        return 1

    if args.serve:
        return serve(settings)

    outcome = asyncio.run(run_once(settings, limit=args.limit))
    summary = outcome.summary
    if summary.success:
        logger.info(
            "main_run_ok",
            checked=summary.total_checked,
            burns=len(outcome.burn_events),
            inserted=outcome.reconcile.inserted,
            skipped=outcome.reconcile.skipped,
        )
        return 0
    logger.error("main_run_failed", error=summary.error_text)
    return 1


if __name__ == "__main__":
    sys.exit(main())
