"""CLI entry point for running a search from the terminal."""

from __future__ import annotations

import argparse
import asyncio
import signal
import sys
from typing import Optional

from ragchat._internal.utils import get_logger, setup_logging
from ragchat.cancellation import CancellationToken
from ragchat.client import Client
from ragchat.exceptions import RagChatError

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Submit a query to the legal search service and print the answer",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("query", help="Question to search for")
    parser.add_argument("--base-url", help="Search service URL (env: RAG_SERVER_URL)")
    parser.add_argument(
        "--poll-interval-ms",
        type=int,
        help="Delay between status checks (env: RAG_POLL_INTERVAL_MS)",
    )
    parser.add_argument(
        "--max-poll-attempts",
        type=int,
        help="Status checks before giving up (env: RAG_MAX_POLL_ATTEMPTS)",
    )
    parser.add_argument("--api-key", help="Bearer credential (env: RAG_API_KEY)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level",
    )
    return parser


def _write_chunk(chunk: str) -> None:
    sys.stdout.write(chunk)
    sys.stdout.flush()


async def search_main(argv: Optional[list[str]] = None) -> int:
    """Run one search and stream the answer to stdout."""
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        client = Client.from_env(
            base_url=args.base_url,
            poll_interval_ms=args.poll_interval_ms,
            max_poll_attempts=args.max_poll_attempts,
            api_key=args.api_key,
        )
    except RagChatError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    token = CancellationToken()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, token.cancel)
        handler_installed = True
    except (NotImplementedError, RuntimeError):
        # Not supported on this platform; Ctrl-C falls back to KeyboardInterrupt.
        handler_installed = False

    try:
        async with client:
            await client.send_completion([args.query], on_progress=_write_chunk, cancel_token=token)
    except RagChatError as exc:
        logger.error("Search failed: %s", exc)
        return 1
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)

    sys.stdout.write("\n")
    return 0


def search_main_sync() -> None:
    """Synchronous entry point for CLI."""
    sys.exit(asyncio.run(search_main()))


__all__ = ["build_parser", "search_main", "search_main_sync"]
