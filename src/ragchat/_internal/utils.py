"""Logging and timing helpers shared across the package."""

import asyncio
import logging
from typing import Union

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)


def setup_logging(level: Union[str, int] = "INFO") -> None:
    """Configure root logging for command-line use."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


async def sleep_ms(milliseconds: float) -> None:
    """Suspend the current task for the given number of milliseconds."""
    await asyncio.sleep(milliseconds / 1000)
