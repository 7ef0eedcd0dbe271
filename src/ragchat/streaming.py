"""Simulated incremental delivery of a finished answer."""

import inspect
from typing import Any, Callable

from ragchat._internal.utils import sleep_ms

CHUNK_SIZE = 50
CHUNK_DELAY_MS = 10

ProgressSink = Callable[[str], Any]


def iter_chunks(text: str, chunk_size: int = CHUNK_SIZE) -> list[str]:
    """Split ``text`` into consecutive pieces of at most ``chunk_size`` chars."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    return [text[i : i + chunk_size] for i in range(0, len(text), chunk_size)]


async def stream_text(
    text: str,
    on_progress: ProgressSink,
    chunk_size: int = CHUNK_SIZE,
    delay_ms: float = CHUNK_DELAY_MS,
) -> int:
    """Feed ``text`` to ``on_progress`` chunk by chunk with a typing delay.

    The sink may be a plain callable or return an awaitable. Returns the
    number of chunks delivered.
    """
    count = 0
    for chunk in iter_chunks(text, chunk_size):
        outcome = on_progress(chunk)
        if inspect.isawaitable(outcome):
            await outcome
        count += 1
        await sleep_ms(delay_ms)
    return count
