"""Cancellation token passed into each suspension point of a request."""

import asyncio
import inspect
from collections.abc import Awaitable
from typing import Optional, TypeVar

from ragchat.exceptions import RequestCancelledError

T = TypeVar("T")


class CancellationToken:
    """Explicit, caller-owned cancellation signal.

    The token is queried synchronously at poll boundaries via ``cancelled``
    and can also be awaited so that an in-flight request is abandoned as soon
    as the caller cancels.
    """

    def __init__(self, reason: str = "Request aborted by user") -> None:
        self._reason = reason
        self._event: Optional[asyncio.Event] = None
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Trigger the token. Subsequent calls are no-ops."""
        if self._cancelled:
            return
        if reason:
            self._reason = reason
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise RequestCancelledError(self._reason)

    async def wait(self) -> None:
        """Block until the token is triggered."""
        if self._cancelled:
            return
        # Created lazily so tokens can be built outside a running loop.
        if self._event is None:
            self._event = asyncio.Event()
        await self._event.wait()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` unless the token fires first.

        Raises RequestCancelledError (and cancels the pending work) when the
        token wins the race.
        """
        if self._cancelled:
            if inspect.iscoroutine(awaitable):
                awaitable.close()
            raise RequestCancelledError(self._reason)
        work = asyncio.ensure_future(awaitable)
        watcher = asyncio.ensure_future(self.wait())
        try:
            done, _ = await asyncio.wait({work, watcher}, return_when=asyncio.FIRST_COMPLETED)
        except BaseException:
            work.cancel()
            raise
        finally:
            watcher.cancel()

        if work in done:
            return work.result()

        work.cancel()
        raise RequestCancelledError(self._reason)
