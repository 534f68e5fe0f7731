"""Cooperative cancellation for translate calls.

A CancelToken is shared by everything one translate call awaits: the
connectivity probe, each HTTP attempt, and the backoff delay. Cancelling
the token abandons outstanding I/O and wakes pending delays at once; the
awaiting code then sees TranslationCancelledError.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, TypeVar

from deepl_translator.core.exceptions import TranslationCancelledError

T = TypeVar("T")


class CancelToken:
    """One-shot cancellation signal."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TranslationCancelledError()

    async def sleep(self, seconds: float) -> None:
        """Sleep for `seconds`, raising TranslationCancelledError on cancel."""
        self.raise_if_cancelled()
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return
        raise TranslationCancelledError()

    async def run(self, awaitable: Awaitable[T]) -> T:
        """Await `awaitable` unless the token is cancelled first.

        On cancellation the inner task is cancelled and awaited, so no I/O
        is left running in the background.
        """
        if self.cancelled:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise TranslationCancelledError()
        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            task.cancel()
            waiter.cancel()
            raise

        if task in done:
            waiter.cancel()
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise TranslationCancelledError()
