"""Coalescing of concurrent identical requests.

When several callers ask for the same request key at the same time, only the
first one starts a network call. The others await the same task and see the
same result or the same exception. The entry is dropped as soon as the task
settles, so the next call for that key starts fresh.

Cancelling any caller cancels the shared task, and with it every other
caller waiting on that key.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any, TypeVar

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InFlightRequests:
    """Registry of pending request tasks keyed by request key."""

    def __init__(self) -> None:
        self._pending: dict[str, asyncio.Task[Any]] = {}

    def __len__(self) -> int:
        return len(self._pending)

    async def run(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        """Run factory() for key, or join the call already in flight.

        Args:
            key: Request key identifying identical calls
            factory: Zero-argument coroutine function performing the call

        Returns:
            The result of the (possibly shared) call
        """
        task = self._pending.get(key)
        if task is None:
            task = asyncio.ensure_future(self._settle(key, factory))
            self._pending[key] = task
            task.add_done_callback(lambda done: self._release(key, done))
        else:
            logger.debug("Joining in-flight request %s", key)
        return await task

    async def _settle(self, key: str, factory: Callable[[], Awaitable[T]]) -> T:
        try:
            return await factory()
        finally:
            current = asyncio.current_task()
            if current is not None:
                self._release(key, current)

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._pending.get(key) is task:
            del self._pending[key]
