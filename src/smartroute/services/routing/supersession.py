"""Cancel an in-flight route request when a newer one arrives for the same client."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, TypeVar

from ...errors import RequestSupersededError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class LatestRequestRunner:
    """Keeps at most one running task per session key.

    A superseded caller receives ``RequestSupersededError``, a subclass of
    ``asyncio.CancelledError``. Cancelling the caller itself cancels its task.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task] = {}
        self._superseded: set[asyncio.Task] = set()

    async def run(self, key: str, awaitable: Awaitable[T]) -> T:
        previous = self._tasks.get(key)
        if previous is not None and not previous.done():
            logger.info(f"Superseding in-flight route request for session {key}")
            self._superseded.add(previous)
            previous.cancel()

        task = asyncio.ensure_future(awaitable)
        self._tasks[key] = task
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._superseded:
                raise RequestSupersededError(f"Request for session {key} was superseded") from None
            raise
        finally:
            self._superseded.discard(task)
            if self._tasks.get(key) is task:
                del self._tasks[key]

    def in_flight(self, key: str) -> bool:
        task = self._tasks.get(key)
        return task is not None and not task.done()
