"""Single-flight guard for coroutines keyed by operation name."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")


class SingleFlight:
    """Collapse concurrent runs of the same named operation into one.

    While an operation is in flight, later callers with the same key await the
    original task instead of starting a new one. Once it settles the key is
    released and the next call starts fresh.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[Any]] = {}

    def is_running(self, key: str) -> bool:
        task = self._inflight.get(key)
        return task is not None and not task.done()

    async def run(self, key: str, fn: Callable[[], Awaitable[T]]) -> T:
        task = self._inflight.get(key)
        if task is not None and not task.done():
            logger.debug("single_flight_joined", key=key)
            return await asyncio.shield(task)

        task = asyncio.ensure_future(fn())
        self._inflight[key] = task
        task.add_done_callback(lambda t, k=key: self._release(k, t))
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
