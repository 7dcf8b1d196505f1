# src/pipeline/single_flight.py — v2
"""Collapse concurrent calls for the same key into one in-flight task."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


class SingleFlight:
    """Per-key deduplication of concurrent coroutine calls.

    The first caller for a key starts the work; callers arriving while it
    runs await the same task and receive its result or its exception. The
    key is released as soon as the task settles, so later calls start fresh.

    The shared task belongs to no caller: cancelling any caller, including
    the one that started it, only abandons that caller's wait.
    """

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Task[Any]] = {}

    def in_flight(self, key: str) -> bool:
        return key in self._inflight

    async def do(self, key: str, fn: Callable[[], Awaitable[Any]]) -> Any:
        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(fn())
            self._inflight[key] = task
            task.add_done_callback(lambda t: self._release(key, t))
        else:
            logger.debug("Joining in-flight call: %s", key)
        return await asyncio.shield(task)

    def _release(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled() and task.exception() is not None:
            # every caller may have gone; mark the error as retrieved
            logger.debug("In-flight call %s failed: %s", key, task.exception())
