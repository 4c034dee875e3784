"""asyncio-backed implementation of application.ports.clock.Scheduler."""
from __future__ import annotations

import asyncio
import inspect
import logging

from edu_service.application.ports.clock import TimerCallback

logger = logging.getLogger(__name__)


class AsyncioScheduler:
    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._tasks: set[asyncio.Task[object]] = set()

    def call_later(self, delay: float, callback: TimerCallback) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, self._run, callback)

    def _run(self, callback: TimerCallback) -> None:
        result = callback()
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._tasks.add(task)
            task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[object]) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Scheduled callback failed", exc_info=task.exception())
