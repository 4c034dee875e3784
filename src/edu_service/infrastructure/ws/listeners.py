"""Per-key listener registry used for realtime event fan-out."""
from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Generic, Hashable, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)

Listener = Callable[[Any], Awaitable[None] | None]
Unsubscribe = Callable[[], None]


class ListenerRegistry(Generic[K]):
    """Callbacks per key, invoked in registration order.

    A callback that raises is logged and skipped; the remaining callbacks
    still run. Registering the same callback twice under one key is a no-op.
    """

    def __init__(self) -> None:
        self._listeners: dict[K, list[Listener]] = {}
        self._pending: set[asyncio.Task[Any]] = set()

    def add(self, key: K, callback: Listener) -> Unsubscribe:
        callbacks = self._listeners.setdefault(key, [])
        if callback not in callbacks:
            callbacks.append(callback)

        def _unsubscribe() -> None:
            self.remove(key, callback)

        return _unsubscribe

    def remove(self, key: K, callback: Listener) -> None:
        callbacks = self._listeners.get(key)
        if callbacks and callback in callbacks:
            callbacks.remove(callback)
            if not callbacks:
                del self._listeners[key]

    def count(self, key: K) -> int:
        return len(self._listeners.get(key, ()))

    async def emit(self, key: K, data: Any) -> None:
        for callback in list(self._listeners.get(key, ())):
            try:
                result = callback(data)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Error in listener for %s", key)

    def emit_nowait(self, key: K, data: Any) -> None:
        """Synchronous variant; coroutine results are scheduled as tasks."""
        for callback in list(self._listeners.get(key, ())):
            try:
                result = callback(data)
            except Exception:
                logger.exception("Error in listener for %s", key)
                continue
            if inspect.isawaitable(result):
                task = asyncio.ensure_future(result)
                self._pending.add(task)
                task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Error in async listener", exc_info=task.exception())
