from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Protocol

TimerCallback = Callable[[], Awaitable[Any] | None]


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Default wall-clock implementation."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def epoch_ms(clock: Clock) -> int:
    return int(clock.now().timestamp() * 1000)


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: TimerCallback) -> TimerHandle:
        """Run ``callback`` once after ``delay`` seconds.

        Coroutine results are scheduled on the running loop.
        """
        ...
