"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import inspect
import json
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from edu_service.application.ports.clock import TimerCallback
from edu_service.application.ports.transport import (
    ABNORMAL_CLOSURE,
    NORMAL_CLOSURE,
    TransportClosed,
)
from edu_service.infrastructure.memory.store import CollectionStore
from edu_service.infrastructure.ws.client import RealtimeClient

WS_URL = "ws://test.local/ws"


@dataclass
class FakeClock:
    current: datetime = field(
        default_factory=lambda: datetime(2024, 9, 2, 8, 0, tzinfo=timezone.utc),
    )

    def now(self) -> datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += timedelta(seconds=seconds)


@dataclass
class FakeTimer:
    due: float
    callback: TimerCallback
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class FakeScheduler:
    """Manual timer wheel; ``advance`` fires due callbacks in order."""

    now: float = 0.0
    _timers: list[FakeTimer] = field(default_factory=list)

    def call_later(self, delay: float, callback: TimerCallback) -> FakeTimer:
        timer = FakeTimer(self.now + delay, callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> list[FakeTimer]:
        return [t for t in self._timers if not t.cancelled]

    async def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.pending if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self._timers.remove(timer)
            self.now = timer.due
            result = timer.callback()
            if inspect.isawaitable(result):
                await result
            await settle()
        self.now = target


class FakeTransport:
    def __init__(self) -> None:
        self.sent: list[str] = []
        self.closed_with: int | None = None
        self.fail_send = False
        self._inbox: asyncio.Queue[str | TransportClosed] = asyncio.Queue()

    @property
    def frames(self) -> list[dict[str, Any]]:
        return [json.loads(raw) for raw in self.sent]

    async def send_text(self, data: str) -> None:
        if self.fail_send or self.closed_with is not None:
            raise ConnectionResetError("socket is closed")
        self.sent.append(data)

    async def recv(self) -> str:
        item = await self._inbox.get()
        if isinstance(item, TransportClosed):
            raise item
        return item

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        self.closed_with = code
        self._inbox.put_nowait(TransportClosed(code, reason))

    def feed(self, frame: dict[str, Any] | str) -> None:
        self._inbox.put_nowait(frame if isinstance(frame, str) else json.dumps(frame))

    def drop(self, code: int = ABNORMAL_CLOSURE, reason: str = "going away") -> None:
        self._inbox.put_nowait(TransportClosed(code, reason))


@dataclass
class FakeTransportFactory:
    urls: list[str] = field(default_factory=list)
    transports: list[FakeTransport] = field(default_factory=list)
    failures: int = 0

    async def __call__(self, url: str) -> FakeTransport:
        self.urls.append(url)
        if self.failures:
            self.failures -= 1
            raise ConnectionRefusedError("connection refused")
        transport = FakeTransport()
        self.transports.append(transport)
        return transport

    @property
    def latest(self) -> FakeTransport:
        return self.transports[-1]


async def settle() -> None:
    """Let background reader tasks run."""
    for _ in range(5):
        await asyncio.sleep(0)


def make_frame(event_type: str, data: Any, *, frame_id: str = "f1") -> dict[str, Any]:
    return {"type": event_type, "data": data, "timestamp": 1_725_264_000_000, "id": frame_id}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock: FakeClock) -> CollectionStore:
    return CollectionStore(clock=clock)


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()


@pytest.fixture
def transport_factory() -> FakeTransportFactory:
    return FakeTransportFactory()


@pytest.fixture
def realtime(
    transport_factory: FakeTransportFactory,
    scheduler: FakeScheduler,
    clock: FakeClock,
) -> RealtimeClient:
    return RealtimeClient(
        WS_URL,
        transport_factory,
        scheduler=scheduler,
        clock=clock,
        reconnect_interval=5.0,
        max_reconnect_attempts=5,
        heartbeat_interval=30.0,
    )

