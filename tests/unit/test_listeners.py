from __future__ import annotations

import pytest

from edu_service.infrastructure.ws.listeners import ListenerRegistry
from tests.conftest import settle


@pytest.mark.asyncio
async def test_duplicate_registration_is_ignored():
    registry: ListenerRegistry[str] = ListenerRegistry()
    received: list[int] = []

    registry.add("k", received.append)
    registry.add("k", received.append)
    await registry.emit("k", 1)

    assert received == [1]
    assert registry.count("k") == 1


@pytest.mark.asyncio
async def test_listener_may_unsubscribe_during_emit():
    registry: ListenerRegistry[str] = ListenerRegistry()
    calls: list[str] = []
    unsubscribe = None

    def once(_data: object) -> None:
        calls.append("once")
        unsubscribe()

    unsubscribe = registry.add("k", once)
    registry.add("k", lambda _d: calls.append("always"))

    await registry.emit("k", None)
    await registry.emit("k", None)

    assert calls == ["once", "always", "always"]


@pytest.mark.asyncio
async def test_emit_nowait_schedules_coroutines():
    registry: ListenerRegistry[str] = ListenerRegistry()
    received: list[str] = []

    async def listener(data: str) -> None:
        received.append(data)

    def broken(_data: str) -> None:
        raise ValueError("bad")

    registry.add("state", broken)
    registry.add("state", listener)
    registry.emit_nowait("state", "connected")
    await settle()

    assert received == ["connected"]
