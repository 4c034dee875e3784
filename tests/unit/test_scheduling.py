from __future__ import annotations

import asyncio

import pytest

from edu_service.infrastructure.scheduling import AsyncioScheduler


@pytest.mark.asyncio
async def test_call_later_runs_plain_and_coroutine_callbacks():
    scheduler = AsyncioScheduler()
    calls: list[str] = []

    async def later() -> None:
        calls.append("async")

    scheduler.call_later(0.01, lambda: calls.append("sync"))
    scheduler.call_later(0.02, later)
    await asyncio.sleep(0.05)

    assert calls == ["sync", "async"]


@pytest.mark.asyncio
async def test_cancelled_timer_never_fires():
    scheduler = AsyncioScheduler()
    calls: list[str] = []

    handle = scheduler.call_later(0.01, lambda: calls.append("fired"))
    handle.cancel()
    await asyncio.sleep(0.03)

    assert calls == []
