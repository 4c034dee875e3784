from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from edu_service.api.deps import get_verifier
from edu_service.application.dto.principal import Principal
from edu_service.application.ports.auth import TokenVerifier
from edu_service.application.ports.clock import SystemClock
from edu_service.config import settings
from edu_service.domain.value_objects.enums import EventType
from edu_service.infrastructure.ws.manager import ConnectionManager
from edu_service.infrastructure.ws.protocol import RealtimeMessage

logger = logging.getLogger(__name__)
router = APIRouter(tags=["websocket"])

manager = ConnectionManager()
_clock = SystemClock()


async def _authenticate(token: str, verifier: TokenVerifier) -> Principal | None:
    try:
        return await verifier.verify(token)
    except Exception:
        logger.debug("WS auth failed", exc_info=True)
        return None


@router.websocket("/ws")
async def ws_realtime(
    websocket: WebSocket,
    token: str = Query(...),
) -> None:
    principal = await _authenticate(token, get_verifier())
    if principal is None:
        await websocket.close(code=4001, reason="Authentication failed")
        return

    pkey = principal.principal_key
    await manager.connect(websocket, pkey)
    await manager.send_to_principal(
        pkey,
        RealtimeMessage.build(
            EventType.USER_STATUS, {"userId": principal.user_id, "status": "online"}, _clock,
        ),
    )

    heartbeat_task = asyncio.create_task(
        _heartbeat(websocket), name=f"ws-heartbeat-{pkey}",
    )
    try:
        await _read_loop(websocket)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", pkey)
    finally:
        manager.disconnect(websocket, pkey)
        await _stop_task(heartbeat_task)


async def _stop_task(task: asyncio.Task[None]) -> None:
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


async def _heartbeat(ws: WebSocket) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await ws.send_text(_heartbeat_frame())
    except Exception:
        logger.debug("WS heartbeat stopped", exc_info=True)


def _heartbeat_frame() -> str:
    message = RealtimeMessage.build(EventType.HEARTBEAT, {"status": "ok"}, _clock)
    return message.model_dump_json()


async def _read_loop(ws: WebSocket) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            message = RealtimeMessage.model_validate_json(raw)
        except ValidationError:
            await ws.send_text(
                RealtimeMessage.build(
                    EventType.SYSTEM_ALERT, {"code": "invalid_payload"}, _clock,
                ).model_dump_json()
            )
            continue

        if message.type == EventType.HEARTBEAT:
            await ws.send_text(_heartbeat_frame())
        else:
            await manager.broadcast(message, exclude=ws)
