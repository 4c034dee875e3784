"""Transport adapter over the ``websockets`` asyncio client."""
from __future__ import annotations

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed

from edu_service.application.ports.transport import (
    ABNORMAL_CLOSURE,
    NORMAL_CLOSURE,
    TransportClosed,
)


class WebSocketsTransport:
    """Implements application.ports.transport.Transport."""

    def __init__(self, connection: ClientConnection) -> None:
        self._connection = connection

    async def send_text(self, data: str) -> None:
        await self._connection.send(data)

    async def recv(self) -> str:
        try:
            raw = await self._connection.recv()
        except ConnectionClosed as exc:
            if exc.rcvd is None:
                raise TransportClosed(ABNORMAL_CLOSURE, "") from exc
            raise TransportClosed(exc.rcvd.code, exc.rcvd.reason) from exc
        return raw if isinstance(raw, str) else raw.decode()

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None:
        await self._connection.close(code=code, reason=reason)


async def open_websocket(url: str) -> WebSocketsTransport:
    # heartbeats are sent by the realtime client itself
    connection = await connect(url, ping_interval=None)
    return WebSocketsTransport(connection)
