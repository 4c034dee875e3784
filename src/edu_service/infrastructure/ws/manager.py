"""In-process WebSocket connection manager for the realtime relay."""
from __future__ import annotations

import logging

from fastapi import WebSocket

from edu_service.infrastructure.ws.protocol import RealtimeMessage

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Tracks relay connections per principal."""

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = {}

    @property
    def connection_count(self) -> int:
        return sum(len(conns) for conns in self._connections.values())

    async def connect(self, ws: WebSocket, principal_key: str) -> None:
        await ws.accept()
        self._connections.setdefault(principal_key, set()).add(ws)
        logger.debug("WS connected: %s (total=%d)", principal_key, self.connection_count)

    def disconnect(self, ws: WebSocket, principal_key: str) -> None:
        conns = self._connections.get(principal_key)
        if conns:
            conns.discard(ws)
            if not conns:
                del self._connections[principal_key]
        logger.debug("WS disconnected: %s", principal_key)

    async def broadcast(self, message: RealtimeMessage, *, exclude: WebSocket | None = None) -> int:
        """Send a frame to every connection except ``exclude``; returns deliveries."""
        raw = message.model_dump_json()
        delivered = 0
        dead: list[tuple[str, WebSocket]] = []
        for pkey, conns in list(self._connections.items()):
            for ws in list(conns):
                if ws is exclude:
                    continue
                try:
                    await ws.send_text(raw)
                    delivered += 1
                except Exception:
                    dead.append((pkey, ws))
        for pkey, ws in dead:
            self.disconnect(ws, pkey)
        return delivered

    async def send_to_principal(self, principal_key: str, message: RealtimeMessage) -> None:
        raw = message.model_dump_json()
        dead: list[WebSocket] = []
        for ws in list(self._connections.get(principal_key, set())):
            try:
                await ws.send_text(raw)
            except Exception:
                dead.append(ws)
        for ws in dead:
            self.disconnect(ws, principal_key)
