"""Realtime channel client: one WebSocket connection with reconnect and heartbeat."""
from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from pydantic import ValidationError

from edu_service.application.exceptions import TransportError
from edu_service.application.ports.clock import (
    Clock,
    Scheduler,
    SystemClock,
    TimerHandle,
    epoch_ms,
)
from edu_service.application.ports.transport import (
    ABNORMAL_CLOSURE,
    NORMAL_CLOSURE,
    Transport,
    TransportClosed,
    TransportFactory,
)
from edu_service.config import settings
from edu_service.domain.value_objects.enums import ConnectionState, EventType
from edu_service.infrastructure.scheduling import AsyncioScheduler
from edu_service.infrastructure.ws.listeners import Listener, ListenerRegistry, Unsubscribe
from edu_service.infrastructure.ws.protocol import RealtimeMessage

logger = logging.getLogger(__name__)

_STATE_KEY = "state"


class RealtimeClient:
    """Typed publish/subscribe over a single persistent connection.

    Messages sent while not connected are queued and flushed, in order, on
    the next successful connect. Any closure other than a normal one (1000)
    triggers a fixed-interval reconnect, up to ``max_reconnect_attempts``;
    after that the client stays in ``ERROR`` until ``connect`` is called
    again.
    """

    def __init__(
        self,
        url: str,
        transport_factory: TransportFactory,
        *,
        scheduler: Scheduler | None = None,
        clock: Clock | None = None,
        reconnect_interval: float = settings.WS_RECONNECT_INTERVAL_SECONDS,
        max_reconnect_attempts: int = settings.WS_MAX_RECONNECT_ATTEMPTS,
        heartbeat_interval: float = settings.WS_HEARTBEAT_SECONDS,
    ) -> None:
        self._url = url
        self._transport_factory = transport_factory
        self._scheduler = scheduler or AsyncioScheduler()
        self._clock = clock or SystemClock()
        self._reconnect_interval = reconnect_interval
        self._max_reconnect_attempts = max_reconnect_attempts
        self._heartbeat_interval = heartbeat_interval

        self._state = ConnectionState.DISCONNECTED
        self._token: str | None = None
        self._transport: Transport | None = None
        self._reader_task: asyncio.Task[None] | None = None
        self._reconnect_timer: TimerHandle | None = None
        self._heartbeat_timer: TimerHandle | None = None
        self._reconnect_attempts = 0
        self._queue: deque[RealtimeMessage] = deque()
        self._listeners: ListenerRegistry[EventType] = ListenerRegistry()
        self._state_listeners: ListenerRegistry[str] = ListenerRegistry()

    # -- accessors ---------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state == ConnectionState.CONNECTED

    @property
    def reconnect_attempts(self) -> int:
        return self._reconnect_attempts

    @property
    def queued(self) -> int:
        return len(self._queue)

    # -- lifecycle ---------------------------------------------------------

    async def connect(self, token: str) -> bool:
        """Open the transport and flush queued messages.

        Raises TransportError when the transport cannot be opened. The
        failure counts as an abnormal closure, so a reconnect is scheduled
        unless the attempt ceiling has been reached.
        """
        self._token = token
        self._cancel_reconnect()
        await self._drop_transport()

        self._set_state(ConnectionState.CONNECTING)
        try:
            transport = await self._transport_factory(self._connection_url(token))
        except Exception as exc:
            logger.warning("Realtime connect to %s failed: %s", self._url, exc)
            self._set_state(ConnectionState.ERROR)
            self._schedule_reconnect()
            raise TransportError(str(exc)) from exc

        self._transport = transport
        self._reconnect_attempts = 0
        await self._flush_queue(transport)
        self._set_state(ConnectionState.CONNECTED)
        logger.info("Realtime channel connected to %s", self._url)
        self._start_heartbeat()
        self._reader_task = asyncio.create_task(
            self._read_loop(transport), name="realtime-reader",
        )
        return True

    async def disconnect(self) -> None:
        """Close with a normal closure; no reconnect follows. Idempotent."""
        self._cancel_reconnect()
        self._stop_heartbeat()
        await self._drop_transport()
        self._set_state(ConnectionState.DISCONNECTED)

    # -- messaging ---------------------------------------------------------

    async def send(self, event_type: EventType, data: Any = None) -> bool:
        """Write a message, or queue it when not connected.

        Returns True only when the frame was written to the transport.
        """
        message = RealtimeMessage.build(event_type, data, self._clock)
        if self._state != ConnectionState.CONNECTED or self._transport is None:
            self._queue.append(message)
            logger.debug("Queued %s message (queue=%d)", event_type, len(self._queue))
            return False
        return await self._write(self._transport, message)

    def subscribe(self, event_type: EventType, callback: Listener) -> Unsubscribe:
        return self._listeners.add(EventType(event_type), callback)

    def unsubscribe(self, event_type: EventType, callback: Listener) -> None:
        self._listeners.remove(EventType(event_type), callback)

    def on_state_change(self, callback: Listener) -> Unsubscribe:
        """Register a callback receiving the new ConnectionState on every transition."""
        return self._state_listeners.add(_STATE_KEY, callback)

    # -- internals ---------------------------------------------------------

    def _connection_url(self, token: str) -> str:
        parts = urlsplit(self._url)
        query = parse_qsl(parts.query, keep_blank_values=True)
        query.append(("token", token))
        return urlunsplit(parts._replace(query=urlencode(query)))

    def _set_state(self, state: ConnectionState) -> None:
        if state == self._state:
            return
        logger.debug("Realtime state %s -> %s", self._state, state)
        self._state = state
        self._state_listeners.emit_nowait(_STATE_KEY, state)

    async def _write(self, transport: Transport, message: RealtimeMessage) -> bool:
        try:
            await transport.send_text(message.model_dump_json())
        except Exception:
            logger.exception("Error sending realtime %s message", message.type)
            return False
        return True

    async def _flush_queue(self, transport: Transport) -> None:
        if not self._queue:
            return
        logger.info("Processing %d queued messages", len(self._queue))
        while self._queue:
            message = self._queue.popleft()
            if not await self._write(transport, message):
                self._queue.appendleft(message)
                break

    async def _read_loop(self, transport: Transport) -> None:
        try:
            while True:
                raw = await transport.recv()
                await self._dispatch(raw)
        except TransportClosed as exc:
            closed = exc
        except Exception as exc:
            logger.exception("Realtime transport read failed")
            closed = TransportClosed(ABNORMAL_CLOSURE, str(exc))

        if transport is self._transport:
            self._reader_task = None
            self._on_closed(closed.code, closed.reason)

    async def _dispatch(self, raw: str) -> None:
        try:
            message = RealtimeMessage.model_validate_json(raw)
        except ValidationError:
            logger.warning("Dropping malformed realtime frame: %.200s", raw)
            return
        if message.type == EventType.HEARTBEAT:
            return
        await self._listeners.emit(message.type, message.data)

    def _on_closed(self, code: int, reason: str) -> None:
        logger.info("Realtime channel closed: %s %s", code, reason)
        self._transport = None
        self._stop_heartbeat()
        self._set_state(ConnectionState.DISCONNECTED)
        if code != NORMAL_CLOSURE:
            self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        if self._reconnect_attempts >= self._max_reconnect_attempts:
            logger.warning(
                "Max reconnection attempts reached (%d)", self._max_reconnect_attempts,
            )
            self._set_state(ConnectionState.ERROR)
            return

        self._set_state(ConnectionState.RECONNECTING)
        self._reconnect_attempts += 1
        logger.info(
            "Scheduling reconnection attempt %d in %.1fs",
            self._reconnect_attempts,
            self._reconnect_interval,
        )
        self._reconnect_timer = self._scheduler.call_later(
            self._reconnect_interval, self._reconnect,
        )

    async def _reconnect(self) -> None:
        self._reconnect_timer = None
        if self._token is None:
            return
        try:
            await self.connect(self._token)
        except TransportError:
            # connect has already scheduled the next attempt
            pass

    def _cancel_reconnect(self) -> None:
        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None

    def _start_heartbeat(self) -> None:
        self._stop_heartbeat()
        self._heartbeat_timer = self._scheduler.call_later(
            self._heartbeat_interval, self._heartbeat,
        )

    def _stop_heartbeat(self) -> None:
        if self._heartbeat_timer is not None:
            self._heartbeat_timer.cancel()
            self._heartbeat_timer = None

    async def _heartbeat(self) -> None:
        self._heartbeat_timer = None
        if not self.is_connected:
            return
        self._start_heartbeat()
        await self.send(EventType.HEARTBEAT, {"timestamp": epoch_ms(self._clock)})

    async def _drop_transport(self) -> None:
        transport, self._transport = self._transport, None
        task, self._reader_task = self._reader_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if transport is not None:
            try:
                await transport.close(NORMAL_CLOSURE, "Client disconnect")
            except Exception:
                logger.warning("Error closing realtime transport", exc_info=True)


def create_realtime_client(url: str | None = None) -> RealtimeClient:
    """Client wired to the ``websockets`` transport and settings defaults."""
    from edu_service.infrastructure.ws.websockets_transport import open_websocket

    return RealtimeClient(url or settings.WS_URL, open_websocket)
