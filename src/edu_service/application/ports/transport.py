from __future__ import annotations

from typing import Protocol

NORMAL_CLOSURE = 1000
ABNORMAL_CLOSURE = 1006


class TransportClosed(Exception):
    """Raised by ``Transport.recv`` once the peer or the network closed the socket."""

    def __init__(self, code: int = ABNORMAL_CLOSURE, reason: str = "") -> None:
        self.code = code
        self.reason = reason
        super().__init__(f"transport closed: {code} {reason}".strip())


class Transport(Protocol):
    async def send_text(self, data: str) -> None: ...

    async def recv(self) -> str: ...

    async def close(self, code: int = NORMAL_CLOSURE, reason: str = "") -> None: ...


class TransportFactory(Protocol):
    async def __call__(self, url: str) -> Transport: ...
