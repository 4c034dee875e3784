from __future__ import annotations

from typing import Protocol

from edu_service.application.dto.principal import Principal


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> Principal: ...


class TokenIssuer(Protocol):
    def issue(self, principal: Principal) -> str: ...
