from __future__ import annotations

from datetime import datetime, timedelta, timezone

import jwt

from edu_service.application.dto.principal import Principal
from edu_service.domain.value_objects.enums import UserRole


class HS256Verifier:
    """Issue and verify JWTs signed with a shared HS256 secret."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expires_in: timedelta = timedelta(hours=24),
    ) -> None:
        self._secret = secret
        self._algorithm = algorithm
        self._expires_in = expires_in

    def issue(self, principal: Principal) -> str:
        now = datetime.now(timezone.utc)
        return jwt.encode(
            {
                "sub": principal.user_id,
                "email": principal.email,
                "role": str(principal.role),
                "iat": now,
                "exp": now + self._expires_in,
            },
            self._secret,
            algorithm=self._algorithm,
        )

    async def verify(self, token: str) -> Principal:
        payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        role_raw = payload.get("role", UserRole.STUDENT)
        role = UserRole(role_raw) if role_raw in UserRole.__members__.values() else UserRole.STUDENT
        return Principal(
            user_id=str(payload["sub"]),
            email=payload.get("email", ""),
            role=role,
        )
