from __future__ import annotations

from dataclasses import dataclass

from edu_service.domain.value_objects.enums import UserRole


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated caller identity extracted from JWT."""

    user_id: str
    email: str
    role: UserRole = UserRole.STUDENT

    @property
    def principal_key(self) -> str:
        """Unique key for WS connection registry."""
        return f"{self.role}:{self.user_id}"
