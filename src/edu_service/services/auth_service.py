"""Mock authentication against the ``users`` collection.

Every account accepts the configured demo password; no password is stored.
"""
from __future__ import annotations

import logging
from typing import Any

from edu_service.application.dto.principal import Principal
from edu_service.application.exceptions import AuthenticationError, ValidationError
from edu_service.application.ports.auth import TokenIssuer
from edu_service.domain.value_objects.enums import UserRole
from edu_service.infrastructure.memory.store import CollectionStore, Record
from edu_service.services import collection_service

logger = logging.getLogger(__name__)


def role_of(user: Record) -> UserRole:
    """Role stored on a user record; missing or unknown roles count as student."""
    raw = user.get("role")
    return UserRole(raw) if raw in UserRole.__members__.values() else UserRole.STUDENT


def _principal_for(user: Record) -> Principal:
    return Principal(user_id=user["id"], email=user["email"], role=role_of(user))


def login(
    email: str,
    password: str,
    demo_password: str,
    store: CollectionStore,
    issuer: TokenIssuer,
) -> tuple[Record, str]:
    found = collection_service.find_user_by_email(email, store)
    if not found.success or password != demo_password:
        logger.info("Rejected login for %s", email)
        raise AuthenticationError("Invalid credentials")
    user = found.data
    return user, issuer.issue(_principal_for(user))


def register(
    fields: dict[str, Any],
    store: CollectionStore,
    issuer: TokenIssuer,
) -> tuple[Record, str]:
    email = fields["email"]
    if collection_service.find_user_by_email(email, store).success:
        raise ValidationError("Email already registered")

    created = collection_service.create(
        "users",
        {
            "name": fields["name"],
            "email": email,
            "role": str(fields.get("role") or UserRole.STUDENT),
            "isActive": True,
            **({"schoolId": fields["school_id"]} if fields.get("school_id") else {}),
        },
        store,
    )
    user = created.data
    logger.info("Registered user %s (%s)", user["id"], user["role"])
    return user, issuer.issue(_principal_for(user))
