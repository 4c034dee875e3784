from __future__ import annotations

from fastapi import APIRouter, status

from edu_service.api.deps import StoreDep, VerifierDep
from edu_service.api.v1.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserOut
from edu_service.config import settings
from edu_service.infrastructure.memory.store import Record
from edu_service.services import auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_out(user: Record) -> UserOut:
    # users created through /api/users may lack a name or carry a free-form role
    return UserOut(
        id=user["id"],
        name=user.get("name"),
        email=user["email"],
        role=auth_service.role_of(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(body: LoginRequest, store: StoreDep, verifier: VerifierDep) -> AuthResponse:
    user, token = auth_service.login(
        body.email, body.password, settings.DEMO_PASSWORD, store, verifier,
    )
    return AuthResponse(message="Login successful", user=_user_out(user), token=token)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, store: StoreDep, verifier: VerifierDep) -> AuthResponse:
    user, token = auth_service.register(body.model_dump(), store, verifier)
    return AuthResponse(message="Registration successful", user=_user_out(user), token=token)
