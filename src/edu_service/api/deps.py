"""FastAPI dependency injection helpers."""
from __future__ import annotations

from datetime import timedelta
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from edu_service.application.dto.principal import Principal
from edu_service.config import settings
from edu_service.infrastructure.auth.hs256_verifier import HS256Verifier
from edu_service.infrastructure.memory.store import CollectionStore
from edu_service.infrastructure.metrics import RequestMetrics

_bearer_scheme = HTTPBearer()


def get_store(request: Request) -> CollectionStore:
    return request.app.state.store


StoreDep = Annotated[CollectionStore, Depends(get_store)]


def get_metrics(request: Request) -> RequestMetrics:
    return request.app.state.metrics


MetricsDep = Annotated[RequestMetrics, Depends(get_metrics)]


_verifier: HS256Verifier | None = None


def get_verifier() -> HS256Verifier:
    global _verifier  # noqa: PLW0603
    if _verifier is None:
        _verifier = HS256Verifier(
            settings.JWT_SECRET,
            settings.JWT_ALGORITHM,
            timedelta(minutes=settings.JWT_EXPIRES_MINUTES),
        )
    return _verifier


VerifierDep = Annotated[HS256Verifier, Depends(get_verifier)]


async def get_current_principal(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(_bearer_scheme)],
    verifier: VerifierDep,
) -> Principal:
    try:
        return await verifier.verify(credentials.credentials)
    except Exception as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc


CurrentPrincipal = Annotated[Principal, Depends(get_current_principal)]
