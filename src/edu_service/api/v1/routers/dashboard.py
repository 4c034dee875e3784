from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from edu_service.api.deps import CurrentPrincipal, StoreDep
from edu_service.api.v1.routers.collections import envelope_response
from edu_service.services import collection_service

router = APIRouter(prefix="/api", tags=["dashboard"])


@router.get("/dashboard/{school_id}/stats")
async def dashboard_stats(
    school_id: str,
    store: StoreDep,
    _principal: CurrentPrincipal,
) -> dict[str, Any]:
    return collection_service.get_dashboard_stats(school_id, store).to_json_dict()


@router.get("/me/notifications")
async def my_notifications(
    store: StoreDep,
    principal: CurrentPrincipal,
    unread_only: bool = Query(False),
) -> JSONResponse:
    return envelope_response(
        collection_service.find_notifications_by_user(
            principal.user_id, store, unread_only=unread_only,
        )
    )


@router.post("/me/notifications/{notification_id}/read")
async def mark_read(
    notification_id: str,
    store: StoreDep,
    _principal: CurrentPrincipal,
) -> JSONResponse:
    return envelope_response(collection_service.mark_notification_as_read(notification_id, store))
