from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from edu_service.api.deps import MetricsDep, StoreDep
from edu_service.config import settings

router = APIRouter(prefix="/health", tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _store_status(request: Request) -> dict[str, Any]:
    store = getattr(request.app.state, "store", None)
    if store is None:
        return {"status": "unavailable"}
    return {"status": "available", "collections": len(store.names())}


@router.get("")
async def health(request: Request, metrics: MetricsDep) -> dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": _now(),
        "uptime": round(metrics.uptime, 3),
        "store": _store_status(request),
        "version": settings.APP_VERSION,
    }


@router.get("/detailed")
async def health_detailed(request: Request, store: StoreDep, metrics: MetricsDep) -> dict[str, Any]:
    return {
        "status": "healthy",
        "timestamp": _now(),
        "uptime": round(metrics.uptime, 3),
        "store": {**_store_status(request), "records": store.counts()},
        "system": metrics.system(),
        "application": metrics.application(),
        "version": settings.APP_VERSION,
        "environment": settings.APP_ENV,
    }


@router.get("/ready")
async def ready(request: Request) -> JSONResponse:
    store = _store_status(request)
    if store["status"] != "available":
        return JSONResponse(
            status_code=503,
            content={"status": "not ready", "timestamp": _now(), "reason": "Store not initialised"},
        )
    return JSONResponse(content={"status": "ready", "timestamp": _now(), "store": store})


@router.get("/live")
async def live(metrics: MetricsDep) -> dict[str, Any]:
    return {"status": "alive", "timestamp": _now(), "uptime": round(metrics.uptime, 3)}


@router.get("/metrics")
async def get_metrics(metrics: MetricsDep) -> dict[str, Any]:
    return metrics.snapshot()


@router.post("/metrics/reset")
async def reset_metrics(metrics: MetricsDep) -> dict[str, Any]:
    metrics.reset()
    return {"success": True, "message": "Metrics reset successfully"}
