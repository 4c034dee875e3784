"""Request timing middleware feeding app.state.metrics."""
from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


def _route_path(request: Request) -> str:
    # route templates keep /api/{collection} from exploding the per-route counters
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


class RequestTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        metrics = request.app.state.metrics
        metrics.record(request.method, _route_path(request), response.status_code, elapsed_ms)

        level = logging.WARNING if response.status_code >= 500 else logging.INFO
        logger.log(
            level,
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
