"""In-process request counters exposed on /health/metrics."""
from __future__ import annotations

import os
import platform
import sys
import time
from collections import Counter
from typing import Any


class RequestMetrics:
    def __init__(self) -> None:
        self.started_at = time.monotonic()
        self.reset()

    def reset(self) -> None:
        self.requests = 0
        self.errors = 0
        self.total_ms = 0.0
        self.by_status: Counter[int] = Counter()
        self.by_route: Counter[str] = Counter()
        self.reset_at = time.time()

    def record(self, method: str, path: str, status_code: int, elapsed_ms: float) -> None:
        self.requests += 1
        self.total_ms += elapsed_ms
        self.by_status[status_code] += 1
        self.by_route[f"{method} {path}"] += 1
        if status_code >= 500:
            self.errors += 1

    @property
    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    def application(self) -> dict[str, Any]:
        avg = self.total_ms / self.requests if self.requests else 0.0
        return {
            "requests": self.requests,
            "errors": self.errors,
            "averageResponseTimeMs": round(avg, 2),
            "byStatus": {str(k): v for k, v in sorted(self.by_status.items())},
            "byRoute": dict(self.by_route.most_common(20)),
            "since": self.reset_at,
        }

    def system(self) -> dict[str, Any]:
        return {
            "uptime": round(self.uptime, 3),
            "pid": os.getpid(),
            "python": sys.version.split()[0],
            "platform": platform.platform(),
            "cpuCount": os.cpu_count(),
        }

    def snapshot(self) -> dict[str, Any]:
        return {"system": self.system(), "application": self.application()}
