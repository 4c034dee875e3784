from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from edu_service.domain.value_objects.enums import BulkAction


class BulkRequest(BaseModel):
    ids: list[str]
    operation: BulkAction
    data: dict[str, Any] | None = None
