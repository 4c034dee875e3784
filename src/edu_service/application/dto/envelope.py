"""Uniform result shape returned by every collection service operation."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class Pagination(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class BulkItemResult(BaseModel):
    id: str
    success: bool
    error: str | None = None


class Envelope(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None
    message: str | None = None
    pagination: Pagination | None = None

    @classmethod
    def ok(cls, data: Any = None, message: str | None = None, **kwargs: Any) -> Envelope:
        return cls(success=True, data=data, message=message, **kwargs)

    @classmethod
    def fail(cls, error: str) -> Envelope:
        return cls(success=False, error=error)

    def to_json_dict(self) -> dict[str, Any]:
        """Top-level keys that are None are left out; record contents are kept as-is."""
        body: dict[str, Any] = {"success": self.success}
        for key in ("data", "error", "message"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        if self.pagination is not None:
            body["pagination"] = self.pagination.model_dump(by_alias=True)
        return body
