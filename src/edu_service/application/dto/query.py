from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from edu_service.domain.value_objects.enums import BulkAction, SortOrder


@dataclass(frozen=True, slots=True)
class QueryOptions:
    """Filter/search/sort/page options for ``find_many``.

    ``filters`` maps a field to a value (equality) or to a list/tuple/set of
    values (membership). ``page`` >= 1 and ``limit`` > 0 are up to the caller.
    """

    filters: dict[str, Any] = field(default_factory=dict)
    search: str | None = None
    sort_by: str | None = None
    sort_order: SortOrder = SortOrder.ASC
    page: int = 1
    limit: int = 10


@dataclass(frozen=True, slots=True)
class BulkOperation:
    ids: list[str]
    operation: BulkAction
    data: dict[str, Any] | None = None
