"""Process-local named collections backing the collection service."""
from __future__ import annotations

from typing import Any, Iterable

from edu_service.application.ports.clock import Clock, SystemClock

Record = dict[str, Any]

DEFAULT_COLLECTIONS: tuple[str, ...] = (
    "users",
    "schools",
    "classes",
    "students",
    "parents",
    "subjects",
    "lessonPlans",
    "quizzes",
    "contentLibrary",
    "notifications",
    "attendance",
    "grades",
    "messages",
    "systemSettings",
)


class CollectionStore:
    """Mapping of collection name to an ordered list of records.

    Operations mutate the lists in place with no locking or transactions;
    two callers touching the same collection interleave freely.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        collections: Iterable[str] = DEFAULT_COLLECTIONS,
    ) -> None:
        self.clock = clock or SystemClock()
        self._data: dict[str, list[Record]] = {name: [] for name in collections}

    def rows(self, name: str) -> list[Record]:
        """Records of ``name``; unknown collections read as empty."""
        return self._data.get(name, [])

    def ensure(self, name: str) -> list[Record]:
        return self._data.setdefault(name, [])

    def names(self) -> list[str]:
        return list(self._data)

    def counts(self) -> dict[str, int]:
        return {name: len(rows) for name, rows in self._data.items()}

    def clear(self) -> None:
        for rows in self._data.values():
            rows.clear()
