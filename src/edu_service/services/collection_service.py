"""Generic CRUD and query operations over named in-memory collections.

Every operation returns an Envelope; a missing record is reported as
``success=False`` rather than raised.
"""
from __future__ import annotations

import math
from functools import cmp_to_key
from typing import Any

from edu_service.application.dto.envelope import BulkItemResult, Envelope, Pagination
from edu_service.application.dto.query import BulkOperation, QueryOptions
from edu_service.domain.value_objects.enums import BulkAction, SortOrder
from edu_service.domain.value_objects.ids import new_record_id
from edu_service.infrastructure.memory.store import CollectionStore, Record

NOT_FOUND = "Record not found"

_PROTECTED_FIELDS = frozenset({"id", "createdAt"})


def _index_of(rows: list[Record], record_id: str) -> int:
    for index, row in enumerate(rows):
        if row.get("id") == record_id:
            return index
    return -1


def _matches_filters(row: Record, filters: dict[str, Any]) -> bool:
    for key, expected in filters.items():
        value = row.get(key)
        if isinstance(expected, (list, tuple, set, frozenset)):
            # equality, not hashing: record fields may hold lists or dicts
            if not any(value == item for item in expected):
                return False
        elif value != expected:
            return False
    return True


def _matches_search(row: Record, needle: str) -> bool:
    return any(
        isinstance(value, str) and needle in value.casefold()
        for value in row.values()
    )


def _compare(a: Any, b: Any) -> int:
    # missing values sort before present ones; incomparable values keep their order
    if a is None or b is None:
        return (a is not None) - (b is not None)
    try:
        if a < b:
            return -1
        if a > b:
            return 1
    except TypeError:
        return 0
    return 0


def _merge(row: Record, fields: dict[str, Any], store: CollectionStore) -> Record:
    patch = {k: v for k, v in fields.items() if k not in _PROTECTED_FIELDS}
    return {**row, **patch, "updatedAt": store.clock.now()}


def create(collection: str, fields: dict[str, Any], store: CollectionStore) -> Envelope:
    now = store.clock.now()
    record = {**fields, "id": new_record_id(), "createdAt": now, "updatedAt": now}
    store.ensure(collection).append(record)
    return Envelope.ok(record, "Record created successfully")


def find_by_id(collection: str, record_id: str, store: CollectionStore) -> Envelope:
    rows = store.rows(collection)
    index = _index_of(rows, record_id)
    if index == -1:
        return Envelope.fail(NOT_FOUND)
    return Envelope.ok(rows[index])


def find_many(
    collection: str,
    options: QueryOptions,
    store: CollectionStore,
) -> Envelope:
    """Filter, then search, then stable sort, then slice one page."""
    rows = list(store.rows(collection))

    if options.filters:
        rows = [r for r in rows if _matches_filters(r, options.filters)]

    if options.search:
        needle = options.search.casefold()
        rows = [r for r in rows if _matches_search(r, needle)]

    if options.sort_by:
        field = options.sort_by
        rows.sort(
            key=cmp_to_key(lambda a, b: _compare(a.get(field), b.get(field))),
            reverse=options.sort_order == SortOrder.DESC,
        )

    page, limit = options.page, options.limit
    start = (page - 1) * limit
    total = len(rows)
    total_pages = math.ceil(total / limit)

    return Envelope.ok(
        rows[start:start + limit],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )


def update(
    collection: str,
    record_id: str,
    fields: dict[str, Any],
    store: CollectionStore,
) -> Envelope:
    """Shallow merge: nested values in ``fields`` replace, never deep-merge."""
    rows = store.rows(collection)
    index = _index_of(rows, record_id)
    if index == -1:
        return Envelope.fail(NOT_FOUND)
    rows[index] = _merge(rows[index], fields, store)
    return Envelope.ok(rows[index], "Record updated successfully")


def delete(collection: str, record_id: str, store: CollectionStore) -> Envelope:
    rows = store.rows(collection)
    index = _index_of(rows, record_id)
    if index == -1:
        return Envelope.fail(NOT_FOUND)
    del rows[index]
    return Envelope.ok(True, "Record deleted successfully")


def bulk_operation(
    collection: str,
    operation: BulkOperation,
    store: CollectionStore,
) -> Envelope:
    """Apply one action per id; a failing id never aborts the batch."""
    rows = store.rows(collection)
    results: list[BulkItemResult] = []

    for record_id in operation.ids:
        index = _index_of(rows, record_id)
        if index == -1:
            results.append(BulkItemResult(id=record_id, success=False, error=NOT_FOUND))
            continue

        action = operation.operation
        if action == BulkAction.DELETE:
            del rows[index]
        elif action == BulkAction.UPDATE:
            if not operation.data:
                results.append(
                    BulkItemResult(id=record_id, success=False, error="No update data provided"),
                )
                continue
            rows[index] = _merge(rows[index], operation.data, store)
        elif action == BulkAction.ARCHIVE:
            rows[index] = _merge(rows[index], {"isActive": False}, store)
        elif action == BulkAction.UNARCHIVE:
            rows[index] = _merge(rows[index], {"isActive": True}, store)
        results.append(BulkItemResult(id=record_id, success=True))

    return Envelope.ok(results, f"Bulk operation completed: {operation.operation}")


# -- entity helpers ---------------------------------------------------------


def find_user_by_email(email: str, store: CollectionStore) -> Envelope:
    for row in store.rows("users"):
        if row.get("email") == email:
            return Envelope.ok(row)
    return Envelope.fail("User not found")


def find_students_by_class(class_id: str, store: CollectionStore) -> Envelope:
    return Envelope.ok([r for r in store.rows("students") if r.get("classId") == class_id])


def find_classes_by_school(school_id: str, store: CollectionStore) -> Envelope:
    return Envelope.ok([r for r in store.rows("classes") if r.get("schoolId") == school_id])


def find_notifications_by_user(
    user_id: str,
    store: CollectionStore,
    *,
    unread_only: bool = False,
) -> Envelope:
    rows = [r for r in store.rows("notifications") if r.get("userId") == user_id]
    if unread_only:
        rows = [r for r in rows if not r.get("isRead")]
    return Envelope.ok(rows)


def mark_notification_as_read(notification_id: str, store: CollectionStore) -> Envelope:
    return update(
        "notifications",
        notification_id,
        {"isRead": True, "readAt": store.clock.now()},
        store,
    )


def get_dashboard_stats(school_id: str, store: CollectionStore) -> Envelope:
    def for_school(name: str) -> list[Record]:
        return [r for r in store.rows(name) if r.get("schoolId") == school_id]

    users = for_school("users")
    students = for_school("students")
    quizzes = for_school("quizzes")
    lesson_plans = for_school("lessonPlans")

    return Envelope.ok(
        {
            "totalUsers": len(users),
            "totalStudents": len(students),
            "totalClasses": len(for_school("classes")),
            "totalQuizzes": len(quizzes),
            "totalLessonPlans": len(lesson_plans),
            "activeUsers": sum(1 for r in users if r.get("isActive")),
            "activeStudents": sum(1 for r in students if r.get("isActive")),
            "publishedQuizzes": sum(1 for r in quizzes if r.get("isPublished")),
            "publishedLessonPlans": sum(1 for r in lesson_plans if r.get("status") == "published"),
        }
    )
