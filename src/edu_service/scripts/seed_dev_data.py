"""Seed development data: demo schools, users, a class and its students."""
from __future__ import annotations

import logging

from edu_service.infrastructure.memory.store import CollectionStore
from edu_service.services import collection_service

logger = logging.getLogger(__name__)


def seed(store: CollectionStore) -> dict[str, int]:
    """Populate ``store`` and return the resulting record counts."""
    schools = [
        collection_service.create("schools", fields, store).data
        for fields in (
            {"name": "Central High School", "location": "New York", "isActive": True},
            {"name": "Westside Elementary", "location": "California", "isActive": True},
        )
    ]
    school_id = schools[0]["id"]

    users_data = [
        ("John Doe", "john@example.com", "teacher"),
        ("Jane Smith", "jane@example.com", "student"),
        ("Admin User", "admin@example.com", "admin"),
    ]
    for name, email, role in users_data:
        collection_service.create(
            "users",
            {"name": name, "email": email, "role": role, "schoolId": school_id, "isActive": True},
            store,
        )

    klass = collection_service.create(
        "classes",
        {"name": "Form 1A", "level": "form1", "schoolId": school_id, "isActive": True},
        store,
    ).data
    for name in ("Ana Mballa", "Paul Nkomo", "Grace Tabi"):
        collection_service.create(
            "students",
            {"name": name, "classId": klass["id"], "schoolId": school_id, "isActive": True},
            store,
        )

    counts = {name: n for name, n in store.counts().items() if n}
    logger.info("Seeded demo data: %s", counts)
    return counts
