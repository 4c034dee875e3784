"""Consumer-side state fed by the realtime channel: notifications and activity."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import timedelta
from typing import Any

from pydantic import ValidationError

from edu_service.application.ports.clock import Clock, SystemClock
from edu_service.domain.entities.activity import ActivityUpdate
from edu_service.domain.entities.notification import Notification
from edu_service.domain.value_objects.enums import (
    EventType,
    NotificationCategory,
    NotificationPriority,
)
from edu_service.domain.value_objects.ids import new_message_id
from edu_service.infrastructure.ws.client import RealtimeClient
from edu_service.infrastructure.ws.listeners import Unsubscribe
from edu_service.infrastructure.ws.protocol import ActivityPayload, NotificationPayload

logger = logging.getLogger(__name__)

MAX_NOTIFICATIONS = 100
MAX_UPDATES = 50
MAX_RECENT_ACTIVITY = 10
UPDATE_TTL = timedelta(hours=1)


@dataclass(frozen=True, slots=True)
class FeedStats:
    total_notifications: int
    unread_notifications: int
    recent_activity: list[ActivityUpdate]


class RealtimeFeed:
    """Newest-first notification and activity lists, capped in size."""

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._notifications: list[Notification] = []
        self._updates: list[ActivityUpdate] = []

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    @property
    def updates(self) -> list[ActivityUpdate]:
        return list(self._updates)

    def attach(self, client: RealtimeClient) -> Unsubscribe:
        """Subscribe to the client's notification and activity events."""
        unsubscribers = [
            client.subscribe(EventType.NOTIFICATION, self._on_notification),
            client.subscribe(EventType.ACTIVITY_UPDATE, self._on_activity),
        ]

        def _detach() -> None:
            for unsubscribe in unsubscribers:
                unsubscribe()

        return _detach

    # -- notifications -----------------------------------------------------

    def add_notification(
        self,
        *,
        type: str,
        title: str,
        message: str,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        category: NotificationCategory = NotificationCategory.SYSTEM,
        **extra: Any,
    ) -> Notification:
        notification = Notification(
            id=new_message_id(),
            type=type,
            title=title,
            message=message,
            timestamp=self._clock.now(),
            priority=priority,
            category=category,
            **extra,
        )
        self._notifications = [notification, *self._notifications][:MAX_NOTIFICATIONS]
        return notification

    def mark_as_read(self, notification_id: str) -> None:
        self._notifications = [
            replace(n, read=True) if n.id == notification_id else n
            for n in self._notifications
        ]

    def mark_all_as_read(self) -> None:
        self._notifications = [replace(n, read=True) for n in self._notifications]

    def remove_notification(self, notification_id: str) -> None:
        self._notifications = [n for n in self._notifications if n.id != notification_id]

    def clear_notifications(self) -> None:
        self._notifications = []

    def unread_count(self) -> int:
        return sum(1 for n in self._notifications if not n.read)

    def by_category(self, category: NotificationCategory) -> list[Notification]:
        return [n for n in self._notifications if n.category == category]

    def by_priority(self, priority: NotificationPriority) -> list[Notification]:
        return [n for n in self._notifications if n.priority == priority]

    # -- activity ----------------------------------------------------------

    def add_update(
        self,
        *,
        type: str,
        entity_id: str,
        entity_type: str,
        user_id: str,
        user_name: str,
        changes: list[str] | None = None,
        school_id: str | None = None,
    ) -> ActivityUpdate:
        update = ActivityUpdate(
            id=new_message_id(),
            type=type,
            entity_id=entity_id,
            entity_type=entity_type,
            user_id=user_id,
            user_name=user_name,
            timestamp=self._clock.now(),
            changes=list(changes or []),
            school_id=school_id,
        )
        self._updates = [update, *self._updates][:MAX_UPDATES]
        return update

    def clear_old_updates(self) -> int:
        """Drop updates older than an hour; returns how many were removed."""
        cutoff = self._clock.now() - UPDATE_TTL
        kept = [u for u in self._updates if u.timestamp > cutoff]
        removed = len(self._updates) - len(kept)
        self._updates = kept
        return removed

    def stats(self) -> FeedStats:
        return FeedStats(
            total_notifications=len(self._notifications),
            unread_notifications=self.unread_count(),
            recent_activity=self._updates[:MAX_RECENT_ACTIVITY],
        )

    # -- channel callbacks -------------------------------------------------

    def _on_notification(self, data: Any) -> None:
        try:
            payload = NotificationPayload.model_validate(data)
        except ValidationError:
            logger.warning("Ignoring malformed notification payload: %r", data)
            return
        self.add_notification(**payload.model_dump())

    def _on_activity(self, data: Any) -> None:
        try:
            payload = ActivityPayload.model_validate(data)
        except ValidationError:
            logger.warning("Ignoring malformed activity payload: %r", data)
            return
        self.add_update(**payload.model_dump())
