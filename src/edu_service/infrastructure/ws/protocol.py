"""Realtime frame model shared by the client and the relay endpoint."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from edu_service.application.ports.clock import Clock, epoch_ms
from edu_service.domain.value_objects.enums import (
    EventType,
    NotificationCategory,
    NotificationPriority,
)
from edu_service.domain.value_objects.ids import new_message_id


class RealtimeMessage(BaseModel):
    """``{type, data, timestamp, id}``; timestamp is epoch milliseconds."""

    type: EventType
    data: Any = None
    timestamp: int
    id: str

    @classmethod
    def build(cls, event_type: EventType, data: Any, clock: Clock) -> RealtimeMessage:
        return cls(type=event_type, data=data, timestamp=epoch_ms(clock), id=new_message_id())


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NotificationPayload(_CamelModel):
    """``data`` of an inbound ``notification`` frame."""

    type: str = "info"
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.MEDIUM
    category: NotificationCategory = NotificationCategory.SYSTEM
    action_url: str | None = None
    user_id: str | None = None
    school_id: str | None = None
    metadata: dict[str, Any] = {}


class ActivityPayload(_CamelModel):
    """``data`` of an inbound ``activity_update`` frame."""

    type: str
    entity_id: str
    entity_type: str
    user_id: str
    user_name: str
    changes: list[str] = []
    school_id: str | None = None
