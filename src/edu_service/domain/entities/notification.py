from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from edu_service.domain.value_objects.enums import NotificationCategory, NotificationPriority


@dataclass(frozen=True, slots=True)
class Notification:
    id: str
    type: str  # info | success | warning | error | lesson_plan | quiz | content | system
    title: str
    message: str
    timestamp: datetime
    priority: NotificationPriority = NotificationPriority.MEDIUM
    category: NotificationCategory = NotificationCategory.SYSTEM
    read: bool = False
    action_url: str | None = None
    user_id: str | None = None
    school_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
