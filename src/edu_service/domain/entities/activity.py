from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class ActivityUpdate:
    id: str
    type: str  # lesson_plan_updated | quiz_updated | content_updated | user_activity | system_status
    entity_id: str
    entity_type: str
    user_id: str
    user_name: str
    timestamp: datetime
    changes: list[str] = field(default_factory=list)
    school_id: str | None = None
