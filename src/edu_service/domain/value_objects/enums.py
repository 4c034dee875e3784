from __future__ import annotations

from enum import StrEnum


class ConnectionState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    ERROR = "error"


class EventType(StrEnum):
    NOTIFICATION = "notification"
    ACTIVITY_UPDATE = "activity_update"
    USER_STATUS = "user_status"
    SYSTEM_ALERT = "system_alert"
    QUIZ_UPDATE = "quiz_update"
    LESSON_UPDATE = "lesson_update"
    MESSAGE = "message"
    HEARTBEAT = "heartbeat"


class BulkAction(StrEnum):
    DELETE = "delete"
    UPDATE = "update"
    ARCHIVE = "archive"
    UNARCHIVE = "unarchive"


class SortOrder(StrEnum):
    ASC = "asc"
    DESC = "desc"


class UserRole(StrEnum):
    ADMIN = "admin"
    TEACHER = "teacher"
    PARENT = "parent"
    STUDENT = "student"


class NotificationPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class NotificationCategory(StrEnum):
    LESSON = "lesson"
    QUIZ = "quiz"
    CONTENT = "content"
    SYSTEM = "system"
    COLLABORATION = "collaboration"
    REMINDER = "reminder"
