from __future__ import annotations

from enum import StrEnum


class ReminderOffset(StrEnum):
    IN_30_MINUTES = "30m"
    IN_1_HOUR = "1h"
    IN_3_HOURS = "3h"
    TOMORROW = "tomorrow"
    NEXT_WEEK = "nextweek"


class TaskPrivacy(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"


class SupportStatus(StrEnum):
    ACTIVE = "active"
    WAITING = "waiting"
    RESOLVED = "resolved"


class SupportSenderType(StrEnum):
    AI = "ai"
    OPERATOR = "operator"
    USER = "user"


class ChannelAction(StrEnum):
    CREATED = "created"
    RENAMED = "renamed"
    PINNED = "pinned"
    UNPINNED = "unpinned"
    ARCHIVED = "archived"
    UNARCHIVED = "unarchived"
    DELETED = "deleted"
