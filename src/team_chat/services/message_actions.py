"""Bookmarks, reminders, forwarding and links for messages of the active conversation."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from team_chat.application.ports.bus import EventPublisher
from team_chat.application.ports.clock import Clock, SystemClock
from team_chat.config import settings
from team_chat.domain.value_objects.enums import ReminderOffset
from team_chat.services.message_store import MessageStore

logger = logging.getLogger(__name__)

REMINDER_LABELS: dict[ReminderOffset, str] = {
    ReminderOffset.IN_30_MINUTES: "in 30 minutes",
    ReminderOffset.IN_1_HOUR: "in 1 hour",
    ReminderOffset.IN_3_HOURS: "in 3 hours",
    ReminderOffset.TOMORROW: "tomorrow",
    ReminderOffset.NEXT_WEEK: "next week",
}

UNSPECIFIED_TIME_LABEL = "unspecified time"

_REMINDER_DELAYS: dict[ReminderOffset, timedelta] = {
    ReminderOffset.IN_30_MINUTES: timedelta(minutes=30),
    ReminderOffset.IN_1_HOUR: timedelta(hours=1),
    ReminderOffset.IN_3_HOURS: timedelta(hours=3),
    ReminderOffset.TOMORROW: timedelta(days=1),
    ReminderOffset.NEXT_WEEK: timedelta(weeks=1),
}


@dataclass(frozen=True, slots=True)
class Reminder:
    message_id: str
    offset: ReminderOffset | None
    label: str
    due_at: datetime | None


def parse_reminder_offset(code: str) -> ReminderOffset | None:
    try:
        return ReminderOffset(code)
    except ValueError:
        return None


def reminder_label(code: str) -> str:
    offset = parse_reminder_offset(code)
    return REMINDER_LABELS[offset] if offset is not None else UNSPECIFIED_TIME_LABEL


class MessageActions:
    def __init__(
        self,
        store: MessageStore,
        publisher: EventPublisher | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._publisher = publisher
        self._clock = clock or SystemClock()
        self._bookmarks: set[str] = set()
        self._reminders: list[Reminder] = []

    @property
    def bookmarks(self) -> frozenset[str]:
        return frozenset(self._bookmarks)

    @property
    def reminders(self) -> list[Reminder]:
        return list(self._reminders)

    def toggle_bookmark(self, message_id: str) -> bool | None:
        """Return the new bookmark state, or ``None`` for an unknown message."""
        if self._store.get(message_id) is None:
            return None
        if message_id in self._bookmarks:
            self._bookmarks.discard(message_id)
            return False
        self._bookmarks.add(message_id)
        return True

    def remind(self, message_id: str, code: str) -> Reminder | None:
        if self._store.get(message_id) is None:
            return None
        offset = parse_reminder_offset(code)
        due_at = self._clock.now() + _REMINDER_DELAYS[offset] if offset is not None else None
        reminder = Reminder(
            message_id=message_id,
            offset=offset,
            label=reminder_label(code),
            due_at=due_at,
        )
        self._reminders.append(reminder)
        self._publish(
            "chat.reminder_scheduled",
            {
                "message_id": message_id,
                "label": reminder.label,
                "due_at": due_at.isoformat() if due_at else None,
            },
        )
        return reminder

    def forward(self, message_id: str, target_conversation_id: str) -> bool:
        msg = self._store.get(message_id)
        if msg is None:
            return False
        self._publish(
            "chat.message_forwarded",
            {
                "message_id": msg.id,
                "source_conversation_id": msg.conversation_id,
                "target_conversation_id": target_conversation_id,
                "content": msg.content,
                "sender_name": msg.sender.name,
            },
        )
        return True

    def copy_link(self, message_id: str) -> str | None:
        msg = self._store.get(message_id)
        if msg is None:
            return None
        return f"{settings.LINK_BASE_URL}/chat/{msg.conversation_id}?message={msg.id}"

    def forget(self, message_id: str) -> None:
        """Drop bookmarks and reminders of a deleted message."""
        self._bookmarks.discard(message_id)
        self._reminders = [r for r in self._reminders if r.message_id != message_id]

    def _publish(self, event_type: str, payload: dict) -> None:
        if self._publisher is not None:
            self._publisher.publish(event_type, payload)
        logger.debug("%s %s", event_type, payload.get("message_id"))
