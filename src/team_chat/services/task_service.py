from __future__ import annotations

import logging

from team_chat.application.dto.task import TaskDraft
from team_chat.application.exceptions import ValidationError
from team_chat.application.ports.bus import EventPublisher
from team_chat.domain.entities.message import Message
from team_chat.services.message_store import MessageStore

logger = logging.getLogger(__name__)


def can_create_task(message: Message) -> bool:
    """Whether the message should offer the create-task action."""
    has_signal = bool(message.mentions or message.document_refs or message.is_task_candidate)
    return has_signal and not message.task_created


def draft_task(message: Message) -> TaskDraft:
    """Pre-fill a task from the message: its text and first mentioned user."""
    return TaskDraft(
        title="",
        description=message.content,
        assignee=message.mentions[0] if message.mentions else "",
    )


def create_task(
    store: MessageStore,
    message_id: str,
    draft: TaskDraft,
    publisher: EventPublisher | None = None,
) -> TaskDraft | None:
    """Complete the task workflow for a message.

    Returns ``None`` when the message is gone or already has a task.
    """
    if not draft.title.strip():
        raise ValidationError("Task title must not be empty")
    if not store.mark_task_created(message_id):
        return None

    logger.info("Task %r created from message %s", draft.title, message_id)
    if publisher is not None:
        publisher.publish(
            "chat.task_created",
            {
                "message_id": message_id,
                "conversation_id": store.conversation_id,
                "title": draft.title.strip(),
                "description": draft.description,
                "assignee": draft.assignee,
                "privacy": draft.privacy.value,
                "due_date": draft.due_date.isoformat() if draft.due_date else None,
            },
        )
    return draft
