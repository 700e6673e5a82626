from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Sender:
    id: str
    name: str
    avatar: str | None = None


@dataclass(frozen=True, slots=True)
class Attachment:
    id: str
    name: str
    mime_type: str
    size_bytes: int
    url: str


@dataclass(frozen=True, slots=True)
class Reaction:
    emoji: str
    count: int
    users: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ReplySnapshot:
    """Copy of the parent message taken when the reply was sent."""

    sender_name: str
    content: str


@dataclass(frozen=True, slots=True)
class Message:
    id: str
    conversation_id: str
    content: str
    sender: Sender
    timestamp: datetime
    is_read: bool = True
    edited: bool = False
    attachments: tuple[Attachment, ...] = ()
    reactions: dict[str, Reaction] = field(default_factory=dict)
    reply_to: str | None = None
    reply_to_snapshot: ReplySnapshot | None = None
    mentions: tuple[str, ...] = ()
    document_refs: tuple[str, ...] = ()
    is_task_candidate: bool = False
    task_created: bool = False
    has_replies: bool = False
