from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class SenderView(BaseModel):
    id: str
    name: str
    avatar: str | None = None

    model_config = {"from_attributes": True}


class AttachmentView(BaseModel):
    id: str
    name: str
    mime_type: str
    size_bytes: int
    url: str

    model_config = {"from_attributes": True}


class ReactionView(BaseModel):
    emoji: str
    count: int
    users: list[str]

    model_config = {"from_attributes": True}


class ReplySnapshotView(BaseModel):
    sender_name: str
    content: str

    model_config = {"from_attributes": True}


class MessageView(BaseModel):
    id: str
    conversation_id: str
    content: str
    sender: SenderView
    timestamp: datetime
    is_read: bool
    edited: bool
    attachments: list[AttachmentView]
    reactions: dict[str, ReactionView]
    reply_to: str | None
    reply_to_snapshot: ReplySnapshotView | None
    mentions: list[str]
    document_refs: list[str]
    is_task_candidate: bool
    task_created: bool
    has_replies: bool
    can_create_task: bool = False

    model_config = {"from_attributes": True}
