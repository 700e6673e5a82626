from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from team_chat.domain.value_objects.enums import SupportSenderType, SupportStatus


@dataclass(frozen=True, slots=True)
class SupportSender:
    id: str
    name: str
    type: SupportSenderType
    avatar: str | None = None


@dataclass(frozen=True, slots=True)
class SupportMessage:
    id: str
    content: str
    sender: SupportSender
    timestamp: datetime


@dataclass(frozen=True, slots=True)
class SupportConversation:
    id: str
    title: str
    status: SupportStatus
    messages: tuple[SupportMessage, ...]
    created_at: datetime
    last_message_at: datetime
    is_operator_transferred: bool = False
    operator_available: bool = True
    rating: int | None = None
