"""Support conversations between a user, the assistant and human operators."""
from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from typing import Iterable

from team_chat.application.dto.principal import Principal
from team_chat.application.exceptions import ValidationError
from team_chat.application.ports.bus import EventPublisher
from team_chat.application.ports.clock import Clock, SystemClock
from team_chat.config import settings
from team_chat.domain.entities.support import (
    SupportConversation,
    SupportMessage,
    SupportSender,
)
from team_chat.domain.value_objects.enums import SupportSenderType, SupportStatus

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Conversație nouă de suport"
TRANSFER_NOTICE = "Un coleg de la Suport va prelua conversația în scurt timp."
UNAVAILABLE_NOTICE = (
    "Momentan nu sunt operatori activi. "
    "Lăsați un mesaj și vă vom răspunde în cel mai scurt timp."
)

_STATUS_ORDER = {
    SupportStatus.ACTIVE: 0,
    SupportStatus.WAITING: 1,
    SupportStatus.RESOLVED: 2,
}

ASSISTANT = SupportSender(id="ai-assistant", name=settings.SUPPORT_ASSISTANT_NAME, type=SupportSenderType.AI)
SYSTEM = SupportSender(id="system", name="Sistem", type=SupportSenderType.AI)


class SupportDesk:
    """Owns the support conversations of one user."""

    def __init__(
        self,
        user: Principal,
        conversations: Iterable[SupportConversation] = (),
        clock: Clock | None = None,
        publisher: EventPublisher | None = None,
    ) -> None:
        self._user = SupportSender(id=user.id, name=user.name, type=SupportSenderType.USER, avatar=user.avatar)
        self._conversations: list[SupportConversation] = list(conversations)
        self._clock = clock or SystemClock()
        self._publisher = publisher

    @property
    def conversations(self) -> list[SupportConversation]:
        return list(self._conversations)

    def get(self, conversation_id: str) -> SupportConversation | None:
        for conv in self._conversations:
            if conv.id == conversation_id:
                return conv
        return None

    def operator_available(self) -> bool:
        hour = self._clock.now().hour
        return settings.SUPPORT_OPERATOR_HOURS_START <= hour < settings.SUPPORT_OPERATOR_HOURS_END

    def create_conversation(self, title: str = DEFAULT_TITLE) -> SupportConversation:
        """Open a conversation greeted by the assistant; newest conversations come first."""
        now = self._clock.now()
        conv = SupportConversation(
            id=str(uuid.uuid4()),
            title=title.strip() or DEFAULT_TITLE,
            status=SupportStatus.ACTIVE,
            messages=(self._message(ASSISTANT, settings.SUPPORT_GREETING),),
            created_at=now,
            last_message_at=now,
            operator_available=self.operator_available(),
        )
        self._conversations.insert(0, conv)
        self._emit(conv, "created")
        return conv

    def post_message(self, conversation_id: str, content: str) -> SupportConversation | None:
        conv = self.get(conversation_id)
        if conv is None or not content.strip():
            return None
        return self._append(conv, self._message(self._user, content), "message")

    def transfer_to_operator(self, conversation_id: str) -> SupportConversation | None:
        """Hand the conversation to a human, or explain that nobody is on duty."""
        conv = self.get(conversation_id)
        if conv is None:
            return None
        available = self.operator_available()
        if available:
            conv = replace(conv, is_operator_transferred=True, operator_available=True)
            return self._append(conv, self._message(SYSTEM, TRANSFER_NOTICE), "transferred")
        conv = replace(conv, operator_available=False)
        return self._append(conv, self._message(SYSTEM, UNAVAILABLE_NOTICE), "operator_unavailable")

    def resolve(self, conversation_id: str) -> SupportConversation | None:
        conv = self.get(conversation_id)
        if conv is None:
            return None
        updated = self._store(
            replace(conv, status=SupportStatus.RESOLVED, last_message_at=self._clock.now()),
        )
        self._emit(updated, "resolved")
        return updated

    def rename(self, conversation_id: str, title: str) -> SupportConversation | None:
        conv = self.get(conversation_id)
        new_title = title.strip()
        if conv is None or not new_title:
            return None
        updated = self._store(replace(conv, title=new_title))
        self._emit(updated, "renamed")
        return updated

    def rate(self, conversation_id: str, stars: int) -> SupportConversation | None:
        if not 1 <= stars <= 5:
            raise ValidationError("Rating must be between 1 and 5")
        conv = self.get(conversation_id)
        if conv is None:
            return None
        updated = self._store(replace(conv, rating=stars))
        self._emit(updated, "rated")
        return updated

    def delete(self, conversation_id: str) -> bool:
        conv = self.get(conversation_id)
        if conv is None:
            return False
        self._conversations = [c for c in self._conversations if c.id != conversation_id]
        self._emit(conv, "deleted")
        return True

    def ordered(self, query: str = "") -> list[SupportConversation]:
        """Active, then waiting, then resolved; most recent activity first."""
        needle = query.casefold()
        matches = [
            c
            for c in self._conversations
            if not needle
            or needle in c.title.casefold()
            or any(needle in m.content.casefold() for m in c.messages)
        ]
        by_recency = sorted(matches, key=lambda c: c.last_message_at, reverse=True)
        return sorted(by_recency, key=lambda c: _STATUS_ORDER[c.status])

    def _message(self, sender: SupportSender, content: str) -> SupportMessage:
        return SupportMessage(
            id=str(uuid.uuid4()),
            content=content,
            sender=sender,
            timestamp=self._clock.now(),
        )

    def _append(self, conv: SupportConversation, message: SupportMessage, action: str) -> SupportConversation:
        updated = self._store(
            replace(conv, messages=(*conv.messages, message), last_message_at=message.timestamp),
        )
        self._emit(updated, action)
        return updated

    def _store(self, conv: SupportConversation) -> SupportConversation:
        self._conversations = [conv if c.id == conv.id else c for c in self._conversations]
        return conv

    def _emit(self, conv: SupportConversation, action: str) -> None:
        logger.debug("Support conversation %s %s", conv.id, action)
        if self._publisher is not None:
            self._publisher.publish(
                "support.conversation_updated",
                {"conversation_id": conv.id, "action": action, "status": conv.status.value},
            )
