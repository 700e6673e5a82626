"""In-memory message sequence of the active conversation."""
from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import replace
from typing import Sequence

from team_chat.application.dto.message import AttachmentUpload
from team_chat.application.dto.principal import Principal
from team_chat.application.ports.clock import Clock, SystemClock
from team_chat.application.ports.loader import MessageLoader
from team_chat.config import settings
from team_chat.domain.annotations import annotate
from team_chat.domain.entities.message import (
    Attachment,
    Message,
    Reaction,
    ReplySnapshot,
)

logger = logging.getLogger(__name__)


class MessageStore:
    """Owns the ordered messages of one active conversation.

    Chronological order is insertion order. ``has_replies`` is re-derived on
    every change of the message set. Operations on unknown message ids are
    no-ops returning ``None``/``False``.
    """

    def __init__(
        self,
        current_user: Principal,
        loader: MessageLoader,
        clock: Clock | None = None,
    ) -> None:
        self._current_user = current_user
        self._loader = loader
        self._clock = clock or SystemClock()
        self._messages: list[Message] = []
        self._conversation_id: str | None = None
        self._loading = False
        self._generation = 0
        self._pending: asyncio.Task[list[Message]] | None = None
        self._replying_to: Message | None = None

    @property
    def conversation_id(self) -> str | None:
        return self._conversation_id

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def replying_to(self) -> Message | None:
        return self._replying_to

    def get(self, message_id: str) -> Message | None:
        for msg in self._messages:
            if msg.id == message_id:
                return msg
        return None

    # -- loading ------------------------------------------------------------

    async def load_conversation(self, conversation_id: str) -> list[Message] | None:
        """Replace the active message set with ``conversation_id``'s messages.

        Only the most recent request may populate the store: an older request
        still in flight is cancelled and, should it resolve anyway, its result
        is discarded and ``None`` is returned. A failing loader leaves the store
        idle and empty; the error propagates to the caller.
        """
        self._generation += 1
        generation = self._generation
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

        self._conversation_id = conversation_id
        self._messages = []
        self._replying_to = None
        self._loading = True

        task = asyncio.ensure_future(self._loader.load(conversation_id))
        self._pending = task
        try:
            loaded = await task
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if generation != self._generation and not (current and current.cancelling()):
                logger.debug("Load of %s superseded", conversation_id)
                return None
            raise
        except Exception:
            if generation != self._generation:
                logger.debug("Ignoring failure of superseded load of %s", conversation_id)
                return None
            raise
        finally:
            if generation == self._generation:
                self._loading = False
                self._pending = None

        if generation != self._generation:
            logger.debug("Discarding stale load of %s", conversation_id)
            return None

        self._messages = sorted(loaded, key=lambda m: m.timestamp)
        self._rederive_threads()
        return list(self._messages)

    # -- composing ----------------------------------------------------------

    def start_reply(self, message_id: str) -> Message | None:
        parent = self.get(message_id)
        if parent is not None:
            self._replying_to = parent
        return parent

    def cancel_reply(self) -> None:
        self._replying_to = None

    def send_message(
        self,
        content: str,
        attachments: Sequence[AttachmentUpload] = (),
        reply_to_id: str | None = None,
    ) -> Message | None:
        """Append a message authored by the current user.

        Blank content without attachments is ignored, as is any send while
        the conversation is still loading. Without an explicit
        ``reply_to_id`` the pending reply selection is used; either way the
        selection is cleared.
        """
        if self._conversation_id is None:
            logger.debug("send_message without an active conversation")
            return None
        if self._loading:
            logger.debug("send_message while %s is loading", self._conversation_id)
            return None
        text = content.strip()
        if not text and not attachments:
            logger.debug("Ignoring empty message")
            return None

        if reply_to_id is None and self._replying_to is not None:
            reply_to_id = self._replying_to.id
        self._replying_to = None

        parent = self.get(reply_to_id) if reply_to_id is not None else None
        if reply_to_id is not None and parent is None:
            logger.warning("Reply target %s is gone; sending without reply link", reply_to_id)

        now = self._clock.now()
        annotations = annotate(text)
        msg = Message(
            id=str(uuid.uuid4()),
            conversation_id=self._conversation_id,
            content=text,
            sender=self._current_user.as_sender(),
            timestamp=now,
            attachments=tuple(self._to_attachment(upload) for upload in attachments),
            reply_to=parent.id if parent is not None else None,
            reply_to_snapshot=(
                ReplySnapshot(sender_name=parent.sender.name, content=parent.content)
                if parent is not None
                else None
            ),
            mentions=annotations.mentions,
            document_refs=annotations.document_refs,
            is_task_candidate=annotations.is_task_candidate,
        )
        self._messages.append(msg)
        self._rederive_threads()
        return self.get(msg.id)

    @staticmethod
    def _to_attachment(upload: AttachmentUpload) -> Attachment:
        attachment_id = uuid.uuid4().hex
        return Attachment(
            id=attachment_id,
            name=upload.name,
            mime_type=upload.mime_type,
            size_bytes=upload.size_bytes,
            url=f"{settings.ATTACHMENT_BASE_URL}/{attachment_id}/{upload.name}",
        )

    # -- per-message actions ------------------------------------------------

    def react(self, message_id: str, emoji: str) -> Reaction | None:
        """Add the current user's ``emoji`` reaction.

        Repeated reactions by the same user are counted again.
        """
        msg = self.get(message_id)
        if msg is None:
            return None
        existing = msg.reactions.get(emoji)
        if existing is None:
            reaction = Reaction(emoji=emoji, count=1, users=(self._current_user.id,))
        else:
            reaction = Reaction(
                emoji=emoji,
                count=existing.count + 1,
                users=(*existing.users, self._current_user.id),
            )
        self._replace(replace(msg, reactions={**msg.reactions, emoji: reaction}))
        return reaction

    def mark_task_created(self, message_id: str) -> bool:
        msg = self.get(message_id)
        if msg is None or msg.task_created:
            return False
        self._replace(replace(msg, task_created=True))
        return True

    def mark_edited(self, message_id: str) -> bool:
        msg = self.get(message_id)
        if msg is None:
            return False
        self._replace(replace(msg, edited=True))
        return True

    def edit_message(self, message_id: str, content: str) -> Message | None:
        """Replace the text of a message; annotations keep their send-time values."""
        msg = self.get(message_id)
        text = content.strip()
        if msg is None or not text:
            return None
        updated = replace(msg, content=text, edited=True)
        self._replace(updated)
        return updated

    def mark_unread(self, message_id: str) -> bool:
        msg = self.get(message_id)
        if msg is None:
            return False
        self._replace(replace(msg, is_read=False))
        return True

    def delete_message(self, message_id: str) -> Message | None:
        msg = self.get(message_id)
        if msg is None:
            return None
        self._messages = [m for m in self._messages if m.id != message_id]
        if self._replying_to is not None and self._replying_to.id == message_id:
            self._replying_to = None
        self._rederive_threads()
        return msg

    # -- threads ------------------------------------------------------------

    def replies_to(self, message_id: str) -> list[Message]:
        return [m for m in self._messages if m.reply_to == message_id]

    def latest_reply_to(self, message_id: str) -> Message | None:
        latest: Message | None = None
        for reply in self.replies_to(message_id):
            # ties go to the later insertion
            if latest is None or reply.timestamp >= latest.timestamp:
                latest = reply
        return latest

    def _replace(self, updated: Message) -> None:
        self._messages = [updated if m.id == updated.id else m for m in self._messages]

    def _rederive_threads(self) -> None:
        parents = {m.reply_to for m in self._messages if m.reply_to is not None}
        self._messages = [
            m if m.has_replies == (m.id in parents) else replace(m, has_replies=m.id in parents)
            for m in self._messages
        ]
