"""Host-facing session: the surface the UI calls into."""
from __future__ import annotations

import logging
from typing import Callable, Sequence, TypeVar

from team_chat.application.dto.channel import CreateChannelDTO
from team_chat.application.dto.message import AttachmentUpload
from team_chat.application.dto.principal import Principal
from team_chat.application.dto.task import TaskDraft
from team_chat.application.exceptions import AppError, LoadError
from team_chat.application.ports.bus import EventPublisher
from team_chat.application.ports.clock import Clock
from team_chat.config import settings
from team_chat.domain.entities.conversation import DirectMessageThread
from team_chat.domain.entities.message import Message
from team_chat.domain.entities.support import SupportConversation
from team_chat.infrastructure.bus.in_memory import InMemoryEventBus
from team_chat.infrastructure.fixtures import CHANNELS, CURRENT_USER, DIRECT_MESSAGES
from team_chat.infrastructure.loaders.fixture_loader import FixtureMessageLoader
from team_chat.schemas.conversation import (
    ChannelView,
    DirectMessageUserView,
    DirectMessageView,
    SidebarView,
)
from team_chat.schemas.message import MessageView
from team_chat.services import task_service
from team_chat.services.conversation_directory import ConversationDirectory
from team_chat.services.message_actions import MessageActions, Reminder
from team_chat.services.message_store import MessageStore
from team_chat.services.support_service import SupportDesk

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ChatSession:
    """One signed-in user driving the directory and the active conversation.

    Refused operations never raise: the error is logged, kept in
    ``last_error`` and the call returns ``None``/``False``.
    """

    def __init__(
        self,
        principal: Principal,
        directory: ConversationDirectory,
        store: MessageStore,
        publisher: EventPublisher,
        clock: Clock | None = None,
        support: SupportDesk | None = None,
    ) -> None:
        self.principal = principal
        self.directory = directory
        self.store = store
        self.publisher = publisher
        self.actions = MessageActions(store, publisher, clock)
        self.support = support or SupportDesk(principal, clock=clock, publisher=publisher)
        self.last_error: AppError | None = None

    @property
    def active_conversation_id(self) -> str | None:
        return self.store.conversation_id

    # -- conversation selection ---------------------------------------------

    async def select_conversation(self, conversation_id: str) -> list[MessageView] | None:
        """Open a conversation; returns ``None`` if unknown, superseded by a later selection or failed."""
        if not self.directory.contains(conversation_id):
            logger.debug("Unknown conversation %s", conversation_id)
            return None
        self.last_error = None
        self.directory.mark_read(conversation_id)
        try:
            loaded = await self.store.load_conversation(conversation_id)
        except Exception:
            logger.exception("Loading %s failed", conversation_id)
            self.last_error = LoadError(f"Could not load conversation {conversation_id}")
            return None
        if loaded is None:
            return None
        self.publisher.publish(
            "chat.conversation_loaded",
            {"conversation_id": conversation_id, "message_count": len(loaded)},
        )
        return [self._view(m) for m in loaded]

    def messages(self) -> list[MessageView]:
        return [self._view(m) for m in self.store.messages]

    # -- composition --------------------------------------------------------

    def start_reply(self, message_id: str) -> bool:
        return self.store.start_reply(message_id) is not None

    def cancel_reply(self) -> None:
        self.store.cancel_reply()

    def compose(
        self,
        content: str,
        attachments: Sequence[AttachmentUpload] = (),
        reply_to_id: str | None = None,
    ) -> MessageView | None:
        msg = self.store.send_message(content, attachments, reply_to_id)
        if msg is None:
            return None
        view = self._view(msg)
        self.publisher.publish("chat.message_created", view.model_dump(mode="json"))
        return view

    # -- message actions ----------------------------------------------------

    def react(self, message_id: str, emoji: str) -> bool:
        return self.store.react(message_id, emoji) is not None

    def task_draft(self, message_id: str) -> TaskDraft | None:
        msg = self.store.get(message_id)
        return task_service.draft_task(msg) if msg is not None else None

    def create_task(self, message_id: str, draft: TaskDraft) -> bool:
        created = self._guard(
            "create_task",
            task_service.create_task,
            self.store,
            message_id,
            draft,
            self.publisher,
        )
        return created is not None

    def bookmark(self, message_id: str) -> bool:
        return self.actions.toggle_bookmark(message_id) is not None

    def remind(self, message_id: str, code: str) -> Reminder | None:
        return self.actions.remind(message_id, code)

    def forward(self, message_id: str, target_conversation_id: str) -> bool:
        if not self.directory.contains(target_conversation_id):
            return False
        return self.actions.forward(message_id, target_conversation_id)

    def copy_link(self, message_id: str) -> str | None:
        return self.actions.copy_link(message_id)

    def mark_unread(self, message_id: str) -> bool:
        if not self.store.mark_unread(message_id):
            return False
        if self.active_conversation_id is not None:
            self.directory.record_unread(self.active_conversation_id)
        return True

    def edit(self, message_id: str, content: str) -> MessageView | None:
        msg = self.store.edit_message(message_id, content)
        return self._view(msg) if msg is not None else None

    def delete(self, message_id: str) -> bool:
        msg = self.store.delete_message(message_id)
        if msg is None:
            return False
        self.actions.forget(message_id)
        self.publisher.publish(
            "chat.message_deleted",
            {"message_id": msg.id, "conversation_id": msg.conversation_id},
        )
        return True

    def latest_reply(self, message_id: str) -> MessageView | None:
        msg = self.store.latest_reply_to(message_id)
        return self._view(msg) if msg is not None else None

    # -- channel administration ---------------------------------------------

    def create_channel(
        self,
        name: str,
        is_private: bool = False,
        allowed_users: Sequence[str] = (),
    ) -> ChannelView | None:
        data = CreateChannelDTO(name=name, is_private=is_private, allowed_users=list(allowed_users))
        channel = self._guard("create_channel", self.directory.create_channel, self.principal, data)
        return ChannelView.model_validate(channel, from_attributes=True) if channel else None

    def rename_channel(self, channel_id: str, new_name: str) -> bool:
        renamed = self._guard(
            "rename_channel", self.directory.rename_channel, self.principal, channel_id, new_name
        )
        return renamed is not None

    def pin_channel(self, channel_id: str) -> bool:
        return self._guard("pin_channel", self.directory.pin, self.principal, channel_id) is not None

    def unpin_channel(self, channel_id: str) -> bool:
        return self._guard("unpin_channel", self.directory.unpin, self.principal, channel_id) is not None

    def archive_channel(self, channel_id: str) -> bool:
        return self._guard("archive_channel", self.directory.archive, self.principal, channel_id) is not None

    def unarchive_channel(self, channel_id: str) -> bool:
        return self._guard("unarchive_channel", self.directory.unarchive, self.principal, channel_id) is not None

    def delete_channel(self, channel_id: str) -> bool:
        return bool(self._guard("delete_channel", self.directory.delete_channel, self.principal, channel_id))

    # -- support ------------------------------------------------------------

    def open_support(self, title: str = "") -> SupportConversation:
        return self.support.create_conversation(title)

    def ask_support(self, conversation_id: str, content: str) -> SupportConversation | None:
        return self.support.post_message(conversation_id, content)

    def request_operator(self, conversation_id: str) -> SupportConversation | None:
        return self.support.transfer_to_operator(conversation_id)

    def resolve_support(self, conversation_id: str) -> SupportConversation | None:
        return self.support.resolve(conversation_id)

    def rate_support(self, conversation_id: str, stars: int) -> bool:
        return self._guard("rate_support", self.support.rate, conversation_id, stars) is not None

    def support_inbox(self, query: str = "") -> list[SupportConversation]:
        return self.support.ordered(query)

    # -- sidebar ------------------------------------------------------------

    def sidebar(self, query: str = "") -> SidebarView:
        found = self.directory.search(query)
        groups = self.directory.channel_groups(found.channels)
        return SidebarView(
            pinned=[ChannelView.model_validate(c, from_attributes=True) for c in groups.pinned],
            channels=[ChannelView.model_validate(c, from_attributes=True) for c in groups.unpinned],
            archived=[ChannelView.model_validate(c, from_attributes=True) for c in groups.archived],
            direct_messages=[
                self._dm_view(d) for d in self.directory.ordered_direct_messages(found.direct_messages)
            ],
        )

    def _dm_view(self, thread: DirectMessageThread) -> DirectMessageView:
        view = DirectMessageView.model_validate(thread, from_attributes=True)
        partner = self.directory.dm_partner(thread)
        if partner is None:
            return view
        return view.model_copy(
            update={"partner": DirectMessageUserView.model_validate(partner, from_attributes=True)},
        )

    def _view(self, msg: Message) -> MessageView:
        view = MessageView.model_validate(msg, from_attributes=True)
        return view.model_copy(update={"can_create_task": task_service.can_create_task(msg)})

    def _guard(self, operation: str, fn: Callable[..., T], *args: object) -> T | None:
        self.last_error = None
        try:
            return fn(*args)
        except AppError as exc:
            logger.warning("%s refused: %s", operation, exc.detail)
            self.last_error = exc
            return None


def create_demo_session(
    principal: Principal = CURRENT_USER,
    load_delay: float | None = None,
    clock: Clock | None = None,
) -> tuple[ChatSession, InMemoryEventBus]:
    """Wire a session over the seed workspace."""
    bus = InMemoryEventBus()
    delay = settings.LOAD_DELAY_SECONDS if load_delay is None else load_delay
    directory = ConversationDirectory(principal.id, CHANNELS, DIRECT_MESSAGES, publisher=bus)
    store = MessageStore(principal, FixtureMessageLoader(delay=delay, clock=clock), clock=clock)
    support = SupportDesk(principal, clock=clock, publisher=bus)
    session = ChatSession(principal, directory, store, bus, clock=clock, support=support)
    return session, bus
