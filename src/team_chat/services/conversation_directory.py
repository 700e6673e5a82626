"""Channels and direct-message threads, with sidebar ordering and search."""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Iterable

from team_chat.application.dto.channel import CreateChannelDTO
from team_chat.application.dto.principal import Principal
from team_chat.application.exceptions import ConflictError, ValidationError
from team_chat.application.policies.permissions import assert_admin
from team_chat.application.ports.bus import EventPublisher
from team_chat.domain.entities.conversation import (
    Channel,
    DirectMessageThread,
    DirectMessageUser,
)
from team_chat.domain.value_objects.enums import ChannelAction

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DirectoryView:
    channels: list[Channel]
    direct_messages: list[DirectMessageThread]


@dataclass(frozen=True, slots=True)
class ChannelGroups:
    pinned: list[Channel]
    unpinned: list[Channel]
    archived: list[Channel]

    def as_list(self) -> list[Channel]:
        return [*self.pinned, *self.unpinned, *self.archived]


def _name_key(name: str) -> tuple[str, str]:
    return (name.casefold(), name)


def _unread_first_key(channel: Channel) -> tuple[bool, tuple[str, str]]:
    return (channel.unread_count == 0, _name_key(channel.name))


class ConversationDirectory:
    """The set of conversations visible to one user session.

    Channel management requires an admin principal and is refused before any
    mutation. Unknown ids are no-ops returning ``None``/``False``.
    """

    def __init__(
        self,
        current_user_id: str,
        channels: Iterable[Channel] = (),
        direct_messages: Iterable[DirectMessageThread] = (),
        publisher: EventPublisher | None = None,
    ) -> None:
        self._current_user_id = current_user_id
        self._channels: dict[str, Channel] = {c.id: c for c in channels}
        self._direct_messages: dict[str, DirectMessageThread] = {d.id: d for d in direct_messages}
        self._publisher = publisher

    @property
    def channels(self) -> list[Channel]:
        return list(self._channels.values())

    @property
    def direct_messages(self) -> list[DirectMessageThread]:
        return list(self._direct_messages.values())

    def get_channel(self, channel_id: str) -> Channel | None:
        return self._channels.get(channel_id)

    def get_direct_message(self, thread_id: str) -> DirectMessageThread | None:
        return self._direct_messages.get(thread_id)

    def contains(self, conversation_id: str) -> bool:
        return conversation_id in self._channels or conversation_id in self._direct_messages

    # -- admin surface ------------------------------------------------------

    def create_channel(self, principal: Principal, data: CreateChannelDTO) -> Channel:
        assert_admin(principal)
        problems = data.problems()
        if problems:
            raise ValidationError("; ".join(problems))
        name = data.name.strip()
        self._assert_name_free(name)

        channel = Channel(
            id=str(uuid.uuid4()),
            name=name,
            is_private=data.is_private,
            member_ids=tuple(data.allowed_users) if data.is_private else (),
        )
        self._channels[channel.id] = channel
        logger.info("Channel %s created (private=%s)", channel.name, channel.is_private)
        self._emit(channel, ChannelAction.CREATED)
        return channel

    def rename_channel(self, principal: Principal, channel_id: str, new_name: str) -> Channel | None:
        assert_admin(principal)
        channel = self._channels.get(channel_id)
        if channel is None:
            return None
        name = new_name.strip()
        if not name:
            raise ValidationError("Channel name must not be empty")
        if name != channel.name:
            self._assert_name_free(name, ignore_id=channel_id)
        updated = self._store(replace(channel, name=name))
        logger.info("Channel %s renamed to %s", channel.name, name)
        self._emit(updated, ChannelAction.RENAMED)
        return updated

    def pin(self, principal: Principal, channel_id: str) -> Channel | None:
        return self._set_flag(principal, channel_id, ChannelAction.PINNED, is_pinned=True)

    def unpin(self, principal: Principal, channel_id: str) -> Channel | None:
        return self._set_flag(principal, channel_id, ChannelAction.UNPINNED, is_pinned=False)

    def archive(self, principal: Principal, channel_id: str) -> Channel | None:
        return self._set_flag(principal, channel_id, ChannelAction.ARCHIVED, is_archived=True)

    def unarchive(self, principal: Principal, channel_id: str) -> Channel | None:
        return self._set_flag(principal, channel_id, ChannelAction.UNARCHIVED, is_archived=False)

    def delete_channel(self, principal: Principal, channel_id: str) -> bool:
        assert_admin(principal)
        channel = self._channels.pop(channel_id, None)
        if channel is None:
            return False
        logger.info("Channel %s deleted", channel.name)
        self._emit(channel, ChannelAction.DELETED)
        return True

    def _set_flag(
        self,
        principal: Principal,
        channel_id: str,
        action: ChannelAction,
        **changes: bool,
    ) -> Channel | None:
        assert_admin(principal)
        channel = self._channels.get(channel_id)
        if channel is None:
            return None
        updated = self._store(replace(channel, **changes))
        logger.info("Channel %s %s", channel.name, action)
        self._emit(updated, action)
        return updated

    def _assert_name_free(self, name: str, ignore_id: str | None = None) -> None:
        wanted = name.casefold()
        for channel in self._channels.values():
            if channel.id != ignore_id and channel.name.casefold() == wanted:
                raise ConflictError(f"Channel {name!r} already exists")

    def _store(self, channel: Channel) -> Channel:
        self._channels[channel.id] = channel
        return channel

    def _emit(self, channel: Channel, action: ChannelAction) -> None:
        if self._publisher is None:
            return
        self._publisher.publish(
            "chat.channel_updated",
            {"channel_id": channel.id, "name": channel.name, "action": action.value},
        )

    # -- counters -----------------------------------------------------------

    def mark_read(self, conversation_id: str) -> None:
        """Clear unread and mention counters once a conversation is opened."""
        self._update_counters(conversation_id, unread_count=0, mention_count=0)

    def record_unread(self, conversation_id: str, *, mentioned: bool = False) -> None:
        conversation = self._channels.get(conversation_id) or self._direct_messages.get(conversation_id)
        if conversation is None:
            return
        self._update_counters(
            conversation_id,
            unread_count=conversation.unread_count + 1,
            mention_count=conversation.mention_count + (1 if mentioned else 0),
        )

    def _update_counters(self, conversation_id: str, **counters: int) -> None:
        if conversation_id in self._channels:
            self._channels[conversation_id] = replace(self._channels[conversation_id], **counters)
        elif conversation_id in self._direct_messages:
            thread = self._direct_messages[conversation_id]
            self._direct_messages[conversation_id] = replace(thread, **counters)

    # -- presentation -------------------------------------------------------

    def dm_partner(self, thread: DirectMessageThread) -> DirectMessageUser | None:
        for user in thread.users:
            if user.id != self._current_user_id:
                return user
        return None

    def search(self, query: str = "") -> DirectoryView:
        """Case-insensitive substring match on channel and participant names."""
        needle = query.casefold()
        if not needle:
            return DirectoryView(channels=self.channels, direct_messages=self.direct_messages)
        return DirectoryView(
            channels=[c for c in self._channels.values() if needle in c.name.casefold()],
            direct_messages=[
                d
                for d in self._direct_messages.values()
                if any(needle in u.name.casefold() for u in d.users)
            ],
        )

    def channel_groups(self, channels: Iterable[Channel] | None = None) -> ChannelGroups:
        source = list(self._channels.values() if channels is None else channels)
        active = [c for c in source if not c.is_archived]
        return ChannelGroups(
            pinned=sorted((c for c in active if c.is_pinned), key=_unread_first_key),
            unpinned=sorted((c for c in active if not c.is_pinned), key=_unread_first_key),
            archived=sorted((c for c in source if c.is_archived), key=lambda c: _name_key(c.name)),
        )

    def ordered_channels(self, channels: Iterable[Channel] | None = None) -> list[Channel]:
        """Pinned, then unpinned, then archived; unread-first then by name."""
        return self.channel_groups(channels).as_list()

    def ordered_direct_messages(
        self, threads: Iterable[DirectMessageThread] | None = None,
    ) -> list[DirectMessageThread]:
        source = self._direct_messages.values() if threads is None else threads

        def key(thread: DirectMessageThread) -> tuple[bool, tuple[str, str]]:
            partner = self.dm_partner(thread)
            return (thread.unread_count == 0, _name_key(partner.name if partner else ""))

        return sorted(source, key=key)
