"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
import pytest_asyncio

from team_chat.application.dto.principal import Principal
from team_chat.domain.annotations import annotate
from team_chat.domain.entities.conversation import (
    Channel,
    DirectMessageThread,
    DirectMessageUser,
)
from team_chat.domain.entities.message import Message, Sender
from team_chat.services.conversation_directory import ConversationDirectory
from team_chat.services.message_store import MessageStore

T0 = datetime(2026, 3, 2, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def user_principal() -> Principal:
    return Principal(id="u42", name="Maria Popescu", roles=[])


@pytest.fixture
def admin_principal() -> Principal:
    return Principal(id="u1", name="Adrian Ionescu", roles=["admin"])


@dataclass
class FakeClock:
    """Advances one second on every reading."""

    current: datetime = T0
    step: timedelta = timedelta(seconds=1)

    def now(self) -> datetime:
        value = self.current
        self.current = self.current + self.step
        return value


@dataclass
class RecordingPublisher:
    events: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        self.events.append((event_type, payload))

    def of_type(self, event_type: str) -> list[dict[str, Any]]:
        return [payload for kind, payload in self.events if kind == event_type]


@dataclass
class StaticLoader:
    """MessageLoader returning canned messages per conversation."""

    messages: dict[str, list[Message]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def load(self, conversation_id: str) -> list[Message]:
        self.calls.append(conversation_id)
        return list(self.messages.get(conversation_id, []))


@dataclass
class BrokenLoader:
    """MessageLoader whose every request fails."""

    async def load(self, conversation_id: str) -> list[Message]:
        raise ConnectionError(f"backend unavailable for {conversation_id}")


@dataclass
class GatedLoader:
    """MessageLoader whose requests resolve only when the test opens their gate.

    The wait is shielded, so a superseded request still resolves later.
    """

    messages: dict[str, list[Message]] = field(default_factory=dict)
    gates: dict[str, asyncio.Event] = field(default_factory=dict)

    def gate(self, conversation_id: str) -> asyncio.Event:
        return self.gates.setdefault(conversation_id, asyncio.Event())

    async def load(self, conversation_id: str) -> list[Message]:
        await asyncio.shield(self.gate(conversation_id).wait())
        return list(self.messages.get(conversation_id, []))


def make_message(
    *,
    message_id: str | None = None,
    conversation_id: str = "channel1",
    content: str = "hello",
    sender: Sender | None = None,
    timestamp: datetime | None = None,
    reply_to: str | None = None,
) -> Message:
    annotations = annotate(content)
    return Message(
        id=message_id or str(uuid.uuid4()),
        conversation_id=conversation_id,
        content=content,
        sender=sender or Sender(id="u7", name="Ion Vasilescu"),
        timestamp=timestamp or T0,
        reply_to=reply_to,
        mentions=annotations.mentions,
        document_refs=annotations.document_refs,
        is_task_candidate=annotations.is_task_candidate,
    )


def make_channel(
    name: str,
    *,
    pinned: bool = False,
    archived: bool = False,
    unread: int = 0,
    private: bool = False,
) -> Channel:
    return Channel(
        id=f"ch-{name}",
        name=name,
        is_private=private,
        is_pinned=pinned,
        is_archived=archived,
        unread_count=unread,
    )


def make_dm(thread_id: str, partner_name: str, *, me: str = "u1", unread: int = 0) -> DirectMessageThread:
    return DirectMessageThread(
        id=thread_id,
        users=(
            DirectMessageUser(id=f"id-{partner_name}", name=partner_name),
            DirectMessageUser(id=me, name="Adrian Ionescu", is_online=True),
        ),
        unread_count=unread,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(current=T0 + timedelta(hours=1))


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def seeded_messages() -> list[Message]:
    return [
        make_message(message_id="m1", content="Bună, cum pot să te ajut?", timestamp=T0),
        make_message(message_id="m2", content="vezi #OF123", timestamp=T0 + timedelta(minutes=3)),
        make_message(message_id="m3", content="ok", timestamp=T0 + timedelta(minutes=6), reply_to="m1"),
    ]


@pytest_asyncio.fixture
async def loaded_store(admin_principal, clock, seeded_messages) -> MessageStore:
    store = MessageStore(admin_principal, StaticLoader({"channel1": seeded_messages}), clock=clock)
    await store.load_conversation("channel1")
    return store


@pytest.fixture
def directory(publisher) -> ConversationDirectory:
    return ConversationDirectory(
        "u1",
        channels=[
            make_channel("general", pinned=True, unread=3),
            make_channel("marketing", unread=5),
            make_channel("old-projects", archived=True),
        ],
        direct_messages=[make_dm("dm1", "Maria Popescu", unread=2), make_dm("dm2", "Ion Vasilescu")],
        publisher=publisher,
    )
