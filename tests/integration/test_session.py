"""Session-level tests over the seed workspace."""
from __future__ import annotations

import asyncio
from dataclasses import replace

import pytest

from team_chat.application.dto.message import AttachmentUpload
from team_chat.application.dto.principal import Principal
from team_chat.application.exceptions import ForbiddenError, LoadError, ValidationError
from team_chat.domain.value_objects.enums import SupportStatus
from team_chat.infrastructure.bus.in_memory import InMemoryEventBus
from team_chat.infrastructure.fixtures import CHANNELS, CURRENT_USER, DIRECT_MESSAGES
from team_chat.services.conversation_directory import ConversationDirectory
from team_chat.services.message_store import MessageStore
from team_chat.services.support_service import TRANSFER_NOTICE
from team_chat.session import ChatSession, create_demo_session
from tests.conftest import BrokenLoader


@pytest.fixture
def session_and_bus(clock):
    return create_demo_session(load_delay=0, clock=clock)


@pytest.fixture
def session(session_and_bus):
    session, _ = session_and_bus
    return session


@pytest.fixture
def events(session_and_bus):
    _, bus = session_and_bus
    received: list[tuple[str, dict]] = []
    bus.subscribe("*", lambda event_type, payload: received.append((event_type, payload)))
    return received


def test_sidebar_order(session):
    sidebar = session.sidebar()

    assert [c.name for c in sidebar.pinned] == ["general", "ui-team"]
    assert [c.name for c in sidebar.channels] == ["marketing", "dev-backend"]
    assert [c.name for c in sidebar.archived] == ["old-projects"]
    assert [d.partner.name for d in sidebar.direct_messages] == ["Maria Popescu", "Ion Vasilescu"]


def test_sidebar_search(session):
    sidebar = session.sidebar("ion")

    assert sidebar.pinned == []
    assert [d.id for d in sidebar.direct_messages] == ["dm1", "dm2"]


@pytest.mark.asyncio
async def test_select_conversation_loads_and_clears_counters(session, events):
    messages = await session.select_conversation("channel1")

    assert messages
    assert session.active_conversation_id == "channel1"
    assert all(m.conversation_id == "channel1" for m in messages)
    assert any(m.has_replies for m in messages)
    general = session.directory.get_channel("channel1")
    assert (general.unread_count, general.mention_count) == (0, 0)
    assert ("chat.conversation_loaded", {"conversation_id": "channel1", "message_count": len(messages)}) in events


@pytest.mark.asyncio
async def test_select_unknown_conversation(session):
    assert await session.select_conversation("nope") is None
    assert session.active_conversation_id is None


@pytest.mark.asyncio
async def test_quick_switch_keeps_only_last_selection():
    session, _ = create_demo_session(load_delay=0.01)

    first, second = await asyncio.gather(
        session.select_conversation("channel1"),
        session.select_conversation("dm1"),
    )

    assert first is None
    assert second is not None
    assert session.active_conversation_id == "dm1"
    assert {m.conversation_id for m in session.messages()} == {"dm1"}


@pytest.mark.asyncio
async def test_compose_emits_message(session, events):
    await session.select_conversation("channel2")

    view = session.compose(
        "@Ion te rog să verifici #OF123",
        [AttachmentUpload(name="oferta.pdf", mime_type="application/pdf", data=b"%PDF")],
    )

    assert view.mentions == ["Ion"]
    assert view.document_refs == ["OF123"]
    assert view.can_create_task is True
    assert view.attachments[0].size_bytes == 4
    created = [p for kind, p in events if kind == "chat.message_created"]
    assert created[-1]["id"] == view.id
    assert session.compose("  ") is None


@pytest.mark.asyncio
async def test_reply_flow_and_jump_to_latest(session):
    messages = await session.select_conversation("channel2")
    parent = messages[0]

    assert session.start_reply(parent.id) is True
    reply = session.compose("mersi")

    assert reply.reply_to == parent.id
    assert reply.reply_to_snapshot.content == parent.content
    assert session.latest_reply(parent.id).id == reply.id
    assert session.store.replying_to is None


@pytest.mark.asyncio
async def test_task_flow(session):
    messages = await session.select_conversation("channel1")
    candidate = next(m for m in messages if m.can_create_task and not m.task_created)

    draft = session.task_draft(candidate.id)
    assert session.create_task(candidate.id, draft) is False
    assert isinstance(session.last_error, ValidationError)

    titled = replace(draft, title="Verifică")
    assert session.create_task(candidate.id, titled) is True
    assert session.last_error is None
    assert session.store.get(candidate.id).task_created is True


@pytest.mark.asyncio
async def test_message_actions(session, events):
    messages = await session.select_conversation("channel1")
    target = messages[0].id

    assert session.react(target, "🎉") is True
    assert session.bookmark(target) is True
    assert session.remind(target, "tomorrow").label == "tomorrow"
    assert session.forward(target, "dm2") is True
    assert session.forward(target, "nowhere") is False
    assert session.copy_link(target).endswith(f"?message={target}")
    assert session.edit(target, "text nou").edited is True

    assert session.mark_unread(target) is True
    assert session.directory.get_channel("channel1").unread_count == 1

    assert session.delete(target) is True
    assert session.store.get(target) is None
    assert target not in session.actions.bookmarks
    assert ("chat.message_deleted", {"message_id": target, "conversation_id": "channel1"}) in events
    assert session.react("nope", "👍") is False


def test_admin_channel_management(session, events):
    created = session.create_channel("sales", is_private=True, allowed_users=["user2"])

    assert created is not None
    assert session.pin_channel(created.id) is True
    assert session.rename_channel(created.id, "sales-ro") is True
    assert session.archive_channel(created.id) is True
    assert session.unarchive_channel(created.id) is True
    assert session.unpin_channel(created.id) is True
    assert session.delete_channel(created.id) is True
    actions = [p["action"] for kind, p in events if kind == "chat.channel_updated"]
    assert actions == ["created", "pinned", "renamed", "archived", "unarchived", "unpinned", "deleted"]


def test_invalid_channel_is_refused_without_raising(session):
    assert session.create_channel("   ") is None
    assert isinstance(session.last_error, ValidationError)
    assert session.create_channel("secret", is_private=True) is None
    assert session.create_channel("general") is None


def test_non_admin_is_refused(clock):
    member = Principal(id="user2", name="Maria Popescu")
    session, bus = create_demo_session(principal=member, load_delay=0, clock=clock)

    assert session.create_channel("sales") is None
    assert isinstance(session.last_error, ForbiddenError)
    assert session.pin_channel("channel3") is False
    assert session.delete_channel("channel3") is False
    assert session.directory.get_channel("channel3").is_pinned is False


@pytest.mark.asyncio
async def test_failed_load_is_recorded_not_raised(clock):
    bus = InMemoryEventBus()
    directory = ConversationDirectory(CURRENT_USER.id, CHANNELS, DIRECT_MESSAGES, publisher=bus)
    store = MessageStore(CURRENT_USER, BrokenLoader(), clock=clock)
    session = ChatSession(CURRENT_USER, directory, store, bus, clock=clock)

    assert await session.select_conversation("channel1") is None
    assert isinstance(session.last_error, LoadError)
    assert session.store.is_loading is False
    assert session.messages() == []


@pytest.mark.asyncio
async def test_compose_during_load_is_ignored(clock):
    session, _ = create_demo_session(load_delay=0.01, clock=clock)

    pending = asyncio.ensure_future(session.select_conversation("channel3"))
    await asyncio.sleep(0)
    assert session.compose("hello") is None

    loaded = await pending
    assert [m.id for m in session.messages()] == [m.id for m in loaded]


def test_support_flow_shares_bus(session, events):
    ticket = session.open_support("Facturare")

    assert session.ask_support(ticket.id, "Nu se salvează factura") is not None
    transferred = session.request_operator(ticket.id)
    assert transferred.messages[-1].content == TRANSFER_NOTICE
    assert session.resolve_support(ticket.id).status == SupportStatus.RESOLVED
    assert session.rate_support(ticket.id, 6) is False
    assert isinstance(session.last_error, ValidationError)
    assert session.rate_support(ticket.id, 5) is True
    assert [c.id for c in session.support_inbox("factura")] == [ticket.id]

    actions = [p["action"] for kind, p in events if kind == "support.conversation_updated"]
    assert actions == ["created", "message", "transferred", "resolved", "rated"]
