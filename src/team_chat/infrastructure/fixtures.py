"""Seed workspace: users, channels, direct messages, documents and message scripts."""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from team_chat.application.dto.principal import Principal
from team_chat.domain.annotations import annotate
from team_chat.domain.entities.conversation import (
    Channel,
    DirectMessageThread,
    DirectMessageUser,
)
from team_chat.domain.entities.message import Message, Reaction, ReplySnapshot, Sender

CURRENT_USER = Principal(
    id="user1",
    name="Adrian Ionescu",
    avatar="https://i.pravatar.cc/150?img=1",
    roles=["admin"],
)

USERS: tuple[Sender, ...] = (
    Sender(id="user1", name="Adrian Ionescu", avatar="https://i.pravatar.cc/150?img=1"),
    Sender(id="user2", name="Maria Popescu", avatar="https://i.pravatar.cc/150?img=5"),
    Sender(id="user3", name="Ion Vasilescu", avatar="https://i.pravatar.cc/150?img=3"),
    Sender(id="user4", name="Elena Dumitrescu", avatar="https://i.pravatar.cc/150?img=4"),
)

CHANNELS: tuple[Channel, ...] = (
    Channel(id="channel1", name="general", is_pinned=True, unread_count=3, mention_count=1),
    Channel(id="channel2", name="ui-team", is_pinned=True),
    Channel(id="channel3", name="marketing", unread_count=5),
    Channel(id="channel4", name="dev-backend", is_private=True, member_ids=("user1", "user3")),
    Channel(id="channel5", name="old-projects", is_archived=True),
)


def _dm_user(sender: Sender, *, online: bool) -> DirectMessageUser:
    return DirectMessageUser(id=sender.id, name=sender.name, avatar=sender.avatar, is_online=online)


DIRECT_MESSAGES: tuple[DirectMessageThread, ...] = (
    DirectMessageThread(
        id="dm1",
        users=(_dm_user(USERS[1], online=True), _dm_user(USERS[0], online=True)),
        unread_count=2,
        mention_count=1,
    ),
    DirectMessageThread(
        id="dm2",
        users=(_dm_user(USERS[2], online=False), _dm_user(USERS[0], online=True)),
    ),
)

# (sender index, content, index of the replied-to line or None)
_GENERAL_SCRIPT: list[tuple[int, str, int | None]] = [
    (1, "Bună, cum pot să te ajut?", None),
    (0, "Clientul a solicitat o ofertă pentru 10 bucăți. #OF123", None),
    (2, "@Maria te rog să verifici documentul #OF123 până mâine", None),
    (1, "Am verificat documentul, totul este în regulă.", 2),
    (3, "Am transmis comanda către furnizor. #CMD456", None),
    (0, "Când vom primi marfa de la furnizor?", 4),
    (3, "Transportul va ajunge mâine dimineață.", 5),
]

_DM_SCRIPT: list[tuple[int, str, int | None]] = [
    (1, "Poți să pregătești raportul pentru ședința de mâine?", None),
    (0, "Sigur, îl trimit până la prânz.", 0),
]

_SCRIPTS: dict[str, list[tuple[int, str, int | None]]] = {
    "channel1": _GENERAL_SCRIPT,
    "channel2": [
        (2, "Am actualizat datele în sistem.", None),
        (0, "Mulțumesc! @Ion", 0),
    ],
    "channel3": [
        (3, "Trebuie să trimitem oferta astăzi.", None),
        (1, "Îmi poți trimite lista de prețuri? #PROD789", None),
    ],
    "dm1": _DM_SCRIPT,
}


def build_messages(conversation_id: str, now: datetime) -> list[Message]:
    """Materialize a conversation script, three minutes between lines."""
    script = _SCRIPTS.get(conversation_id, [])
    messages: list[Message] = []
    for i, (sender_idx, content, reply_idx) in enumerate(script):
        annotations = annotate(content)
        msg = Message(
            id=f"{conversation_id}-msg-{i}",
            conversation_id=conversation_id,
            content=content,
            sender=USERS[sender_idx],
            timestamp=now - timedelta(minutes=3 * (len(script) - i)),
            mentions=annotations.mentions,
            document_refs=annotations.document_refs,
            is_task_candidate=annotations.is_task_candidate,
        )
        if reply_idx is not None:
            parent = messages[reply_idx]
            msg = replace(
                msg,
                reply_to=parent.id,
                reply_to_snapshot=ReplySnapshot(sender_name=parent.sender.name, content=parent.content),
            )
        messages.append(msg)

    if messages:
        first = messages[0]
        messages[0] = replace(
            first,
            reactions={"👍": Reaction(emoji="👍", count=1, users=(USERS[0].id,))},
        )
    return messages
