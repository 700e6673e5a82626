from __future__ import annotations

from typing import Protocol

from team_chat.domain.entities.message import Message


class MessageLoader(Protocol):
    async def load(self, conversation_id: str) -> list[Message]:
        """Return the conversation's messages ordered by timestamp ascending."""
        ...
