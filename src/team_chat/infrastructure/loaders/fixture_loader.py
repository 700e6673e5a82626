from __future__ import annotations

import asyncio
import logging

from team_chat.application.ports.clock import Clock, SystemClock
from team_chat.domain.entities.message import Message
from team_chat.infrastructure.fixtures import build_messages

logger = logging.getLogger(__name__)


class FixtureMessageLoader:
    """Implements application.ports.loader.MessageLoader over the seed scripts.

    ``delay`` stands in for backend latency.
    """

    def __init__(self, delay: float = 0.0, clock: Clock | None = None) -> None:
        self._delay = delay
        self._clock = clock or SystemClock()

    async def load(self, conversation_id: str) -> list[Message]:
        if self._delay > 0:
            await asyncio.sleep(self._delay)
        messages = build_messages(conversation_id, self._clock.now())
        logger.debug("Loaded %d fixture messages for %s", len(messages), conversation_id)
        return messages
