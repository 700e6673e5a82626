"""Entrypoint: python -m team_chat"""
from __future__ import annotations

import asyncio
import logging

from team_chat.config import settings
from team_chat.session import create_demo_session

logger = logging.getLogger(__name__)


async def run_demo() -> None:
    session, bus = create_demo_session()
    bus.subscribe("*", lambda event_type, payload: logger.info("event %s", event_type))

    sidebar = session.sidebar()
    for title, channels in (("Pinned", sidebar.pinned), ("Channels", sidebar.channels), ("Archived", sidebar.archived)):
        logger.info("%s: %s", title, ", ".join(f"#{c.name}" for c in channels) or "-")
    logger.info(
        "Direct messages: %s",
        ", ".join(d.partner.name for d in sidebar.direct_messages if d.partner) or "-",
    )

    first = (sidebar.pinned or sidebar.channels)[0]
    messages = await session.select_conversation(first.id) or []
    for msg in messages:
        logger.info(
            "[%s] %s: %s%s",
            msg.timestamp.strftime("%H:%M"),
            msg.sender.name,
            msg.content,
            " (task?)" if msg.can_create_task else "",
        )

    ticket = session.open_support()
    ticket = session.request_operator(ticket.id) or ticket
    logger.info("Support: %s (%s) - %s", ticket.title, ticket.status, ticket.messages[-1].content)


def main() -> None:
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s: %(message)s")
    asyncio.run(run_demo())


if __name__ == "__main__":
    main()
