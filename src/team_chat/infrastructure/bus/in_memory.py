"""In-process event bus that fans events out to host subscribers."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable

logger = logging.getLogger(__name__)

EventHandler = Callable[[str, dict[str, Any]], None]

ANY_EVENT = "*"


class InMemoryEventBus:
    """Implements application.ports.bus.EventPublisher."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Register ``handler`` for ``event_type`` (``"*"`` receives everything)."""
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        for handler in [*self._handlers.get(event_type, []), *self._handlers.get(ANY_EVENT, [])]:
            try:
                handler(event_type, payload)
            except Exception:
                logger.exception("Error dispatching %s to %r", event_type, handler)
