from __future__ import annotations

from typing import Any, Protocol


class EventPublisher(Protocol):
    def publish(self, event_type: str, payload: dict[str, Any]) -> None: ...
