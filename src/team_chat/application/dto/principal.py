from __future__ import annotations

from dataclasses import dataclass, field

from team_chat.domain.entities.message import Sender


@dataclass(frozen=True, slots=True)
class Principal:
    """Identity of the user driving the session."""

    id: str
    name: str
    avatar: str | None = None
    roles: list[str] = field(default_factory=list)

    @property
    def is_admin(self) -> bool:
        return "admin" in self.roles

    def as_sender(self) -> Sender:
        return Sender(id=self.id, name=self.name, avatar=self.avatar)
