from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class CreateChannelDTO:
    name: str
    is_private: bool = False
    allowed_users: list[str] = field(default_factory=list)

    def problems(self) -> list[str]:
        """Unmet constraints; an empty list means the form may be submitted."""
        problems: list[str] = []
        if not self.name.strip():
            problems.append("Channel name must not be empty")
        if self.is_private and not self.allowed_users:
            problems.append("Private channels need at least one allowed user")
        return problems

    @property
    def is_valid(self) -> bool:
        return not self.problems()
