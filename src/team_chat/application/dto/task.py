from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from team_chat.domain.value_objects.enums import TaskPrivacy


@dataclass(frozen=True, slots=True)
class TaskDraft:
    title: str
    description: str
    assignee: str = ""
    privacy: TaskPrivacy = TaskPrivacy.PUBLIC
    due_date: date | None = None
