from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Channel:
    id: str
    name: str
    is_private: bool = False
    is_pinned: bool = False
    is_archived: bool = False
    unread_count: int = 0
    mention_count: int = 0
    member_ids: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DirectMessageUser:
    id: str
    name: str
    avatar: str | None = None
    is_online: bool = False


@dataclass(frozen=True, slots=True)
class DirectMessageThread:
    id: str
    users: tuple[DirectMessageUser, DirectMessageUser]
    unread_count: int = 0
    mention_count: int = 0
