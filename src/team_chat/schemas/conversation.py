from __future__ import annotations

from pydantic import BaseModel


class ChannelView(BaseModel):
    id: str
    name: str
    is_private: bool
    is_pinned: bool
    is_archived: bool
    unread_count: int
    mention_count: int

    model_config = {"from_attributes": True}


class DirectMessageUserView(BaseModel):
    id: str
    name: str
    avatar: str | None = None
    is_online: bool

    model_config = {"from_attributes": True}


class DirectMessageView(BaseModel):
    id: str
    users: list[DirectMessageUserView]
    unread_count: int
    mention_count: int
    partner: DirectMessageUserView | None = None

    model_config = {"from_attributes": True}


class SidebarView(BaseModel):
    pinned: list[ChannelView]
    channels: list[ChannelView]
    archived: list[ChannelView]
    direct_messages: list[DirectMessageView]
