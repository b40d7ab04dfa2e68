"""Read models handed to the presentation layer.

The models are implemented using :mod:`pydantic` so they can be rendered or
serialised without exposing the mutable entities in :mod:`concord.data`.
"""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from ..data.models import Channel, ChannelKind, Message, Server, User
from .permissions import Role


class Session(BaseModel):
    """The single authenticated session driving the application.

    Attributes
    ----------
    token:
        Random identifier; ``logout`` must present the same token.
    user_id:
        Identifier of the logged in user.
    username:
        Display name captured at login.
    started_ts:
        Login time as a POSIX timestamp.

    """

    token: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    username: str
    started_ts: float


class FriendInfo(BaseModel):
    user_id: str
    username: str
    online: bool


class MemberInfo(BaseModel):
    user_id: str
    username: str
    role: Role
    online: bool
    is_owner: bool = False


class ChannelSummary(BaseModel):
    channel_id: str
    name: str
    kind: ChannelKind
    message_count: int
    connected_count: int | None = None
    capacity: int | None = None
    locked: bool | None = None

    @classmethod
    def of(cls, channel: Channel) -> ChannelSummary:
        voice = channel.voice
        return cls(
            channel_id=channel.channel_id,
            name=channel.name,
            kind=channel.kind,
            message_count=len(channel.messages),
            connected_count=len(voice.connected) if voice else None,
            capacity=voice.capacity if voice else None,
            locked=voice.locked if voice else None,
        )


class ServerInfo(BaseModel):
    server_id: str
    name: str
    description: str
    owner_id: str
    owner_username: str
    invite_code: str
    created_ts: float
    members: list[MemberInfo]
    channels: list[ChannelSummary]

    @property
    def member_count(self) -> int:
        return len(self.members)

    @property
    def channel_count(self) -> int:
        return len(self.channels)

    @classmethod
    def of(cls, server: Server, users: dict[str, User]) -> ServerInfo:
        members = []
        for user_id, role in server.members.items():
            user = users.get(user_id)
            members.append(
                MemberInfo(
                    user_id=user_id,
                    username=user.username if user else "?",
                    role=role,
                    online=bool(user and user.online),
                    is_owner=user_id == server.owner_id,
                )
            )
        owner = users.get(server.owner_id)
        return cls(
            server_id=server.server_id,
            name=server.name,
            description=server.description,
            owner_id=server.owner_id,
            owner_username=owner.username if owner else "?",
            invite_code=server.invite_code,
            created_ts=server.created_ts,
            members=members,
            channels=[ChannelSummary.of(c) for c in server.channels],
        )


class UserProfile(BaseModel):
    user_id: str
    username: str
    role: Role
    online: bool
    last_seen: float
    server_count: int
    friends: list[FriendInfo]

    @property
    def friend_count(self) -> int:
        return len(self.friends)


class MessageView(BaseModel):
    message_id: str
    content: str
    sender_id: str
    sender_username: str
    created_ts: float
    edited: bool
    edited_ts: float | None = None

    @classmethod
    def of(cls, message: Message) -> MessageView:
        return cls(
            message_id=message.message_id,
            content=message.content,
            sender_id=message.sender_id,
            sender_username=message.sender_username,
            created_ts=message.created_ts,
            edited=message.edited,
            edited_ts=message.edited_ts,
        )


class ChannelHistory(BaseModel):
    """The most recent slice of a channel's history, for display."""

    channel: ChannelSummary
    messages: list[MessageView]
    total: int
    connected: list[str] = Field(default_factory=list)

    @property
    def truncated(self) -> bool:
        return self.total > len(self.messages)


__all__ = [
    "ChannelHistory",
    "ChannelSummary",
    "FriendInfo",
    "MemberInfo",
    "MessageView",
    "ServerInfo",
    "Session",
    "UserProfile",
]
