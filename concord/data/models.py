from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum

from ..core.permissions import Role

SYSTEM_SENDER_ID = "SYSTEM"
SYSTEM_SENDER_NAME = "System"


def new_id() -> str:
    return uuid.uuid4().hex


@dataclass
class User:
    user_id: str
    username: str
    password_hash: str
    role: Role = Role.MEMBER
    created_ts: float = 0.0
    online: bool = False
    last_seen: float = 0.0
    friends: set[str] = field(default_factory=set)
    servers: list[str] = field(default_factory=list)  # joined server ids, in join order
    current_server: str | None = None  # weak reference, id only

    def join_server(self, server_id: str) -> None:
        if server_id not in self.servers:
            self.servers.append(server_id)

    def leave_server(self, server_id: str) -> None:
        if server_id in self.servers:
            self.servers.remove(server_id)
        if self.current_server == server_id:
            self.current_server = None


@dataclass
class Message:
    message_id: str
    content: str
    sender_id: str
    sender_username: str
    channel_id: str
    created_ts: float
    edited: bool = False
    edited_ts: float | None = None

    @property
    def is_system(self) -> bool:
        return self.sender_id == SYSTEM_SENDER_ID

    def edit(self, content: str, ts: float) -> None:
        self.content = content
        self.edited = True
        self.edited_ts = ts

    def render(self) -> str:
        suffix = " (edited)" if self.edited else ""
        return f"{self.sender_username}: {self.content}{suffix}"


class ChannelKind(str, Enum):
    TEXT = "TEXT"
    VOICE = "VOICE"


@dataclass
class TextSpec:
    max_length: int = 2000


@dataclass
class VoiceSpec:
    capacity: int = 99
    locked: bool = False
    connected: set[str] = field(default_factory=set)
    self_muted: set[str] = field(default_factory=set)
    deafened: set[str] = field(default_factory=set)

    @property
    def full(self) -> bool:
        return len(self.connected) >= self.capacity


@dataclass
class Channel:
    """A text or voice channel.

    ``kind`` is the discriminant: text channels carry a :class:`TextSpec`,
    voice channels a :class:`VoiceSpec`.  Use :attr:`text` / :attr:`voice`
    to reach the kind specific fields.
    """

    channel_id: str
    name: str
    server_id: str
    kind: ChannelKind
    spec: TextSpec | VoiceSpec
    created_ts: float = 0.0
    messages: list[Message] = field(default_factory=list)
    muted: set[str] = field(default_factory=set)

    @property
    def text(self) -> TextSpec | None:
        return self.spec if isinstance(self.spec, TextSpec) else None

    @property
    def voice(self) -> VoiceSpec | None:
        return self.spec if isinstance(self.spec, VoiceSpec) else None

    def find_message(self, message_id: str) -> Message | None:
        return next((m for m in self.messages if m.message_id == message_id), None)

    def remove_message(self, message_id: str) -> bool:
        for idx, message in enumerate(self.messages):
            if message.message_id == message_id:
                del self.messages[idx]
                return True
        return False

    def append_system(self, content: str, ts: float) -> Message:
        message = Message(
            message_id=new_id(),
            content=content,
            sender_id=SYSTEM_SENDER_ID,
            sender_username=SYSTEM_SENDER_NAME,
            channel_id=self.channel_id,
            created_ts=ts,
        )
        self.messages.append(message)
        return message


@dataclass
class Server:
    server_id: str
    name: str
    owner_id: str
    invite_code: str
    description: str = ""
    created_ts: float = 0.0
    channels: list[Channel] = field(default_factory=list)
    members: dict[str, Role] = field(default_factory=dict)  # user id -> server role
    banned: set[str] = field(default_factory=set)

    def is_member(self, user_id: str) -> bool:
        return user_id in self.members

    def role_of(self, user_id: str) -> Role | None:
        return self.members.get(user_id)

    def find_channel(self, channel_id: str) -> Channel | None:
        return next((c for c in self.channels if c.channel_id == channel_id), None)

    def channel_named(self, name: str) -> Channel | None:
        wanted = name.strip().lower()
        return next((c for c in self.channels if c.name.lower() == wanted), None)

    def add_member(self, user_id: str, role: Role = Role.MEMBER) -> bool:
        if user_id in self.banned or user_id in self.members:
            return False
        self.members[user_id] = role
        return True

    def ban(self, user_id: str) -> None:
        if user_id == self.owner_id:
            return
        self.members.pop(user_id, None)
        self.banned.add(user_id)


DMKey = tuple[str, str]


def dm_key(a: str, b: str) -> DMKey:
    """Canonical thread key for the unordered pair ``{a, b}``."""
    return (a, b) if a < b else (b, a)
