"""Simulated voice presence.

No audio is carried anywhere: a voice channel only tracks who is connected,
its capacity and lock state, and each user's self-mute / deafen flags.  Every
change is announced as a system message in the channel's own history so it
shows up in the same stream as chat.
"""

from __future__ import annotations

import logging

from ..core.permissions import Capability
from ..core.results import Reason, Result, fail, ok
from ..data.models import Channel, Server, User, VoiceSpec
from ..data.store import ChatStore
from .access import require_capability, resolve_channel

log = logging.getLogger(__name__)

VOICE_ACTION_PREFIX = "[VOICE ACTION] "

_ACTION_TEXT = {
    "speak": "{name} is speaking...",
    "mute": "{name} muted their microphone",
    "unmute": "{name} unmuted their microphone",
    "deafen": "{name} deafened",
    "undeafen": "{name} undeafened",
}


class PresenceEngine:
    def __init__(self, store: ChatStore) -> None:
        self.store = store

    def _voice(self, actor: User | None, server_id: str, channel_id: str) -> Result:
        res = resolve_channel(self.store, actor, server_id, channel_id)
        if not res.ok:
            return res
        server, channel = res.value
        if channel.voice is None:
            return fail(Reason.WRONG_CHANNEL_KIND, "This is not a voice channel.")
        return ok((server, channel))

    def _release(self, user: User, channel: Channel) -> None:
        voice: VoiceSpec = channel.voice
        voice.connected.discard(user.user_id)
        voice.self_muted.discard(user.user_id)
        voice.deafened.discard(user.user_id)
        channel.append_system(f"{user.username} left the voice channel", self.store.now())

    # ------------------------------------------------------------------
    def connect(self, actor: User | None, server_id: str, channel_id: str) -> Result:
        res = self._voice(actor, server_id, channel_id)
        if not res.ok:
            return res
        _, channel = res.value
        voice: VoiceSpec = channel.voice
        if voice.locked:
            return fail(Reason.LOCKED, "Voice channel is locked.")
        if voice.full:
            return fail(Reason.FULL, "Voice channel is full.")
        if actor.user_id in voice.connected:
            return fail(Reason.ALREADY_CONNECTED, f"{actor.username} is already connected to this channel.")
        voice.connected.add(actor.user_id)
        channel.append_system(f"{actor.username} joined the voice channel", self.store.now())
        log.info("%s connected to voice %s", actor.username, channel.name)
        return ok(channel.channel_id)

    def disconnect(self, actor: User | None, server_id: str, channel_id: str) -> Result:
        res = self._voice(actor, server_id, channel_id)
        if not res.ok:
            return res
        _, channel = res.value
        if actor.user_id not in channel.voice.connected:
            return fail(Reason.NOT_CONNECTED, f"{actor.username} is not connected to this channel.")
        self._release(actor, channel)
        log.info("%s disconnected from voice %s", actor.username, channel.name)
        return ok(channel.channel_id)

    def act(self, actor: User | None, server_id: str, channel_id: str, action: str) -> Result:
        res = self._voice(actor, server_id, channel_id)
        if not res.ok:
            return res
        _, channel = res.value
        voice: VoiceSpec = channel.voice
        if actor.user_id not in voice.connected:
            return fail(Reason.NOT_CONNECTED, "You must be connected to the voice channel first.")
        action = (action or "").strip()
        if not action:
            return fail(Reason.EMPTY_CONTENT, "Voice action cannot be empty.")

        key = action.lower()
        if key == "mute":
            voice.self_muted.add(actor.user_id)
        elif key == "unmute":
            voice.self_muted.discard(actor.user_id)
        elif key == "deafen":
            voice.deafened.add(actor.user_id)
        elif key == "undeafen":
            voice.deafened.discard(actor.user_id)
        template = _ACTION_TEXT.get(key)
        text = template.format(name=actor.username) if template else f"{actor.username} {action}"
        message = channel.append_system(VOICE_ACTION_PREFIX + text, self.store.now())
        return ok(message.message_id)

    # ------------------------------------------------------------------
    # Channel settings
    # ------------------------------------------------------------------
    def set_capacity(
        self, actor: User | None, server_id: str, channel_id: str, capacity: int
    ) -> Result:
        res = self._voice(actor, server_id, channel_id)
        if not res.ok:
            return res
        server, channel = res.value
        err = require_capability(actor, server, Capability.MANAGE_CHANNELS)
        if err:
            return err
        if capacity < 1:
            return fail(Reason.INVALID_LIMIT, "Capacity must be at least 1.")
        channel.voice.capacity = capacity
        log.info("%s set capacity of %s to %d", actor.username, channel.name, capacity)
        return ok(capacity)

    def set_locked(
        self, actor: User | None, server_id: str, channel_id: str, locked: bool
    ) -> Result:
        res = self._voice(actor, server_id, channel_id)
        if not res.ok:
            return res
        server, channel = res.value
        err = require_capability(actor, server, Capability.MANAGE_CHANNELS)
        if err:
            return err
        channel.voice.locked = locked
        log.info("%s %s voice channel %s", actor.username, "locked" if locked else "unlocked", channel.name)
        return ok(locked)

    # ------------------------------------------------------------------
    # Cleanup hooks
    # ------------------------------------------------------------------
    def drop_from_server(self, user: User, server: Server) -> None:
        """Disconnect ``user`` from every voice channel of ``server``."""
        for channel in server.channels:
            voice = channel.voice
            if voice is not None and user.user_id in voice.connected:
                self._release(user, channel)

