"""Channel messages, channel mutes and direct-message threads."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from ..core.models import ChannelHistory, ChannelSummary, MessageView
from ..core.permissions import Capability
from ..core.results import Reason, Result, fail, ok
from ..data.models import Message, User, dm_key, new_id
from ..data.store import ChatStore
from .access import may_moderate_message, require_capability, require_user, resolve_channel

log = logging.getLogger(__name__)

VOICE_TEXT_PREFIX = "[VOICE] "


class MessageSearch:
    """Case-insensitive substring search over a message history.

    Iterating scans the history lazily, in chronological order, and every new
    iteration starts a fresh scan, so the results always reflect the current
    history.  Nothing is mutated.
    """

    def __init__(self, messages: Sequence[Message], keyword: str) -> None:
        self._messages = messages
        self.keyword = keyword

    def __iter__(self) -> Iterator[Message]:
        needle = self.keyword.lower()
        return (m for m in self._messages if needle in m.content.lower())

    def first(self) -> Message | None:
        return next(iter(self), None)


class MessagingEngine:
    def __init__(self, store: ChatStore) -> None:
        self.store = store

    # ------------------------------------------------------------------
    # Channel messages
    # ------------------------------------------------------------------
    def send_message(
        self, sender: User | None, server_id: str, channel_id: str, content: str
    ) -> Result:
        res = resolve_channel(self.store, sender, server_id, channel_id)
        if not res.ok:
            return res
        _, channel = res.value
        if sender.user_id in channel.muted:
            return fail(Reason.MUTED, "You are muted in this channel and cannot send messages.")

        text_spec, voice_spec = channel.text, channel.voice
        if text_spec is not None:
            if len(content) > text_spec.max_length:
                return fail(
                    Reason.TOO_LONG,
                    f"Message too long. Maximum length is {text_spec.max_length} characters.",
                )
            body = content
        elif voice_spec is not None:
            if sender.user_id not in voice_spec.connected:
                return fail(
                    Reason.NOT_CONNECTED,
                    "You must be connected to the voice channel to chat.",
                )
            body = VOICE_TEXT_PREFIX + content
        else:  # pragma: no cover - kinds are exhaustive
            raise AssertionError(f"unknown channel kind {channel.kind!r}")

        message = Message(
            message_id=new_id(),
            content=body,
            sender_id=sender.user_id,
            sender_username=sender.username,
            channel_id=channel.channel_id,
            created_ts=self.store.now(),
        )
        channel.messages.append(message)
        log.debug("%s posted %s in %s", sender.username, message.message_id, channel.name)
        return ok(message.message_id)

    def edit_message(
        self,
        editor: User | None,
        server_id: str,
        channel_id: str,
        message_id: str,
        new_content: str,
    ) -> Result:
        res = resolve_channel(self.store, editor, server_id, channel_id)
        if not res.ok:
            return res
        server, channel = res.value
        text_spec = channel.text
        if text_spec is None:
            return fail(Reason.WRONG_CHANNEL_KIND, "Cannot edit messages in voice channels.")
        message = channel.find_message(message_id)
        if message is None:
            return fail(Reason.MESSAGE_NOT_FOUND, "Message not found.")
        if not may_moderate_message(editor, message.sender_id, server):
            return fail(Reason.FORBIDDEN, "You can only edit your own messages.")
        if len(new_content) > text_spec.max_length:
            return fail(
                Reason.TOO_LONG,
                f"Message too long. Maximum length is {text_spec.max_length} characters.",
            )
        message.edit(new_content, self.store.now())
        log.debug("%s edited %s", editor.username, message.message_id)
        return ok(message.message_id)

    def delete_message(
        self, actor: User | None, server_id: str, channel_id: str, message_id: str
    ) -> Result:
        res = resolve_channel(self.store, actor, server_id, channel_id)
        if not res.ok:
            return res
        server, channel = res.value
        message = channel.find_message(message_id)
        if message is None:
            return fail(Reason.MESSAGE_NOT_FOUND, "Message not found.")
        if not may_moderate_message(actor, message.sender_id, server):
            return fail(Reason.FORBIDDEN, "You can only delete your own messages.")
        channel.remove_message(message_id)
        log.debug("%s deleted %s", actor.username, message_id)
        return ok(message_id)

    def search_messages(
        self, actor: User | None, server_id: str, channel_id: str, keyword: str
    ) -> Result:
        res = resolve_channel(self.store, actor, server_id, channel_id)
        if not res.ok:
            return res
        _, channel = res.value
        return ok(MessageSearch(channel.messages, keyword or ""))

    def history(self, actor: User | None, server_id: str, channel_id: str) -> Result:
        """Return the most recent slice of a channel for display."""
        res = resolve_channel(self.store, actor, server_id, channel_id)
        if not res.ok:
            return res
        _, channel = res.value
        settings = self.store.settings
        voice = channel.voice
        limit = settings.voice_history_limit if voice else settings.text_history_limit
        recent = channel.messages[-limit:] if limit > 0 else []
        return ok(
            ChannelHistory(
                channel=ChannelSummary.of(channel),
                messages=[MessageView.of(m) for m in recent],
                total=len(channel.messages),
                connected=sorted(voice.connected) if voice else [],
            )
        )

    # ------------------------------------------------------------------
    # Channel mutes
    # ------------------------------------------------------------------
    def _set_muted(
        self,
        actor: User | None,
        server_id: str,
        channel_id: str,
        target_username: str,
        muted: bool,
    ) -> Result:
        res = resolve_channel(self.store, actor, server_id, channel_id)
        if not res.ok:
            return res
        server, channel = res.value
        err = require_capability(actor, server, Capability.MUTE_USERS)
        if err:
            return err
        target = self.store.user_by_name(target_username)
        if target is None:
            return fail(Reason.USER_NOT_FOUND, f"User '{target_username}' not found.")
        if muted:
            channel.muted.add(target.user_id)
        else:
            channel.muted.discard(target.user_id)
        log.info(
            "%s %s %s in %s",
            actor.username,
            "muted" if muted else "unmuted",
            target.username,
            channel.name,
        )
        return ok(target.user_id)

    def mute_user(
        self, actor: User | None, server_id: str, channel_id: str, target_username: str
    ) -> Result:
        return self._set_muted(actor, server_id, channel_id, target_username, True)

    def unmute_user(
        self, actor: User | None, server_id: str, channel_id: str, target_username: str
    ) -> Result:
        # Unmuting someone who is not muted is a successful no-op.
        return self._set_muted(actor, server_id, channel_id, target_username, False)

    # ------------------------------------------------------------------
    # Direct messages
    # ------------------------------------------------------------------
    def _peer(self, actor: User | None, username: str) -> Result:
        err = require_user(actor)
        if err:
            return err
        peer = self.store.user_by_name(username)
        if peer is None:
            return fail(Reason.USER_NOT_FOUND, f"User '{username}' not found.")
        if peer.user_id == actor.user_id:
            return fail(Reason.SELF_TARGET, "You cannot send a direct message to yourself.")
        return ok(peer)

    def send_direct_message(
        self, sender: User | None, recipient_username: str, content: str
    ) -> Result:
        res = self._peer(sender, recipient_username)
        if not res.ok:
            return res
        recipient: User = res.value
        key = dm_key(sender.user_id, recipient.user_id)
        message = Message(
            message_id=new_id(),
            content=content,
            sender_id=sender.user_id,
            sender_username=sender.username,
            channel_id="dm:" + ":".join(key),
            created_ts=self.store.now(),
        )
        self.store.thread_for_append(key).append(message)
        log.debug("%s sent a direct message to %s", sender.username, recipient.username)
        return ok(message.message_id)

    def direct_messages_with(self, actor: User | None, username: str) -> Result:
        """Return the thread with ``username`` in chronological order.

        The returned sequence is the live thread; callers must not mutate it.
        """
        res = self._peer(actor, username)
        if not res.ok:
            return res
        peer: User = res.value
        return ok(self.store.thread(dm_key(actor.user_id, peer.user_id)))
