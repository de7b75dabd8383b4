"""Telegram-to-core mapping adapter.

This keeps Telethon-specific details out of the core pipeline. The group key
rule lives here and is shared by dialogs and messages so registry lookups
always agree.
"""

from __future__ import annotations

from typing import Any, Optional

from telethon.tl.custom import Message

from core.models import Chat, ChatMessage


def group_key(chat_id: Optional[int], username: Optional[str]) -> str:
    """Normalize a group key: ``@username`` when public, else ``chat_id:<id>``."""

    if isinstance(username, str) and username:
        return f"@{username.lower()}"
    # Fallback: always stable and universal
    return f"chat_id:{chat_id}"


def group_key_from_message(message: Message) -> str:
    chat = getattr(message, "chat", None)
    return group_key(message.chat_id, getattr(chat, "username", None))


def group_key_from_dialog(dialog: Any) -> str:
    entity = getattr(dialog, "entity", None)
    dialog_id = getattr(dialog, "id", None) or getattr(entity, "id", None)
    return group_key(dialog_id, getattr(entity, "username", None))


def _quoted_message_id(message: Message) -> Optional[int]:
    reply_to = getattr(message, "reply_to", None)
    if not reply_to:
        return None
    # Plain posts inside a forum topic point at the topic root, which is not a quote.
    if getattr(reply_to, "forum_topic", False) and not getattr(reply_to, "reply_to_top_id", None):
        return None
    return getattr(reply_to, "reply_to_msg_id", None)


def _has_media(message: Message) -> bool:
    # Link previews also populate message.media; only real attachments count.
    return bool(getattr(message, "photo", None) or getattr(message, "document", None))


def build_message(message: Message, group_id: Optional[str] = None) -> ChatMessage:
    """Build a core ChatMessage from a Telethon Message.

    ``group_id`` overrides the derived key when the caller already knows which
    group the message was fetched from.
    """

    return ChatMessage(
        group_id=group_id or group_key_from_message(message),
        message_id=message.id,
        date=message.date,
        text=message.raw_text or "",
        is_group=bool(getattr(message, "is_group", False)),
        has_media=_has_media(message),
        reply_to_msg_id=_quoted_message_id(message),
        raw=message,
    )


def chat_from_dialog(dialog: Any) -> Chat:
    """Build a core Chat from a Telethon Dialog."""

    entity = getattr(dialog, "entity", None)
    return Chat(
        group_id=group_key_from_dialog(dialog),
        name=str(getattr(dialog, "name", None) or getattr(entity, "title", None) or "unknown"),
        is_group=bool(getattr(dialog, "is_group", False)),
        participant_count=int(getattr(entity, "participants_count", None) or 0),
        description=None,
        last_message_at=getattr(dialog, "date", None),
    )


def entity_ref(group_id: str) -> Any:
    """Return what Telethon's get_entity accepts for a group key."""

    if group_id.startswith("chat_id:"):
        return int(group_id.split("chat_id:", 1)[1])
    return group_id
