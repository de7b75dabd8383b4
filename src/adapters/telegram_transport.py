"""Telethon transport adapter.

Implements the core ChatTransport and MessageResolver ports over a connected
TelegramClient user session.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from telethon import TelegramClient

from adapters.telegram_mapper import build_message, chat_from_dialog, entity_ref
from core.errors import TransportUnavailableError
from core.models import Chat, ChatMessage, SenderInfo

LOGGER = logging.getLogger(__name__)


def _display_name(sender) -> Optional[str]:
    title = getattr(sender, "title", None)
    if title:
        return str(title)
    first = getattr(sender, "first_name", None)
    last = getattr(sender, "last_name", None)
    if first or last:
        return " ".join(part for part in [first, last] if part)
    return None


def _handle(sender) -> Optional[str]:
    username = getattr(sender, "username", None)
    if username:
        return f"@{username}"
    phone = getattr(sender, "phone", None)
    if phone:
        return f"+{phone}"
    return None


class TelegramTransport:
    """ChatTransport + MessageResolver backed by a Telethon client."""

    def __init__(self, client: TelegramClient, media_dir: Optional[str] = None) -> None:
        self._client = client
        self._media_dir = media_dir
        if media_dir:
            os.makedirs(media_dir, exist_ok=True)

    def is_connected(self) -> bool:
        return bool(self._client.is_connected())

    async def list_chats(self) -> list[Chat]:
        try:
            return [chat_from_dialog(dialog) async for dialog in self._client.iter_dialogs()]
        except ConnectionError as exc:
            raise TransportUnavailableError(f"Failed to list chats: {exc}") from exc

    async def fetch_messages(self, group_id: str, limit: int) -> list[ChatMessage]:
        entity = await self._client.get_entity(entity_ref(group_id))
        return [
            build_message(message, group_id=group_id)
            async for message in self._client.iter_messages(entity, limit=limit)
        ]

    async def resolve_quoted(self, message: ChatMessage) -> Optional[ChatMessage]:
        if message.raw is None:
            return None
        reply = await message.raw.get_reply_message()
        if reply is None:
            return None
        return build_message(reply, group_id=message.group_id)

    async def resolve_sender(self, message: ChatMessage) -> SenderInfo:
        if message.raw is None:
            return SenderInfo()
        sender = await message.raw.get_sender()
        if sender is None:
            return SenderInfo()
        return SenderInfo(display_name=_display_name(sender), handle=_handle(sender))

    async def resolve_media(self, message: ChatMessage) -> Optional[str]:
        """Download the attachment and return its local path as the reference."""

        if not self._media_dir or message.raw is None:
            return None
        path = await message.raw.download_media(file=self._media_dir + os.sep)
        if path:
            LOGGER.debug("Saved media for %s to %s", message.listing_id, path)
        return path
