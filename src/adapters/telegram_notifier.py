"""Telegram notification adapter for Saved Messages.

Formats a human-readable Markdown message and sends it to Saved Messages.
"""

from __future__ import annotations

from adapters.notification_formatting import format_notification
from core.models import Listing


class TelegramSavedMessagesNotifier:
    """Notifier adapter that sends listing events to the user's Saved Messages."""

    def __init__(self, client, group_aliases: dict[str, str]) -> None:
        self._client = client
        self._group_aliases = group_aliases

    async def send(self, event: str, listing: Listing) -> None:
        message = format_notification(event, listing, self._group_aliases, mode="markdown")
        await self._client.send_message("me", message, parse_mode="Markdown")
