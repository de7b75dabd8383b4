"""Telegram Bot API notification adapter.

Uses the Bot API for delivery so listing events can be routed via a bot chat.
"""

from __future__ import annotations

import asyncio
import json
import urllib.error
import urllib.request

from adapters.notification_formatting import format_notification
from core.models import Listing
from core.ports import EVENT_SOLD


class TelegramBotNotifier:
    """Notifier adapter that sends listing events via the Telegram Bot API."""

    def __init__(self, bot_token: str, chat_id: str, group_aliases: dict[str, str]) -> None:
        self._bot_token = bot_token
        self._chat_id = chat_id
        self._group_aliases = group_aliases

    def _endpoint(self) -> str:
        return f"https://api.telegram.org/bot{self._bot_token}/sendMessage"

    def _post(self, payload: dict) -> None:
        data = json.dumps(payload).encode("utf-8")
        request = urllib.request.Request(self._endpoint(), data=data, method="POST")
        request.add_header("Content-Type", "application/json")
        try:
            with urllib.request.urlopen(request, timeout=10):
                pass
        except urllib.error.HTTPError as e:
            body = e.read().decode("utf-8", errors="replace")
            raise RuntimeError(f"Bot API error {e.code}: {body}") from e

    async def send(self, event: str, listing: Listing) -> None:
        payload = {
            "chat_id": self._chat_id,
            "text": format_notification(event, listing, self._group_aliases, mode="html"),
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
            # Sold updates arrive silently; only new listings ping.
            "disable_notification": event == EVENT_SOLD,
        }
        # urllib blocks, so the request runs off the event loop thread.
        await asyncio.to_thread(self._post, payload)
