"""Telegram client factory for fpvscope.

The client's lifecycle is managed explicitly by the app (connect, authorize,
run_until_disconnected) so it is obvious when the session starts and ends.
"""

from __future__ import annotations

import logging
import os

from dotenv import load_dotenv
from telethon import TelegramClient

LOGGER = logging.getLogger(__name__)


def build_client() -> TelegramClient:
    """Create a Telethon client from environment variables.

    API_ID/API_HASH come from .env via python-dotenv so secrets stay out of
    the repo. SESSION_NAME defaults to "fpvscope" (a local .session file).
    """

    load_dotenv()

    api_id = os.getenv("API_ID")
    api_hash = os.getenv("API_HASH")
    session_name = os.getenv("SESSION_NAME", "fpvscope")

    if not api_id or not api_hash:
        raise RuntimeError("Missing API_ID or API_HASH in environment")

    LOGGER.info("Initializing Telegram client (session=%s)", session_name)
    return TelegramClient(session_name, int(api_id), api_hash)
