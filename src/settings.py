"""Static configuration for fpvscope.

All user-editable settings (groups, scan window, lifecycle, media,
notifications, logging) live in a single JSON file for quick edits without
touching Python.
"""

import json
import os

from core.config import LifecycleConfig, ScanConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# Groups and behavior settings are loaded from config.json so users can
# enable/disable chats, set aliases, and tune the scan without editing code.
CONFIG_PATH = os.environ.get("FPVSCOPE_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


def _normalize_group_key(group_key: str) -> str:
    # Usernames are case-insensitive on Telegram; the mapper lower-cases them.
    if group_key.startswith("@"):
        return group_key.lower()
    return group_key


def _normalize_groups(raw_groups: list[dict]) -> tuple[set[str], dict[str, str]]:
    """Return enabled group keys and an alias map keyed by group key."""

    groups: set[str] = set()
    aliases: dict[str, str] = {}
    for entry in raw_groups:
        raw_key = entry.get("group_key")
        if not raw_key:
            continue
        group_key = _normalize_group_key(str(raw_key))
        alias = entry.get("alias")
        if alias:
            aliases[group_key] = alias
        if entry.get("enabled", True):
            groups.add(group_key)
    return groups, aliases


def _resolve_path(path: str) -> str:
    if os.path.isabs(path):
        return path
    return os.path.join(PROJECT_ROOT, path)


_CONFIG = _load_json_config()

# Enabled groups seed the activation registry at startup.
ACTIVE_GROUPS, GROUP_ALIASES = _normalize_groups(_CONFIG.get("groups", []))

# Windowed scan: lookback window, cache TTL and cost bounds.
_scan = _CONFIG.get("scan", {})
SCAN = ScanConfig(
    window_days=int(_scan.get("window_days", 14)),
    cache_ttl_seconds=float(_scan.get("cache_ttl_seconds", 300)),
    per_group_limit=int(_scan.get("per_group_limit", 1000)),
    message_cap=int(_scan.get("message_cap", 5000)),
)
# Run one window scan when the watcher starts so history feeds the store.
SCAN_ON_STARTUP = bool(_scan.get("on_startup", True))

# Sold listings are dropped this long after they were marked sold; their ids
# stay blocked at least as long as the scan window still returns them.
_lifecycle = _CONFIG.get("lifecycle", {})
LIFECYCLE = LifecycleConfig(
    sold_retention_hours=float(_lifecycle.get("sold_retention_hours", 24)),
    retired_memory_days=max(
        float(_lifecycle.get("retired_memory_days", SCAN.window_days)),
        SCAN.window_days,
    ),
)

# Attachments are downloaded into MEDIA_DIR and referenced by path.
_media = _CONFIG.get("media", {})
MEDIA_ENABLED = bool(_media.get("enabled", False))
MEDIA_DIR = _resolve_path(_media.get("directory", "media")) if MEDIA_ENABLED else None

# Notification method switches adapters without changing core logic.
# - "off": no notifications
# - "saved_messages": post to the user's Saved Messages
# - "bot": post via the Bot API (BOT_API env + bot_chat_id)
_notifications = _CONFIG.get("notifications", {})
NOTIFICATION_METHOD = _notifications.get("notification_method", "off")
BOT_CHAT_ID = _notifications.get("bot_chat_id")
NOTIFY_SOLD = bool(_notifications.get("notify_sold", True))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
