"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from core.categories import Category

PRICE_ON_REQUEST = "Price on request"
UNKNOWN = "Unknown"

TITLE_MAX_CHARS = 100
DESCRIPTION_MAX_CHARS = 300


def listing_id_for(group_id: str, message_id: int) -> str:
    """Return the listing identifier derived from its source message.

    Telegram message ids are only unique within a chat, so the group key is
    part of the identifier.
    """

    return f"{group_id}/{message_id}"


@dataclass(frozen=True)
class Chat:
    """Chat metadata as reported by the transport."""

    group_id: str
    name: str
    is_group: bool
    participant_count: int = 0
    description: Optional[str] = None
    last_message_at: Optional[datetime] = None


@dataclass(frozen=True)
class ChatMessage:
    """Minimal message context used by the core processing pipeline."""

    group_id: str
    message_id: int
    date: datetime
    text: str
    is_group: bool
    has_media: bool = False
    reply_to_msg_id: Optional[int] = None
    # Transport-native message object, kept for resolver round-trips.
    raw: Any = field(default=None, compare=False, repr=False)

    @property
    def has_quoted_message(self) -> bool:
        return self.reply_to_msg_id is not None

    @property
    def listing_id(self) -> str:
        return listing_id_for(self.group_id, self.message_id)


@dataclass(frozen=True)
class SenderInfo:
    display_name: Optional[str] = None
    handle: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.handle or UNKNOWN


@dataclass(frozen=True)
class Listing:
    """A structured for-sale item derived from one source message.

    Immutable apart from ``is_sold``; the store swaps in a replaced copy when
    a listing is marked sold.
    """

    id: str
    message_id: int
    group_id: str
    title: str
    description: str
    price: str
    location: str
    category: Category
    seller: str
    time_posted: datetime
    image: Optional[str] = None
    is_sold: bool = False


@dataclass(frozen=True)
class GroupSummary:
    """Activation state joined with transport chat metadata."""

    group_id: str
    name: str
    member_count: int
    is_active: bool
    last_activity: Optional[datetime]
    description: Optional[str]
    items_found: int


@dataclass(frozen=True)
class SyncSummary:
    messages_scanned: int
    items_detected: int
    items_marked_sold: int


@dataclass(frozen=True)
class ConnectionStatus:
    is_connected: bool
    last_sync: Optional[datetime] = None
