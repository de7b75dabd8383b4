"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for transport and notification adapters so
that the core can be reused with different chat backends.
"""

from __future__ import annotations

from typing import Optional, Protocol

from core.models import Chat, ChatMessage, Listing, SenderInfo

EVENT_DETECTED = "detected"
EVENT_SOLD = "sold"


class ChatTransport(Protocol):
    """Chat listing and history access required by the scanner."""

    def is_connected(self) -> bool:
        ...

    async def list_chats(self) -> list[Chat]:
        ...

    async def fetch_messages(self, group_id: str, limit: int) -> list[ChatMessage]:
        ...


class MessageResolver(Protocol):
    """Per-message lookups required by the extractor and sold tracking."""

    async def resolve_quoted(self, message: ChatMessage) -> Optional[ChatMessage]:
        ...

    async def resolve_sender(self, message: ChatMessage) -> SenderInfo:
        ...

    async def resolve_media(self, message: ChatMessage) -> Optional[str]:
        ...


class NotifierPort(Protocol):
    """Notification operations required by the core pipeline."""

    async def send(self, event: str, listing: Listing) -> None:
        ...
