"""Command/query facade used by the presentation layer.

The presentation layer owns no business state: it only calls these methods
and renders what they return.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import logging
from typing import Optional

from core.errors import TransportUnavailableError
from core.listing_store import ListingStore
from core.models import ChatMessage, ConnectionStatus, GroupSummary, Listing, SyncSummary
from core.ports import ChatTransport
from core.processor import ListingProcessor
from core.registry import GroupRegistry
from core.scanner import WindowedScanner

LOGGER = logging.getLogger(__name__)


class MarketplaceService:
    """Single entry point over the registry, store, processor and scanner."""

    def __init__(
        self,
        transport: ChatTransport,
        registry: GroupRegistry,
        store: ListingStore,
        processor: ListingProcessor,
        scanner: WindowedScanner,
    ) -> None:
        self._transport = transport
        self._registry = registry
        self._store = store
        self._processor = processor
        self._scanner = scanner
        self._last_sync: Optional[datetime] = None

    async def handle_incoming_message(self, message: ChatMessage) -> Optional[Listing]:
        return await self._processor.handle(message)

    def activate_group(self, group_id: str, active: bool) -> None:
        self._registry.set_active(group_id, active)

    async def list_groups(self) -> list[GroupSummary]:
        """Return group chats joined with activation state and listing counts."""

        self._require_connection()
        chats = await self._transport.list_chats()
        return [
            GroupSummary(
                group_id=chat.group_id,
                name=chat.name,
                member_count=chat.participant_count,
                is_active=self._registry.is_active(chat.group_id),
                last_activity=chat.last_message_at,
                description=chat.description,
                items_found=self._store.count_for_group(chat.group_id),
            )
            for chat in chats
            if chat.is_group
        ]

    def get_active_listings(self) -> list[Listing]:
        return self._store.get_active()

    def get_sold_listings(self) -> list[Listing]:
        return self._store.get_sold()

    async def get_windowed_listings(self, timeout: Optional[float] = None) -> list[Listing]:
        """Return the cached-or-fresh window scan.

        ``timeout`` bounds how long this caller waits; the shared scan keeps
        running and still fills the cache when it finishes.
        """

        items = await asyncio.wait_for(self._scanner.get_listings(), timeout)
        self._last_sync = datetime.now(timezone.utc)
        return items

    async def get_windowed_sold_listings(self, timeout: Optional[float] = None) -> list[Listing]:
        items = await self.get_windowed_listings(timeout)
        return [item for item in items if item.is_sold]

    def force_resync(self) -> SyncSummary:
        """Invalidate the window cache and report current counters."""

        self._scanner.invalidate()
        self._last_sync = datetime.now(timezone.utc)
        stats = self._scanner.last_stats
        summary = SyncSummary(
            messages_scanned=stats.messages_scanned if stats else 0,
            items_detected=len(self._store),
            items_marked_sold=len(self._store.get_sold()),
        )
        LOGGER.info(
            "Forced resync: messages=%s, detected=%s, sold=%s",
            summary.messages_scanned,
            summary.items_detected,
            summary.items_marked_sold,
        )
        return summary

    def connection_status(self) -> ConnectionStatus:
        return ConnectionStatus(is_connected=self._transport.is_connected(), last_sync=self._last_sync)

    def _require_connection(self) -> None:
        if not self._transport.is_connected():
            raise TransportUnavailableError()
