"""Core message processing pipeline.

This module is integration-agnostic. It only relies on ports for message
resolution and notifications, enabling other transports or frontends without
changes here.
"""

from __future__ import annotations

import logging
from typing import Optional

from core.classifier import analyze
from core.extractor import extract_listing
from core.listing_store import ListingStore
from core.models import ChatMessage, Listing, listing_id_for
from core.ports import EVENT_DETECTED, EVENT_SOLD, MessageResolver, NotifierPort
from core.registry import GroupRegistry

LOGGER = logging.getLogger(__name__)

SOLD_KEYWORD = "sold"


class ListingProcessor:
    """Orchestrates gating, classification, extraction, storage and sold tracking."""

    def __init__(
        self,
        registry: GroupRegistry,
        store: ListingStore,
        resolver: MessageResolver,
        notifier: Optional[NotifierPort] = None,
        notify_sold: bool = True,
    ) -> None:
        self._registry = registry
        self._store = store
        self._resolver = resolver
        self._notifier = notifier
        self._notify_sold = notify_sold

    def accepts(self, message: ChatMessage) -> bool:
        """Return True when the message comes from an active group."""

        return message.is_group and self._registry.is_active(message.group_id)

    async def handle(self, message: ChatMessage) -> Optional[Listing]:
        """Process one live message; return the listing it created, if any."""

        if not self.accepts(message):
            return None

        # Media-only messages without captions carry nothing to classify.
        if not message.text.strip():
            return None

        # A sold reply is a status update for an earlier listing, not a new one.
        if self.is_sold_notice(message):
            sold = await self.apply_sold_notice(message)
            if sold is not None and self._notifier is not None and self._notify_sold:
                await self._notifier.send(EVENT_SOLD, sold)
            return None

        stored, created = await self.ingest(message)
        if stored is None:
            return None
        if created:
            LOGGER.info("Listing detected in %s: %s (%s)", stored.group_id, stored.title, stored.price)
            if self._notifier is not None:
                await self._notifier.send(EVENT_DETECTED, stored)
        return stored

    async def ingest(self, message: ChatMessage) -> tuple[Optional[Listing], bool]:
        """Store the listing a message carries; return it and whether it is new.

        Messages already tracked, or whose sold listing already expired, skip
        extraction so senders and media are resolved once per listing.
        """

        existing = self._store.get(message.listing_id)
        if existing is not None:
            return existing, False
        if self._store.is_retired(message.listing_id):
            LOGGER.debug("Skipping %s: sold listing already expired", message.listing_id)
            return None, False

        listing = await self.detect(message)
        if listing is None:
            return None, False
        return self._store.add(listing)

    async def detect(self, message: ChatMessage) -> Optional[Listing]:
        """Classify and extract without touching the store."""

        signals = analyze(message.text)
        LOGGER.debug("Signals for %s: %s", message.listing_id, signals)
        if not signals.is_for_sale:
            return None
        return await extract_listing(message, self._resolver)

    @staticmethod
    def is_sold_notice(message: ChatMessage) -> bool:
        return message.has_quoted_message and SOLD_KEYWORD in message.text.lower()

    async def apply_sold_notice(self, message: ChatMessage) -> Optional[Listing]:
        """Mark the quoted listing sold when the message is a sold reply.

        Returns the listing that flipped to sold, or None.
        """

        if not self.is_sold_notice(message):
            return None

        try:
            quoted = await self._resolver.resolve_quoted(message)
        except Exception:
            LOGGER.exception("Failed to resolve quoted message for %s", message.listing_id)
            return None
        if quoted is None:
            return None

        return self._store.mark_sold(listing_id_for(quoted.group_id, quoted.message_id))
