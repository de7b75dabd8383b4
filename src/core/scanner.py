"""Windowed historical scan with a single time-bounded result cache.

A scan re-reads recent history of every active group, which can take seconds
to minutes, so the result of the most recent full scan is kept for a fixed
TTL. The scan only yields to the event loop at transport calls and never
holds a lock, so live ingestion keeps running while a scan is in flight.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
import time
from typing import Callable, Optional

from core.config import ScanConfig
from core.errors import TransportUnavailableError
from core.models import Chat, Listing
from core.ports import ChatTransport
from core.processor import ListingProcessor
from core.registry import GroupRegistry

LOGGER = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _log_scan_failure(future: asyncio.Future) -> None:
    # Retrieves the error even when every waiting caller already timed out.
    if future.cancelled():
        return
    exc = future.exception()
    if exc is not None:
        LOGGER.error("Window scan failed", exc_info=exc)


@dataclass(frozen=True)
class ScanStats:
    groups_scanned: int
    groups_failed: int
    messages_scanned: int
    items_detected: int
    items_marked_sold: int
    truncated: bool


@dataclass(frozen=True)
class ScanCacheEntry:
    items: tuple[Listing, ...]
    captured_at: float
    stats: ScanStats


class WindowedScanner:
    """Produces all listings from active groups within the lookback window."""

    def __init__(
        self,
        transport: ChatTransport,
        registry: GroupRegistry,
        processor: ListingProcessor,
        config: Optional[ScanConfig] = None,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._transport = transport
        self._registry = registry
        self._processor = processor
        self._config = config or ScanConfig()
        self._clock = clock
        self._now = now
        self._cache: Optional[ScanCacheEntry] = None
        self._inflight: Optional[asyncio.Future] = None
        self._generation = 0
        self._last_stats: Optional[ScanStats] = None

    @property
    def last_stats(self) -> Optional[ScanStats]:
        return self._last_stats

    @property
    def cached(self) -> Optional[ScanCacheEntry]:
        return self._cache

    def invalidate(self) -> None:
        """Drop the cached result regardless of its age.

        An in-flight scan is detached: its callers still get its result, but
        it is not published and the next call starts a fresh scan.
        """

        self._cache = None
        self._inflight = None
        self._generation += 1

    async def get_listings(self) -> list[Listing]:
        """Return the cached window, or scan when it is missing or stale."""

        if not self._transport.is_connected():
            raise TransportUnavailableError()

        entry = self._cache
        if entry is not None and self._clock() - entry.captured_at < self._config.cache_ttl_seconds:
            LOGGER.debug("Returning cached window (%s listings)", len(entry.items))
            return list(entry.items)

        # Concurrent callers share one scan instead of each hitting the transport.
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._run(self._generation))
            self._inflight.add_done_callback(_log_scan_failure)
        # Shielded so a caller giving up (timeout) does not cancel the shared scan.
        entry = await asyncio.shield(self._inflight)
        return list(entry.items)

    async def _run(self, generation: int) -> ScanCacheEntry:
        try:
            entry = await self._scan()
        finally:
            if generation == self._generation:
                self._inflight = None
        self._last_stats = entry.stats
        if generation == self._generation:
            # Publish the whole result in one assignment.
            self._cache = entry
        return entry

    async def _scan(self) -> ScanCacheEntry:
        chats = await self._transport.list_chats()
        groups = [chat for chat in chats if chat.is_group and self._registry.is_active(chat.group_id)]
        cutoff = self._now() - timedelta(days=self._config.window_days)
        LOGGER.info(
            "Scanning %s active groups for listings since %s",
            len(groups),
            cutoff.isoformat(),
        )

        items: dict[str, Listing] = {}
        messages_scanned = 0
        groups_scanned = 0
        groups_failed = 0
        marked_sold = 0
        truncated = False

        for chat in groups:
            if messages_scanned >= self._config.message_cap:
                truncated = True
                break
            try:
                budget = self._config.message_cap - messages_scanned
                group_items, group_messages, group_sold, group_truncated = await self._scan_group(
                    chat, cutoff, budget
                )
            except Exception:
                LOGGER.exception("Failed to scan group %s (%s)", chat.name, chat.group_id)
                groups_failed += 1
                continue

            groups_scanned += 1
            messages_scanned += group_messages
            marked_sold += group_sold
            items.update(group_items)
            if group_truncated:
                truncated = True
                LOGGER.info("Reached message cap (%s), stopping scan", self._config.message_cap)
                break

        stats = ScanStats(
            groups_scanned=groups_scanned,
            groups_failed=groups_failed,
            messages_scanned=messages_scanned,
            items_detected=len(items),
            items_marked_sold=marked_sold,
            truncated=truncated,
        )
        LOGGER.info(
            "Window scan complete: groups=%s, failed=%s, messages=%s, listings=%s, sold=%s",
            stats.groups_scanned,
            stats.groups_failed,
            stats.messages_scanned,
            stats.items_detected,
            stats.items_marked_sold,
        )
        return ScanCacheEntry(items=tuple(items.values()), captured_at=self._clock(), stats=stats)

    async def _scan_group(
        self,
        chat: Chat,
        cutoff: datetime,
        budget: int,
    ) -> tuple[dict[str, Listing], int, int, bool]:
        messages = await self._transport.fetch_messages(chat.group_id, self._config.per_group_limit)
        # Oldest first, so sold replies find the listing they quote.
        recent = sorted(
            (message for message in messages if message.date >= cutoff),
            key=lambda message: (message.date, message.message_id),
        )
        LOGGER.info("Found %s recent messages in %s", len(recent), chat.name)

        items: dict[str, Listing] = {}
        scanned = 0
        sold_count = 0
        for message in recent:
            if scanned >= budget:
                return items, scanned, sold_count, True
            scanned += 1
            if not message.text.strip():
                continue

            if self._processor.is_sold_notice(message):
                sold = await self._processor.apply_sold_notice(message)
                if sold is not None:
                    sold_count += 1
                    if sold.id in items:
                        items[sold.id] = sold
                continue

            stored, _ = await self._processor.ingest(message)
            if stored is not None:
                items[stored.id] = stored
        return items, scanned, sold_count, False
