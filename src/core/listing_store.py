"""In-memory listing store with the sold lifecycle (core domain).

State per listing: active -> sold -> removed. A sold listing is dropped a
fixed retention period after it was marked sold, not after creation. Removed
sold ids are remembered for a while so history rescans cannot revive them.
State is process-local; pending removals are lost on restart.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
import logging
import time
from typing import Callable, Optional

from core.config import LifecycleConfig
from core.models import Listing

LOGGER = logging.getLogger(__name__)


class ListingStore:
    """Holds detected listings keyed by listing id."""

    def __init__(
        self,
        config: Optional[LifecycleConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config or LifecycleConfig()
        self._clock = clock
        self._listings: dict[str, Listing] = {}
        self._removals: dict[str, asyncio.TimerHandle] = {}
        # listing id -> clock value after which it may be detected again
        self._retired: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._listings)

    def __contains__(self, listing_id: object) -> bool:
        return listing_id in self._listings

    def add(self, listing: Listing) -> tuple[Optional[Listing], bool]:
        """Insert a listing unless its id is already tracked or retired.

        Returns the stored listing and whether it was newly created; a retired
        id yields ``(None, False)``.
        """

        if self.is_retired(listing.id):
            return None, False
        existing = self._listings.get(listing.id)
        if existing is not None:
            return existing, False
        self._listings[listing.id] = listing
        return listing, True

    def get(self, listing_id: str) -> Optional[Listing]:
        return self._listings.get(listing_id)

    def is_retired(self, listing_id: str) -> bool:
        """Return True when the id belongs to a sold listing that already expired."""

        deadline = self._retired.get(listing_id)
        if deadline is None:
            return False
        if self._clock() >= deadline:
            del self._retired[listing_id]
            return False
        return True

    def mark_sold(self, listing_id: str) -> Optional[Listing]:
        """Flip a tracked listing to sold and schedule its removal.

        Returns the sold listing, or None when the id is unknown or the
        listing was already sold (the first removal deadline stands).
        Must be called from inside the running event loop.
        """

        listing = self._listings.get(listing_id)
        if listing is None or listing.is_sold:
            return None

        sold = replace(listing, is_sold=True)
        self._listings[listing_id] = sold
        loop = asyncio.get_running_loop()
        self._removals[listing_id] = loop.call_later(
            self._config.sold_retention_seconds,
            self._expire,
            listing_id,
        )
        LOGGER.info("Listing %s marked sold (%s)", listing_id, sold.title)
        return sold

    def remove(self, listing_id: str) -> bool:
        """Remove a listing now and cancel any pending removal timer."""

        handle = self._removals.pop(listing_id, None)
        if handle is not None:
            handle.cancel()
        return self._listings.pop(listing_id, None) is not None

    def _expire(self, listing_id: str) -> None:
        self._removals.pop(listing_id, None)
        # Already removed manually: nothing to do.
        if self._listings.pop(listing_id, None) is None:
            return
        self._forget_stale_retirements()
        self._retired[listing_id] = self._clock() + self._config.retired_memory_seconds
        LOGGER.info("Sold listing %s expired", listing_id)

    def _forget_stale_retirements(self) -> None:
        now = self._clock()
        for listing_id in [key for key, deadline in self._retired.items() if now >= deadline]:
            del self._retired[listing_id]

    def get_active(self) -> list[Listing]:
        return [listing for listing in self._listings.values() if not listing.is_sold]

    def get_sold(self) -> list[Listing]:
        return [listing for listing in self._listings.values() if listing.is_sold]

    def count_for_group(self, group_id: str) -> int:
        return sum(1 for listing in self._listings.values() if listing.group_id == group_id)

    def close(self) -> None:
        """Cancel every pending removal timer."""

        for handle in self._removals.values():
            handle.cancel()
        self._removals.clear()
