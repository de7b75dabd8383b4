"""Listing tabs: live active/sold listings and the cached scan window."""

from __future__ import annotations

import asyncio
from typing import Any, Iterable

from textual import on, work
from textual.containers import Container, Horizontal, Vertical
from textual.widgets import Button, DataTable, Static

from adapters.notification_formatting import format_group_label, format_time_posted
from core.errors import TransportUnavailableError
from core.models import Listing
from core.service import MarketplaceService

from ..constants import WINDOW_SCAN_TIMEOUT_SECONDS


class _ListingTable(Container):
    """Shared table layout for listing views."""

    def __init__(self, service: MarketplaceService, group_aliases: dict[str, str], **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._service = service
        self._group_aliases = group_aliases

    def compose(self):
        with Vertical(classes="listings-panel"):
            yield DataTable(cursor_type="row", classes="listings-table")
            with Horizontal(classes="actions"):
                yield from self._actions()
            yield Static("", classes="output")

    def _actions(self):
        yield Button("Refresh", classes="refresh-listings")

    def on_mount(self) -> None:
        table = self.query_one(DataTable)
        table.add_column("posted", key="posted", width=20)
        table.add_column("title", key="title", width=34)
        table.add_column("price", key="price", width=14)
        table.add_column("location", key="location", width=16)
        table.add_column("category", key="category", width=15)
        table.add_column("seller", key="seller", width=16)
        table.add_column("group", key="group", width=20)
        table.zebra_stripes = True
        table.styles.height = "1fr"
        self.reload()

    def reload(self) -> None:
        raise NotImplementedError

    @on(Button.Pressed, ".refresh-listings")
    def _on_refresh(self) -> None:
        self.reload()

    def _show(self, listings: Iterable[Listing]) -> int:
        table = self.query_one(DataTable)
        table.clear()
        count = 0
        for listing in sorted(listings, key=lambda item: item.time_posted, reverse=True):
            table.add_row(
                format_time_posted(listing),
                self._clip_text(listing.title, 34),
                listing.price,
                self._clip_text(listing.location, 16),
                listing.category.value,
                self._clip_text(listing.seller, 16),
                self._clip_text(format_group_label(listing.group_id, self._group_aliases), 20),
                key=listing.id,
            )
            count += 1
        return count

    def _set_output(self, message: str) -> None:
        self.query_one(".output", Static).update(message)

    @staticmethod
    def _clip_text(value: str, limit: int) -> str:
        if len(value) <= limit:
            return value
        return value[: limit - 3] + "..."


class ActiveListingsTab(_ListingTable):
    def reload(self) -> None:
        count = self._show(self._service.get_active_listings())
        self._set_output(f"{count} active listings")


class SoldListingsTab(_ListingTable):
    def reload(self) -> None:
        count = self._show(self._service.get_sold_listings())
        self._set_output(f"{count} sold listings (dropped after the retention period)")


class WindowTab(_ListingTable):
    """Cached-or-fresh listings from the historical scan window."""

    def _actions(self):
        yield Button("Refresh", classes="refresh-listings")
        yield Button("Force resync", id="force-resync", variant="warning")

    def reload(self) -> None:
        self._load_window()

    @work(exclusive=True, group="window")
    async def _load_window(self) -> None:
        self._set_output("scanning...")
        try:
            listings = await self._service.get_windowed_listings(timeout=WINDOW_SCAN_TIMEOUT_SECONDS)
        except TransportUnavailableError as exc:
            self._set_output(str(exc))
            return
        except asyncio.TimeoutError:
            self._set_output("scan still running, try again shortly")
            return
        count = self._show(listings)
        sold = sum(1 for listing in listings if listing.is_sold)
        self._set_output(f"{count} listings in window ({sold} sold)")

    @on(Button.Pressed, "#force-resync")
    def force_resync(self) -> None:
        summary = self._service.force_resync()
        self.app.notify(
            f"scanned {summary.messages_scanned} messages, "
            f"{summary.items_detected} tracked, {summary.items_marked_sold} sold"
        )
        self._load_window()
