from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Optional

import pytest

from core.errors import TransportUnavailableError
from core.listing_store import ListingStore
from core.models import Chat
from core.processor import ListingProcessor
from core.registry import GroupRegistry
from core.scanner import WindowedScanner
from core.service import MarketplaceService

from fakes import NOW, FakeClock, FakeTransport, make_message

LISTING_TEXT = "Selling DJI FPV drone, brand new, $450, based in Austin"


class SlowTransport(FakeTransport):
    async def list_chats(self) -> list[Chat]:
        await asyncio.sleep(0.05)
        return await super().list_chats()


def _build(
    transport: Optional[FakeTransport] = None,
) -> tuple[MarketplaceService, FakeTransport, ListingStore, WindowedScanner]:
    transport = transport or FakeTransport()
    transport.chats = [
        Chat(group_id="@fpv_sa", name="FPV SA", is_group=True, participant_count=120),
        Chat(group_id="@quads", name="Quads", is_group=True, participant_count=40),
        Chat(group_id="@pilot", name="Pilot", is_group=False),
    ]
    registry = GroupRegistry()
    store = ListingStore()
    processor = ListingProcessor(registry, store, transport)
    scanner = WindowedScanner(transport, registry, processor, clock=FakeClock(), now=lambda: NOW)
    service = MarketplaceService(
        transport=transport,
        registry=registry,
        store=store,
        processor=processor,
        scanner=scanner,
    )
    return service, transport, store, scanner


def test_list_groups_joins_activation_and_counts() -> None:
    service, _, _, _ = _build()
    service.activate_group("@fpv_sa", True)

    async def scenario() -> list:
        await service.handle_incoming_message(make_message(LISTING_TEXT, message_id=3))
        return await service.list_groups()

    groups = asyncio.run(scenario())

    assert [(group.group_id, group.is_active, group.items_found) for group in groups] == [
        ("@fpv_sa", True, 1),
        ("@quads", False, 0),
    ]
    assert groups[0].member_count == 120


def test_list_groups_requires_connection() -> None:
    service, transport, _, _ = _build()
    transport.connected = False

    with pytest.raises(TransportUnavailableError):
        asyncio.run(service.list_groups())


def test_activate_group_works_while_disconnected() -> None:
    service, transport, _, _ = _build()
    transport.connected = False

    service.activate_group("@quads", True)

    listing = asyncio.run(
        service.handle_incoming_message(make_message(LISTING_TEXT, group_id="@quads"))
    )
    assert listing is not None
    assert service.get_active_listings() == [listing]


def test_windowed_listings_update_last_sync() -> None:
    service, transport, _, _ = _build()
    service.activate_group("@fpv_sa", True)
    transport.add_history("@fpv_sa", make_message(LISTING_TEXT, date=NOW - timedelta(days=1)))
    assert service.connection_status().last_sync is None

    items = asyncio.run(service.get_windowed_listings())

    assert len(items) == 1
    status = service.connection_status()
    assert status.is_connected
    assert status.last_sync is not None


def test_windowed_sold_listings_only_returns_sold() -> None:
    service, transport, store, _ = _build()
    service.activate_group("@fpv_sa", True)
    transport.add_history(
        "@fpv_sa",
        make_message(LISTING_TEXT, message_id=1, date=NOW - timedelta(days=3)),
        make_message(LISTING_TEXT, message_id=2, date=NOW - timedelta(days=2)),
        make_message("sold", message_id=3, date=NOW - timedelta(days=1), reply_to_msg_id=1),
    )

    async def scenario() -> list:
        sold = await service.get_windowed_sold_listings()
        store.close()
        return sold

    sold = asyncio.run(scenario())

    assert [item.id for item in sold] == ["@fpv_sa/1"]
    assert [item.id for item in service.get_sold_listings()] == ["@fpv_sa/1"]


def test_force_resync_reports_counters_and_invalidates() -> None:
    service, transport, _, scanner = _build()
    service.activate_group("@fpv_sa", True)
    transport.add_history(
        "@fpv_sa",
        make_message(LISTING_TEXT, message_id=1, date=NOW - timedelta(days=1)),
        make_message("hello everyone", message_id=2, date=NOW - timedelta(days=1)),
    )

    asyncio.run(service.get_windowed_listings())
    summary = service.force_resync()

    assert summary.messages_scanned == 2
    assert summary.items_detected == 1
    assert summary.items_marked_sold == 0
    assert scanner.cached is None


def test_force_resync_before_any_scan() -> None:
    service, _, _, _ = _build()

    summary = service.force_resync()

    assert summary.messages_scanned == 0
    assert summary.items_detected == 0
    assert service.connection_status().last_sync is not None


def test_timeout_leaves_shared_scan_running() -> None:
    service, transport, _, scanner = _build(SlowTransport())
    service.activate_group("@fpv_sa", True)
    transport.add_history("@fpv_sa", make_message(LISTING_TEXT, date=NOW - timedelta(days=1)))

    async def scenario() -> None:
        with pytest.raises(asyncio.TimeoutError):
            await service.get_windowed_listings(timeout=0.01)
        await asyncio.sleep(0.2)

    asyncio.run(scenario())

    assert scanner.cached is not None
    assert len(scanner.cached.items) == 1
