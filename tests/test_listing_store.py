from __future__ import annotations

import asyncio

from core.config import LifecycleConfig
from core.listing_store import ListingStore

from fakes import FakeClock, make_listing

# Retention short enough to observe expiry inside a test.
FAST = LifecycleConfig(sold_retention_hours=0.02 / 3600, retired_memory_days=1)


def test_add_is_idempotent() -> None:
    store = ListingStore()
    first, created = store.add(make_listing(1, title="first"))
    again, created_again = store.add(make_listing(1, title="second"))

    assert created
    assert not created_again
    assert again is first
    assert store.get("@fpv_sa/1").title == "first"
    assert len(store) == 1


def test_same_message_id_in_different_groups_are_distinct() -> None:
    store = ListingStore()
    store.add(make_listing(1, group_id="@a"))
    store.add(make_listing(1, group_id="@b"))
    assert len(store) == 2
    assert store.count_for_group("@a") == 1


def test_mark_sold_moves_listing_between_views() -> None:
    async def scenario() -> None:
        store = ListingStore()
        store.add(make_listing(1))
        store.add(make_listing(2))

        sold = store.mark_sold("@fpv_sa/1")

        assert sold is not None and sold.is_sold
        assert [item.id for item in store.get_active()] == ["@fpv_sa/2"]
        assert [item.id for item in store.get_sold()] == ["@fpv_sa/1"]
        store.close()

    asyncio.run(scenario())


def test_mark_sold_unknown_or_repeated_returns_none() -> None:
    async def scenario() -> None:
        store = ListingStore()
        store.add(make_listing(1))
        assert store.mark_sold("@fpv_sa/99") is None
        assert store.mark_sold("@fpv_sa/1") is not None
        assert store.mark_sold("@fpv_sa/1") is None
        store.close()

    asyncio.run(scenario())


def test_sold_listing_expires_after_retention() -> None:
    async def scenario() -> None:
        store = ListingStore(FAST)
        store.add(make_listing(1))
        store.add(make_listing(2))
        store.mark_sold("@fpv_sa/1")

        await asyncio.sleep(0.1)

        assert "@fpv_sa/1" not in store
        assert "@fpv_sa/2" in store
        assert store.get_sold() == []

    asyncio.run(scenario())


def test_expiry_after_manual_removal_is_noop() -> None:
    async def scenario() -> None:
        store = ListingStore(FAST)
        store.add(make_listing(1))
        store.mark_sold("@fpv_sa/1")
        assert store.remove("@fpv_sa/1")

        await asyncio.sleep(0.1)

        assert len(store) == 0
        assert not store.remove("@fpv_sa/1")

    asyncio.run(scenario())


def test_close_cancels_pending_removals() -> None:
    async def scenario() -> None:
        store = ListingStore(FAST)
        store.add(make_listing(1))
        store.mark_sold("@fpv_sa/1")
        store.close()

        await asyncio.sleep(0.1)

        assert "@fpv_sa/1" in store

    asyncio.run(scenario())


def test_retention_counts_from_the_sold_mark() -> None:
    retention = LifecycleConfig(sold_retention_hours=0.1 / 3600)

    async def scenario() -> None:
        store = ListingStore(retention)
        store.add(make_listing(1))
        # Listed for longer than the retention period before selling.
        await asyncio.sleep(0.15)
        store.mark_sold("@fpv_sa/1")

        await asyncio.sleep(0.06)
        assert [item.id for item in store.get_sold()] == ["@fpv_sa/1"]

        await asyncio.sleep(0.1)
        assert "@fpv_sa/1" not in store

    asyncio.run(scenario())


def test_expired_sold_listing_cannot_come_back() -> None:
    async def scenario() -> None:
        store = ListingStore(FAST, clock=FakeClock())
        store.add(make_listing(1))
        store.mark_sold("@fpv_sa/1")

        await asyncio.sleep(0.1)

        assert store.is_retired("@fpv_sa/1")
        assert store.add(make_listing(1)) == (None, False)
        assert "@fpv_sa/1" not in store

    asyncio.run(scenario())


def test_retired_id_is_forgotten_after_memory_period() -> None:
    clock = FakeClock()

    async def scenario() -> None:
        store = ListingStore(FAST, clock=clock)
        store.add(make_listing(1))
        store.mark_sold("@fpv_sa/1")
        await asyncio.sleep(0.1)

        clock.advance(24 * 60 * 60)

        assert not store.is_retired("@fpv_sa/1")
        _, created = store.add(make_listing(1))
        assert created

    asyncio.run(scenario())


def test_manual_removal_does_not_retire() -> None:
    store = ListingStore(FAST)
    store.add(make_listing(1))
    store.remove("@fpv_sa/1")

    assert not store.is_retired("@fpv_sa/1")
    assert store.add(make_listing(1))[1]
