from __future__ import annotations

from core.registry import GroupRegistry


def test_unknown_group_is_inactive() -> None:
    registry = GroupRegistry()
    assert not registry.is_active("@fpv_sa")
    assert registry.list_active() == frozenset()


def test_set_active_and_deactivate() -> None:
    registry = GroupRegistry()
    registry.set_active("@fpv_sa", True)
    registry.set_active("chat_id:-1001", True)
    registry.set_active("@fpv_sa", False)

    assert not registry.is_active("@fpv_sa")
    assert registry.is_active("chat_id:-1001")
    assert registry.list_active() == frozenset({"chat_id:-1001"})


def test_list_active_is_a_snapshot() -> None:
    registry = GroupRegistry()
    registry.set_active("@fpv_sa", True)
    snapshot = registry.list_active()
    registry.set_active("@fpv_sa", False)
    assert snapshot == frozenset({"@fpv_sa"})
    assert not registry.is_active("@fpv_sa")
