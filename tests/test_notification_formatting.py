from __future__ import annotations

import pytest

from adapters.notification_formatting import format_group_label, format_notification
from core.ports import EVENT_DETECTED, EVENT_SOLD

from fakes import make_listing


def test_format_group_label_with_alias() -> None:
    assert format_group_label("@fpv_sa", {"@fpv_sa": "FPV SA"}) == "FPV SA (@fpv_sa)"


def test_format_group_label_without_alias() -> None:
    assert format_group_label("chat_id:-1001", {}) == "chat_id:-1001"


def test_markdown_notification_for_new_listing() -> None:
    listing = make_listing(title="Tinyhawk_3 *RTF*")

    body = format_notification(EVENT_DETECTED, listing, {"@fpv_sa": "FPV SA"}, "markdown")

    assert "**New listing**" in body
    assert r"Tinyhawk\_3 \*RTF\*" in body
    assert "R2000" in body
    assert "Complete Setup" in body
    assert "FPV SA (@fpv\\_sa)" in body


def test_html_notification_for_sold_listing() -> None:
    listing = make_listing(title="Goggles <v2>")

    body = format_notification(EVENT_SOLD, listing, {}, "html")

    assert "<b>SOLD</b>" in body
    assert "Goggles &lt;v2&gt;" in body
    assert "<b>Seller:</b> Pilot Pete" in body


def test_unknown_format_is_rejected() -> None:
    with pytest.raises(ValueError):
        format_notification(EVENT_DETECTED, make_listing(), {}, "plain")
