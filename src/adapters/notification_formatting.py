"""Shared notification formatting helpers.

Keeping formatting here prevents drift between adapters and keeps messages
consistent regardless of delivery channel.
"""

from __future__ import annotations

import html

from core.models import Listing
from core.ports import EVENT_SOLD

DIVIDER = "──────────────"


def format_group_label(group_id: str, group_aliases: dict[str, str]) -> str:
    """Return a human-friendly group label, using configured aliases."""

    alias = group_aliases.get(group_id)
    if not alias:
        return group_id
    return f"{alias} ({group_id})"


def format_time_posted(listing: Listing) -> str:
    return listing.time_posted.astimezone().strftime("%H:%M:%S %d-%m-%Y").strip()


def _headline(event: str) -> str:
    return "SOLD" if event == EVENT_SOLD else "New listing"


def _format_markdown(event: str, listing: Listing, group_aliases: dict[str, str]) -> str:
    """Create the Markdown notification body used by Saved Messages."""

    def escape_md(value: str) -> str:
        for ch in r"*[`_":
            value = value.replace(ch, f"\\{ch}")
        return value

    lines = [
        f"[{format_time_posted(listing)}] **{_headline(event)}**",
        f"**{escape_md(listing.title)}**",
        f"**Price:**    {escape_md(listing.price)}",
        f"**Location:** {escape_md(listing.location)}",
        f"**Category:** {escape_md(listing.category.value)}",
        f"**Seller:**   {escape_md(listing.seller)}",
        f"**Group:**    {escape_md(format_group_label(listing.group_id, group_aliases))}",
        DIVIDER,
        "",
        escape_md(listing.description),
    ]
    if listing.image:
        lines.extend(["", f"**Image:** {escape_md(listing.image)}"])
    lines.append(DIVIDER)
    return "\n".join(lines)


def _format_html(event: str, listing: Listing, group_aliases: dict[str, str]) -> str:
    """Create the HTML notification body used by the Bot API adapter."""

    parts = [
        f"[{html.escape(format_time_posted(listing))}] <b>{_headline(event)}</b>",
        f"<b>{html.escape(listing.title)}</b>",
        f"<b>Price:</b> {html.escape(listing.price)}",
        f"<b>Location:</b> {html.escape(listing.location)}",
        f"<b>Category:</b> {html.escape(listing.category.value)}",
        f"<b>Seller:</b> {html.escape(listing.seller)}",
        f"<b>Group:</b> {html.escape(format_group_label(listing.group_id, group_aliases))}",
        DIVIDER,
        "",
        html.escape(listing.description),
        DIVIDER,
    ]
    return "\n".join(parts)


def format_notification(
    event: str,
    listing: Listing,
    group_aliases: dict[str, str],
    mode: str,
) -> str:
    """Return the notification formatted for the requested mode."""

    if mode == "markdown":
        return _format_markdown(event, listing, group_aliases)
    if mode == "html":
        return _format_html(event, listing, group_aliases)
    raise ValueError(f"Unsupported notification format: {mode}")
