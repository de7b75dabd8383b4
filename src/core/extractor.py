"""Structured field extraction from listing messages (core domain).

Each field is extracted by an ordered chain of regex strategies where the
first hit wins. The order is part of the behavior: reordering a tuple changes
which value is picked for messages that match several patterns.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Pattern, Sequence

from core.categories import categorize
from core.models import (
    DESCRIPTION_MAX_CHARS,
    PRICE_ON_REQUEST,
    TITLE_MAX_CHARS,
    UNKNOWN,
    ChatMessage,
    Listing,
)
from core.ports import MessageResolver

LOGGER = logging.getLogger(__name__)

FALLBACK_TITLE = "FPV Item"
TITLE_MIN_CHARS = 5
# Separators left over around a captured title ("Selling: X", "X - R500").
TITLE_STRIP_CHARS = " \t:,-–•"

PRICE_PATTERNS: Sequence[Pattern[str]] = (
    re.compile(r"[\$£€]\s*(\d+(?:,\d{3})*(?:\.\d{2})?)"),  # $1,234.56
    re.compile(r"(\d+)\s*[\$£€]"),  # 1234$
    re.compile(r"price[:\s]*(\d+)", re.IGNORECASE),  # Price: 1234
    re.compile(r"(\d+)\s*(?:rand|zar|usd|gbp|eur)", re.IGNORECASE),  # 1234 rand
    re.compile(r"r\s*(\d+)", re.IGNORECASE),  # R1234, R 1234
    re.compile(r"(\d+)\s*(?:excluding|including|shipping)", re.IGNORECASE),  # 3000 excluding shipping
)

TITLE_PATTERNS: Sequence[Pattern[str]] = (
    re.compile(r"(?:selling|for sale|fs:?)\s*(.+?)(?:\n|$)", re.IGNORECASE),
    re.compile(r"(.+?)\s*(?:for sale|selling|fs:?)", re.IGNORECASE),
    re.compile(r"^([^•\n]+?)(?:\s*•|$)", re.IGNORECASE),
    re.compile(r"(?:selling|for sale)\s*•\s*(.+?)(?:\s*•|\n|$)", re.IGNORECASE),
    re.compile(r"^([^•\n]+?)(?:\s*[-–]\s*|$)", re.IGNORECASE),
    re.compile(r"(?:brand new|new)\s*(.+?)(?:\s*[-–]|\n|$)", re.IGNORECASE),
)

LOCATION_PATTERNS: Sequence[Pattern[str]] = (
    re.compile(r"(?:location|area|pickup|collection):\s*(.+?)(?:\n|$)", re.IGNORECASE),
    # City names match as bare substrings, so "ct" in "perfect" counts.
    re.compile(
        r"(?:jhb|joburg|pretoria|ct|cape town|durban|bloem|bloemfontein|pe|port elizabeth)",
        re.IGNORECASE,
    ),
    re.compile(r"(?:based in|located in|pickup from)\s*(.+?)(?:\n|$)", re.IGNORECASE),
    re.compile(
        r"(?:southern suburbs|cape town|johannesburg|pretoria|durban|bloemfontein|port elizabeth)",
        re.IGNORECASE,
    ),
    re.compile(r"(?:cpt|jhb|pta|dbn|bloem|pe)\b", re.IGNORECASE),
)


def extract_price(text: str) -> str:
    """Return the raw matched price token, or the price-on-request sentinel."""

    for pattern in PRICE_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(0)
    return PRICE_ON_REQUEST


def extract_title(text: str) -> str:
    """Return a short title for the listing.

    Only a captured group longer than five characters counts as a hit; the
    first line of the message is the fallback.
    """

    for pattern in TITLE_PATTERNS:
        match = pattern.search(text)
        if not match or not match.group(1) or len(match.group(1)) <= TITLE_MIN_CHARS:
            continue
        title = match.group(1).strip(TITLE_STRIP_CHARS)[:TITLE_MAX_CHARS]
        if title:
            return title
    first_line = text.split("\n", 1)[0].strip()[:TITLE_MAX_CHARS]
    return first_line or FALLBACK_TITLE


def extract_description(text: str) -> str:
    remaining = "\n".join(text.split("\n")[1:]).strip()
    return (remaining or text.strip())[:DESCRIPTION_MAX_CHARS]


def extract_location(text: str) -> str:
    """Return a best-effort location.

    Patterns with a capture group yield the captured phrase, the city-name
    patterns yield the whole match, so the value is not always a clean place
    name.
    """

    for pattern in LOCATION_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        captured = match.group(1) if pattern.groups else None
        return (captured or match.group(0)).strip()
    return UNKNOWN


async def _resolve_image(message: ChatMessage, resolver: MessageResolver) -> Optional[str]:
    if not message.has_media:
        return None
    try:
        return await resolver.resolve_media(message)
    except Exception:
        # A missing image never costs us the listing itself.
        LOGGER.exception("Failed to resolve media for %s", message.listing_id)
        return None


async def extract_listing(message: ChatMessage, resolver: MessageResolver) -> Optional[Listing]:
    """Build a Listing from a message already classified as for-sale.

    Returns None when the sender cannot be resolved; the failure is logged
    and the caller skips the message.
    """

    try:
        sender = await resolver.resolve_sender(message)
    except Exception:
        LOGGER.exception("Failed to extract listing from %s", message.listing_id)
        return None

    text = message.text
    return Listing(
        id=message.listing_id,
        message_id=message.message_id,
        group_id=message.group_id,
        title=extract_title(text),
        description=extract_description(text),
        price=extract_price(text),
        location=extract_location(text),
        category=categorize(text),
        seller=sender.label,
        time_posted=message.date.astimezone(),
        image=await _resolve_image(message, resolver),
    )
