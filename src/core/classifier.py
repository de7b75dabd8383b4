"""Keyword/regex heuristics that decide whether a message is a listing.

The keyword sets and rules are deliberately broad: group chats mix trading
with general chatter, and a missed listing costs more than a stray one.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Tuple

DOMAIN_KEYWORDS: Tuple[str, ...] = (
    # Core FPV terms
    "drone", "quad", "fpv", "goggles", "controller", "motor", "esc", "battery", "lipo",
    "transmitter", "receiver", "camera", "vtx", "antenna", "bundle", "setup", "charger",
    # Brands and models
    "crossfire", "taranis", "betaflight", "clracing", "speedix", "pyrodrone", "foxeer",
    "dji", "o4", "o4 pro", "smooth operater", "yeti", "gnb", "samsung",
    # Specs
    "mah", "kv", "s", "xt30", "xt60", "4s", "6s", "3s", "inch", "2207", "1103",
    # Component types
    "pack", "packs", "module", "mount", "case", "board", "checker", "bag",
    # Radio link and logistics
    "radio", "elrs", "expresslrs", "pocket", "pudo", "included", "shipping",
)

SALE_KEYWORDS: Tuple[str, ...] = (
    "for sale", "selling", "fs:", "$", "£", "€", "price", "sold", "dm for", "dm for more",
    "excluding shipping", "shipping on buyer", "based in", "pickup", "collection",
    "included", "pudo", "shipping", "delivery", "postage",
)

PRICE_INDICATOR = re.compile(r"\b(?:r\s*\d+|\$\s*\d+|\d+\s*(?:rand|zar|usd|gbp|eur))\b", re.IGNORECASE)
CONDITION_INDICATOR = re.compile(r"\b(?:brand new|new|mint condition|good condition)\b", re.IGNORECASE)

# Rule thresholds, measured on the lower-cased text.
SALE_WITH_PRICE_MIN_CHARS = 20
KEYWORD_DENSE_MIN_CHARS = 50
KEYWORD_DENSE_MIN_HITS = 3


@dataclass(frozen=True)
class SaleSignals:
    """Intermediate signals behind a for-sale decision."""

    has_domain_keyword: bool
    has_sale_keyword: bool
    has_price_indicator: bool
    has_condition_indicator: bool
    domain_keyword_hits: int
    is_for_sale: bool


def analyze(text: str) -> SaleSignals:
    """Compute every classifier signal for the given text.

    A message is a listing when any of these holds:
    - a domain keyword plus a sale keyword, price token or condition phrase
    - a sale keyword plus a price token in a message over 20 characters
    - three or more domain keywords in a message over 50 characters
    """

    lowered = text.lower()
    domain_hits = sum(1 for keyword in DOMAIN_KEYWORDS if keyword in lowered)
    has_domain = domain_hits > 0
    has_sale = any(keyword in lowered for keyword in SALE_KEYWORDS)
    has_price = PRICE_INDICATOR.search(text) is not None
    has_condition = CONDITION_INDICATOR.search(text) is not None

    is_for_sale = (
        (has_domain and (has_sale or has_price or has_condition))
        or (has_sale and has_price and len(lowered) > SALE_WITH_PRICE_MIN_CHARS)
        or (
            has_domain
            and len(lowered) > KEYWORD_DENSE_MIN_CHARS
            and domain_hits >= KEYWORD_DENSE_MIN_HITS
        )
    )
    return SaleSignals(
        has_domain_keyword=has_domain,
        has_sale_keyword=has_sale,
        has_price_indicator=has_price,
        has_condition_indicator=has_condition,
        domain_keyword_hits=domain_hits,
        is_for_sale=is_for_sale,
    )


def is_for_sale(text: str) -> bool:
    return analyze(text).is_for_sale
