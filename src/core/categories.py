"""Listing categorization taxonomy (core domain)."""

from __future__ import annotations

from enum import Enum
from typing import Sequence, Tuple


class Category(str, Enum):
    GOGGLES = "Goggles"
    COMPLETE_SETUP = "Complete Setup"
    CONTROLLERS = "Controllers"
    BATTERIES = "Batteries"
    ELECTRONICS = "Electronics"
    FRAMES = "Frames"
    RACING = "Racing"
    FREESTYLE = "Freestyle"
    CINEMATIC = "Cinematic"
    ACCESSORIES = "Accessories"
    OTHER = "Other"


# Priority order matters: the first group with a keyword hit wins, so a
# message mentioning both goggles and a drone is filed under Goggles.
CATEGORY_RULES: Sequence[Tuple[Category, Tuple[str, ...]]] = (
    (
        Category.GOGGLES,
        ("goggles", "headset", "dji goggles", "fat shark", "skyzone", "eachine"),
    ),
    (
        Category.COMPLETE_SETUP,
        ("drone", "quad", "complete setup", "ready to fly", "rtf", "bind and fly", "bnf"),
    ),
    (
        Category.CONTROLLERS,
        ("controller", "transmitter", "radio", "taranis", "futaba", "flysky", "radiomaster", "jumper"),
    ),
    (
        Category.BATTERIES,
        ("battery", "lipo", "li-ion", "6s", "4s", "3s", "2s"),
    ),
    (
        Category.ELECTRONICS,
        (
            "motor",
            "esc",
            "flight controller",
            "fc",
            "pdb",
            "receiver",
            "vtx",
            "camera",
            "antenna",
            "gps",
            "gimbal",
            "servo",
        ),
    ),
    (
        Category.FRAMES,
        ("frame", "carbon", "arms", "chassis", "body"),
    ),
    (
        Category.RACING,
        ("racing", "race", "competition", "track"),
    ),
    (
        Category.FREESTYLE,
        ("freestyle", "tricks", "acro"),
    ),
    (
        Category.CINEMATIC,
        ("cinematic", "cinema", "filming", "camera drone", "photography"),
    ),
    (
        Category.ACCESSORIES,
        ("prop", "propeller", "props", "tool", "screw", "nut", "wire", "cable", "connector"),
    ),
)


def categorize(text: str) -> Category:
    """Return the first category whose keywords appear in the text."""

    lowered = text.lower()
    for category, keywords in CATEGORY_RULES:
        if any(keyword in lowered for keyword in keywords):
            return category
    return Category.OTHER
