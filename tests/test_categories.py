from __future__ import annotations

import pytest

from core.categories import Category, categorize


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("DJI goggles v2 with strap", Category.GOGGLES),
        ("Tinyhawk 3 RTF kit", Category.COMPLETE_SETUP),
        ("Taranis X9D lite", Category.CONTROLLERS),
        ("4S 1500mah lipo packs", Category.BATTERIES),
        ("Caddx Ant camera", Category.ELECTRONICS),
        ("5 inch carbon frame", Category.FRAMES),
        ("hello everyone", Category.OTHER),
    ],
)
def test_categorize(text: str, expected: Category) -> None:
    assert categorize(text) is expected


def test_first_matching_category_wins() -> None:
    assert categorize("Goggles and a spare drone") is Category.GOGGLES


def test_matching_ignores_case() -> None:
    assert categorize("RADIOMASTER ZORRO") is Category.CONTROLLERS


def test_category_values_are_display_labels() -> None:
    assert Category.COMPLETE_SETUP.value == "Complete Setup"
    assert Category.OTHER == "Other"
