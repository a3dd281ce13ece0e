"""Canonical taxonomy definitions for wardrobe items.

This module centralises the item categories, the browse tabs built on top of
them and the one tag with engine-level meaning. Helper functions keep
validation logic consistent across the stores, the filter engine and the
HTTP layer.
"""

from typing import Dict, FrozenSet, Iterable, List

FAVORITE_TAG = "favorite"

ALL_ITEMS_TAB = "all-items"
FAVORITES_TAB = "favorites"

CATEGORIES: Dict[str, str] = {
    "workwear": "Work Wear",
    "partywear": "Party Wear",
    "casual": "Casual",
}

TABS: Dict[str, str] = {
    ALL_ITEMS_TAB: "All Items",
    **CATEGORIES,
    FAVORITES_TAB: "Favorites",
}

DEFAULT_ITEM_TYPE = "Other"
DEFAULT_ITEM_COLOR = "Unknown"
DEFAULT_ITEM_STYLE = "Unknown"


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower().replace(" ", "").replace("_", "")


def validate_category(value: str) -> str:
    """Validate and normalise a category value.

    Raises a :class:`ValueError` if the category is not part of the canonical
    taxonomy. Both ids (``"workwear"``) and display names (``"Work Wear"``)
    are accepted.
    """

    key = _normalize_key(value)
    if key not in CATEGORIES:
        raise ValueError(f"Unsupported category '{value}'. Allowed: {sorted(CATEGORIES)}")
    return key


def validate_tab(value: str) -> str:
    """Validate a browse tab id (a category or one of the two virtual tabs)."""

    key = value.strip().lower()
    if key in TABS:
        return key
    return validate_category(value)


def normalise_tags(values: Iterable[str]) -> FrozenSet[str]:
    """Strip and deduplicate free-form tags; blank labels are dropped."""

    return frozenset(str(value).strip() for value in values if str(value).strip())


def tab_options() -> List[Dict[str, str]]:
    """Return the browse tabs in display order."""

    return [{"id": tab_id, "name": display} for tab_id, display in TABS.items()]


__all__ = [
    "ALL_ITEMS_TAB",
    "CATEGORIES",
    "DEFAULT_ITEM_COLOR",
    "DEFAULT_ITEM_STYLE",
    "DEFAULT_ITEM_TYPE",
    "FAVORITES_TAB",
    "FAVORITE_TAG",
    "TABS",
    "normalise_tags",
    "tab_options",
    "validate_category",
    "validate_tab",
]
