"""Wardrobe item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Optional

from models.taxonomy import (
    DEFAULT_ITEM_COLOR,
    DEFAULT_ITEM_STYLE,
    DEFAULT_ITEM_TYPE,
    FAVORITE_TAG,
    normalise_tags,
)


@dataclass(frozen=True)
class WardrobeItem:
    """A single catalogued garment.

    ``location`` holds the *name* of the section the garment is stored in,
    not its id, so renaming a section rewrites every item that points at it.
    """

    id: str
    name: str
    location: str
    category: str
    image_url: str
    type: str = DEFAULT_ITEM_TYPE
    color: str = DEFAULT_ITEM_COLOR
    style: str = DEFAULT_ITEM_STYLE
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location,
            "category": self.category,
            "image_url": self.image_url,
            "type": self.type,
            "color": self.color,
            "style": self.style,
            "tags": sorted(self.tags),
            "is_favorite": is_favorite(self),
        }


@dataclass
class ItemDraft:
    """Fields supplied by the user when adding a new garment."""

    name: str
    location: str
    category: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    style: Optional[str] = None
    tags: Iterable[str] = field(default_factory=list)


def is_favorite(item: WardrobeItem) -> bool:
    """Return whether the item carries the favorite tag."""

    return FAVORITE_TAG in item.tags


def with_favorite(tags: Iterable[str], favorite: bool) -> FrozenSet[str]:
    """Return ``tags`` with the favorite tag present or absent."""

    current = normalise_tags(tags)
    if favorite:
        return current | {FAVORITE_TAG}
    return current - {FAVORITE_TAG}


__all__ = ["ItemDraft", "WardrobeItem", "is_favorite", "with_favorite"]
