"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.section import Section
from models.wardrobe_item import ItemDraft, WardrobeItem, is_favorite, with_favorite

__all__ = ["ItemDraft", "Section", "WardrobeItem", "is_favorite", "with_favorite"]
