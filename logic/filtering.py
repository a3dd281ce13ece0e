"""Deterministic browse filtering by tab, section and free-text search."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from memory.inventory_state import InventorySnapshot
from models.section import Section
from models.taxonomy import ALL_ITEMS_TAB, FAVORITES_TAB, validate_tab
from models.wardrobe_item import WardrobeItem, is_favorite


def _matches_tab(item: WardrobeItem, active_category: str, selected_section: Optional[Section]) -> bool:
    if active_category == FAVORITES_TAB:
        return is_favorite(item)
    if active_category == ALL_ITEMS_TAB:
        return selected_section is None or item.location == selected_section.name
    return item.category == active_category


def _matches_search(item: WardrobeItem, needle: str) -> bool:
    if not needle:
        return True
    haystacks = [item.name, item.type, item.color, *item.tags]
    return any(needle in (value or "").lower() for value in haystacks)


def visible(
    items: Iterable[WardrobeItem],
    active_category: str,
    selected_section: Optional[Section] = None,
    search_text: str = "",
) -> List[WardrobeItem]:
    """Return the items shown for the given tab, section and search text.

    The tab filter and the search filter must both pass. A selected section
    only narrows the ``all-items`` tab; category tabs ignore it.
    Search text is matched case-insensitively as typed, whitespace included.
    """

    needle = (search_text or "").lower()
    return [
        item
        for item in items
        if _matches_tab(item, active_category, selected_section) and _matches_search(item, needle)
    ]


@dataclass
class ViewState:
    """Current browse selection.

    A section can only be selected together with the ``all-items`` tab:
    choosing any other tab drops the section, and choosing a section switches
    back to ``all-items``. The section is remembered by id so it survives a
    rename and disappears once the section is deleted.
    """

    active_tab: str = ALL_ITEMS_TAB
    selected_section_id: Optional[str] = None
    search_text: str = ""

    def select_category(self, tab: str) -> None:
        self.active_tab = validate_tab(tab)
        if self.active_tab != ALL_ITEMS_TAB:
            self.selected_section_id = None

    def select_section(self, section_id: Optional[str]) -> None:
        """Select a section, or clear it when it is already selected."""

        if section_id is None or section_id == self.selected_section_id:
            self.selected_section_id = None
            return
        self.active_tab = ALL_ITEMS_TAB
        self.selected_section_id = section_id

    def set_search(self, text: Optional[str]) -> None:
        self.search_text = text or ""

    def reset(self) -> None:
        self.active_tab = ALL_ITEMS_TAB
        self.selected_section_id = None

    def selected_section(self, snapshot: InventorySnapshot) -> Optional[Section]:
        section = snapshot.section(self.selected_section_id)
        if section is None:
            self.selected_section_id = None
        return section

    def visible(self, snapshot: InventorySnapshot) -> List[WardrobeItem]:
        return visible(
            snapshot.items, self.active_tab, self.selected_section(snapshot), self.search_text
        )

    def to_dict(self, snapshot: InventorySnapshot) -> Dict[str, object]:
        section = self.selected_section(snapshot)
        return {
            "active_tab": self.active_tab,
            "selected_section": section.to_dict() if section else None,
            "search_text": self.search_text,
        }


__all__ = ["ViewState", "visible"]
