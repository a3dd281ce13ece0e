"""In-memory mirror of the sections and items collections.

The state object is owned by the app and shared by the section and item
stores, which are the only writers. Everyone else reads immutable snapshots.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from models.section import Section, normalise_section_name
from models.wardrobe_item import WardrobeItem


@dataclass(frozen=True)
class RenameInconsistency:
    """A section rename whose cascade left some items on the old name."""

    section_id: str
    old_names: Tuple[str, ...]
    new_name: str
    item_ids: Tuple[str, ...]

    def to_dict(self) -> Dict[str, object]:
        return {
            "section_id": self.section_id,
            "old_names": list(self.old_names),
            "new_name": self.new_name,
            "item_ids": list(self.item_ids),
        }


@dataclass(frozen=True)
class InventorySnapshot:
    """Read-only view of both collections at one point in time."""

    sections: Tuple[Section, ...] = ()
    items: Tuple[WardrobeItem, ...] = ()

    def section(self, section_id: str | None) -> Optional[Section]:
        if section_id is None:
            return None
        return next((s for s in self.sections if s.id == section_id), None)

    def item_count(self, section_name: str) -> int:
        return sum(1 for item in self.items if item.location == section_name)


@dataclass
class InventoryState:
    """Mutable owner of the sections and items collections."""

    _sections: Dict[str, Section] = field(default_factory=dict)
    _items: Dict[str, WardrobeItem] = field(default_factory=dict)
    _inconsistencies: Dict[str, RenameInconsistency] = field(default_factory=dict)

    # Reads

    def snapshot(self) -> InventorySnapshot:
        return InventorySnapshot(
            sections=tuple(self._sections.values()),
            items=tuple(self._items.values()),
        )

    def sections(self) -> Tuple[Section, ...]:
        return tuple(self._sections.values())

    def items(self) -> Tuple[WardrobeItem, ...]:
        return tuple(self._items.values())

    def get_section(self, section_id: str) -> Optional[Section]:
        return self._sections.get(section_id)

    def get_item(self, item_id: str) -> Optional[WardrobeItem]:
        return self._items.get(item_id)

    def find_section_by_name(self, name: str, exclude_id: str | None = None) -> Optional[Section]:
        key = normalise_section_name(name)
        for section in self._sections.values():
            if section.id != exclude_id and normalise_section_name(section.name) == key:
                return section
        return None

    def items_in(self, section_name: str) -> List[WardrobeItem]:
        return [item for item in self._items.values() if item.location == section_name]

    def inconsistencies(self) -> Tuple[RenameInconsistency, ...]:
        return tuple(self._inconsistencies.values())

    def inconsistency_for(self, section_id: str) -> Optional[RenameInconsistency]:
        return self._inconsistencies.get(section_id)

    # Writes (store operations only)

    def replace_sections(self, sections: Iterable[Section]) -> None:
        self._sections = {section.id: section for section in sections}

    def replace_items(self, items: Iterable[WardrobeItem]) -> None:
        self._items = {item.id: item for item in items}

    def put_section(self, section: Section) -> None:
        self._sections[section.id] = section

    def remove_section(self, section_id: str) -> None:
        self._sections.pop(section_id, None)
        self._inconsistencies.pop(section_id, None)

    def put_item(self, item: WardrobeItem) -> None:
        self._items[item.id] = item

    def remove_item(self, item_id: str) -> None:
        self._items.pop(item_id, None)

    def record_inconsistency(self, inconsistency: RenameInconsistency) -> None:
        self._inconsistencies[inconsistency.section_id] = inconsistency

    def clear_inconsistency(self, section_id: str) -> None:
        self._inconsistencies.pop(section_id, None)


__all__ = ["InventorySnapshot", "InventoryState", "RenameInconsistency"]
