"""Section data model: a named physical storage location."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict


def normalise_section_name(name: str) -> str:
    """Key used for case-insensitive uniqueness checks."""

    return name.strip().casefold()


@dataclass(frozen=True)
class Section:
    """A storage location items reference by name."""

    id: str
    name: str

    def matches_name(self, name: str) -> bool:
        return normalise_section_name(self.name) == normalise_section_name(name)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @staticmethod
    def describe_count(count: int) -> str:
        """Human label for the number of items stored in a section."""

        if count == 0:
            return "Empty"
        return f"{count} item" if count == 1 else f"{count} items"


__all__ = ["Section", "normalise_section_name"]
