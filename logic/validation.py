"""Pydantic schemas for rows crossing the record store boundary.

Rows come back from the record store as loose dictionaries. They are
validated and coerced here on ingress so the rest of the engine only ever
sees well-formed :class:`Section` and :class:`WardrobeItem` values.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaError

from logic.errors import PersistenceError
from models.section import Section
from models.taxonomy import (
    DEFAULT_ITEM_COLOR,
    DEFAULT_ITEM_STYLE,
    DEFAULT_ITEM_TYPE,
    normalise_tags,
)
from models.wardrobe_item import WardrobeItem


class _Row(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value))
        return value


class SectionRow(_Row):
    """Shape of a ``sections`` row."""

    name: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("section name cannot be blank")
        return stripped


class ItemRow(_Row):
    """Shape of a ``wardrobe_items`` row."""

    name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    category: str = Field(min_length=1)
    image_url: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    style: Optional[str] = None
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value: Any) -> Any:
        if value is None:
            return []
        if isinstance(value, str):
            # Some deployments store the tag array as a JSON string column.
            stripped = value.strip()
            if stripped.startswith("["):
                return json.loads(stripped)
            return [part for part in stripped.split(",") if part.strip()]
        if isinstance(value, (set, frozenset, tuple)):
            return list(value)
        return value


def parse_section_row(row: Dict[str, Any]) -> Section:
    """Validate a raw ``sections`` row and build a :class:`Section`."""

    try:
        parsed = SectionRow.model_validate(row)
    except SchemaError as exc:
        raise PersistenceError("Record store returned a malformed section row", exc) from exc
    return Section(id=parsed.id, name=parsed.name)


def parse_item_row(row: Dict[str, Any], placeholder_image_url: str = "") -> WardrobeItem:
    """Validate a raw ``wardrobe_items`` row and build a :class:`WardrobeItem`."""

    try:
        parsed = ItemRow.model_validate(row)
    except SchemaError as exc:
        raise PersistenceError("Record store returned a malformed item row", exc) from exc
    return WardrobeItem(
        id=parsed.id,
        name=parsed.name,
        location=parsed.location,
        category=parsed.category,
        image_url=parsed.image_url or placeholder_image_url,
        type=parsed.type or DEFAULT_ITEM_TYPE,
        color=parsed.color or DEFAULT_ITEM_COLOR,
        style=parsed.style or DEFAULT_ITEM_STYLE,
        tags=normalise_tags(parsed.tags),
    )


__all__ = ["ItemRow", "SectionRow", "parse_item_row", "parse_section_row"]
