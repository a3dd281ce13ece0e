"""Item store: wardrobe items, image-backed create/edit and favorites."""
from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Tuple

from logic.errors import (
    NotFoundError,
    PersistenceError,
    UnknownLocationError,
    ValidationError,
)
from logic.validation import parse_item_row
from memory.inventory_state import InventoryState
from models.taxonomy import (
    DEFAULT_ITEM_COLOR,
    DEFAULT_ITEM_STYLE,
    DEFAULT_ITEM_TYPE,
    normalise_tags,
    validate_category,
)
from models.wardrobe_item import ItemDraft, WardrobeItem, is_favorite, with_favorite
from tools.abandon import AbandonSignal, check_abandoned
from tools.asset_upload import AssetUploadPipeline, ImageFile
from tools.notifications import Notifier
from tools.observability import instrument_operation
from tools.record_store import ITEMS_TABLE, RecordStore
from wardrobe_app.config import DEFAULT_PLACEHOLDER_IMAGE_URL

EDITABLE_FIELDS = frozenset({"name", "location", "category", "type", "color", "style", "tags"})


class ItemStore:
    """Create, edit, delete and favorite wardrobe items.

    Images are uploaded before the record store is touched; a failed upload
    aborts the operation with the mirror unchanged. Every local change uses
    the row returned by the record store, never a locally merged copy.
    """

    def __init__(
        self,
        state: InventoryState,
        record_store: RecordStore,
        uploader: AssetUploadPipeline,
        notifier: Notifier,
        require_image_on_create: bool = False,
        placeholder_image_url: str = DEFAULT_PLACEHOLDER_IMAGE_URL,
        default_category: str = "casual",
    ) -> None:
        self.state = state
        self.record_store = record_store
        self.uploader = uploader
        self.notifier = notifier
        self.require_image_on_create = require_image_on_create
        self.placeholder_image_url = placeholder_image_url
        self.default_category = validate_category(default_category)

    def load(self) -> Tuple[WardrobeItem, ...]:
        """Populate the mirror from the record store; failures leave it empty."""

        try:
            items = [
                parse_item_row(row, self.placeholder_image_url)
                for row in self.record_store.select(ITEMS_TABLE)
            ]
        except PersistenceError as exc:
            self.state.replace_items([])
            self.notifier.report("error", "Could not load your wardrobe", exc.message)
            return ()
        self.state.replace_items(items)
        return self.state.items()

    def list(self) -> Tuple[WardrobeItem, ...]:
        return self.state.items()

    def get(self, item_id: str) -> WardrobeItem:
        item = self.state.get_item(item_id)
        if item is None:
            raise NotFoundError(f"No item with id {item_id}")
        return item

    def _clean_name(self, name: Optional[str]) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValidationError("Item name is required")
        return cleaned

    def _resolve_location(self, location: Optional[str]) -> str:
        cleaned = (location or "").strip()
        if not cleaned:
            raise ValidationError("Choose a section for the item")
        section = self.state.find_section_by_name(cleaned)
        if section is None:
            raise UnknownLocationError(f"There is no section named '{cleaned}'")
        return section.name

    def _clean_category(self, category: Optional[str]) -> str:
        if category is None or not str(category).strip():
            return self.default_category
        try:
            return validate_category(str(category))
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    def _apply(self, row: Dict[str, Any]) -> WardrobeItem:
        """Commit a row the record store has confirmed."""

        item = parse_item_row(row, self.placeholder_image_url)
        self.state.put_item(item)
        return item

    @instrument_operation("items.create")
    def create(
        self,
        draft: ItemDraft,
        image: ImageFile | None = None,
        abandon: AbandonSignal | None = None,
    ) -> WardrobeItem:
        name = self._clean_name(draft.name)
        location = self._resolve_location(draft.location)
        category = self._clean_category(draft.category)
        if image is None and self.require_image_on_create:
            raise ValidationError("Add a photo of the item before saving it")
        if image is not None:
            self.uploader.validate(image)

        check_abandoned(abandon, "Adding an item")
        image_url = (
            self.uploader.upload(image, abandon) if image is not None else self.placeholder_image_url
        )
        check_abandoned(abandon, "Adding an item")

        row = {
            "name": name,
            "location": location,
            "category": category,
            "image_url": image_url,
            "type": (draft.type or "").strip() or DEFAULT_ITEM_TYPE,
            "color": (draft.color or "").strip() or DEFAULT_ITEM_COLOR,
            "style": (draft.style or "").strip() or DEFAULT_ITEM_STYLE,
            "tags": sorted(normalise_tags(draft.tags)),
        }
        item = self._apply(self.record_store.insert(ITEMS_TABLE, row))
        self.notifier.report("info", "Item added", f"'{item.name}' was added to {item.location}")
        return item

    @instrument_operation("items.update")
    def update(
        self,
        item_id: str,
        patch: Mapping[str, Any],
        image: ImageFile | None = None,
        abandon: AbandonSignal | None = None,
    ) -> WardrobeItem:
        """Edit any field of an item, optionally replacing its image.

        The previous image stays in object storage; nothing deletes replaced
        assets.
        """

        current = self.get(item_id)
        unknown = set(patch) - EDITABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot edit field(s): {', '.join(sorted(unknown))}")

        changes: Dict[str, Any] = {}
        if "name" in patch:
            changes["name"] = self._clean_name(patch["name"])
        if "location" in patch:
            changes["location"] = self._resolve_location(patch["location"])
        if "category" in patch:
            if patch["category"] is None or not str(patch["category"]).strip():
                raise ValidationError("Category cannot be blank")
            changes["category"] = self._clean_category(patch["category"])
        for key, default in (("type", DEFAULT_ITEM_TYPE), ("color", DEFAULT_ITEM_COLOR), ("style", DEFAULT_ITEM_STYLE)):
            if key in patch:
                changes[key] = (patch[key] or "").strip() or default
        if "tags" in patch:
            changes["tags"] = sorted(normalise_tags(patch["tags"] or []))
        if image is not None:
            self.uploader.validate(image)

        if not changes and image is None:
            return current

        check_abandoned(abandon, "Editing an item")
        if image is not None:
            changes["image_url"] = self.uploader.upload(image, abandon)
            check_abandoned(abandon, "Editing an item")

        row = self.record_store.update(ITEMS_TABLE, current.id, changes)
        item = self._apply(row)
        self.notifier.report("info", "Item updated", f"'{item.name}' was saved")
        return item

    @instrument_operation("items.delete")
    def delete(self, item_id: str, abandon: AbandonSignal | None = None) -> None:
        item = self.get(item_id)
        check_abandoned(abandon, "Deleting an item")
        self.record_store.delete(ITEMS_TABLE, item.id)
        self.state.remove_item(item.id)
        self.notifier.report("info", "Item deleted", f"'{item.name}' was removed")

    @instrument_operation("items.set_favorite")
    def set_favorite(
        self, item_id: str, favorite: bool, abandon: AbandonSignal | None = None
    ) -> WardrobeItem:
        """Add or remove the favorite tag, recomputed from the latest local tags.

        The full tag set is written even when it is unchanged, so repeated
        calls are harmless.
        """

        current = self.get(item_id)
        tags = with_favorite(current.tags, bool(favorite))
        check_abandoned(abandon, "Updating favorites")
        row = self.record_store.update(ITEMS_TABLE, current.id, {"tags": sorted(tags)})
        return self._apply(row)

    def toggle_favorite(self, item_id: str, abandon: AbandonSignal | None = None) -> WardrobeItem:
        """Flip the favorite marker based on the item's current tags."""

        current = self.state.get_item(item_id)
        favorite = not is_favorite(current) if current is not None else True
        return self.set_favorite(item_id, favorite, abandon)


__all__ = ["EDITABLE_FIELDS", "ItemStore"]
