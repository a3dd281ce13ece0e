"""Shared fixtures: an inventory wired to a fault-injecting SQLite store and a recording bucket."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from fakes import PNG_BYTES, FlakyRecordStore, RecordingStorage
from memory.inventory_state import InventoryState
from memory.item_store import ItemStore
from memory.section_store import SectionStore
from tools.asset_upload import AssetUploadPipeline, ImageFile
from tools.notifications import CollectingNotifier


@dataclass
class Inventory:
    state: InventoryState
    record_store: FlakyRecordStore
    storage: RecordingStorage
    notifier: CollectingNotifier
    sections: SectionStore
    items: ItemStore


@pytest.fixture()
def make_inventory(tmp_path: Path) -> Callable[..., Inventory]:
    def _build(require_image_on_create: bool = False, db_name: str = "wardrobe.db") -> Inventory:
        state = InventoryState()
        record_store = FlakyRecordStore(tmp_path / db_name)
        storage = RecordingStorage()
        notifier = CollectingNotifier(limit=20)
        uploader = AssetUploadPipeline(storage)
        sections = SectionStore(state, record_store, notifier, placeholder_image_url="https://placehold.co/400x320")
        items = ItemStore(
            state,
            record_store,
            uploader,
            notifier,
            require_image_on_create=require_image_on_create,
            placeholder_image_url="https://placehold.co/400x320",
        )
        return Inventory(state, record_store, storage, notifier, sections, items)

    return _build


@pytest.fixture()
def inventory(make_inventory: Callable[..., Inventory]) -> Inventory:
    return make_inventory()


@pytest.fixture()
def png_image() -> ImageFile:
    return ImageFile(filename="tee.png", content_type="image/png", data=PNG_BYTES)
