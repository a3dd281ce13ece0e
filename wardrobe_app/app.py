"""Smart Wardrobe app bootstrap."""

import logging

from wardrobe_app.config import WardrobeConfig
from wardrobe_app.logging_config import configure_logging, get_logger, log_event
from logic.filtering import ViewState
from memory.inventory_state import InventorySnapshot, InventoryState
from memory.item_store import ItemStore
from memory.section_store import SectionStore
from tools.asset_upload import AssetUploadPipeline
from tools.notifications import CollectingNotifier
from tools.object_storage import LocalObjectStorage, ObjectStorage, RestObjectStorage
from tools.record_store import RecordStore, RestRecordStore, SQLiteRecordStore


LOGGER = get_logger(__name__)


class SmartWardrobeApp:
    """Wires together the record store, object storage, stores and view state."""

    def __init__(
        self,
        config: WardrobeConfig | None = None,
        record_store: RecordStore | None = None,
        object_storage: ObjectStorage | None = None,
    ) -> None:
        self.config = config or WardrobeConfig.from_env()
        configure_logging()

        self.record_store = record_store or self._build_record_store()
        self.object_storage = object_storage or self._build_object_storage()
        self.notifier = CollectingNotifier(limit=self.config.notification_limit)
        self.uploader = AssetUploadPipeline(
            self.object_storage,
            max_bytes=self.config.max_upload_bytes,
            allowed_types=self.config.allowed_image_types,
        )
        self.state = InventoryState()
        self.sections = SectionStore(
            self.state,
            self.record_store,
            self.notifier,
            placeholder_image_url=self.config.placeholder_image_url,
        )
        self.items = ItemStore(
            self.state,
            self.record_store,
            self.uploader,
            self.notifier,
            require_image_on_create=self.config.require_image_on_create,
            placeholder_image_url=self.config.placeholder_image_url,
            default_category=self.config.default_category,
        )
        self.view = ViewState()

    def _build_record_store(self) -> RecordStore:
        if self.config.record_store_backend == "rest":
            return RestRecordStore(
                self.config.supabase_url or "",
                api_key=self.config.supabase_key,
                timeout_seconds=self.config.request_timeout_seconds,
            )
        return SQLiteRecordStore(self.config.database_path)

    def _build_object_storage(self) -> ObjectStorage:
        if self.config.storage_backend == "rest":
            return RestObjectStorage(
                self.config.supabase_url or "",
                bucket=self.config.storage_bucket,
                api_key=self.config.supabase_key,
                timeout_seconds=self.config.request_timeout_seconds,
            )
        return LocalObjectStorage(self.config.storage_dir, base_url=self.config.storage_base_url)

    def load(self) -> InventorySnapshot:
        """Fetch both collections; a failed fetch leaves that collection empty."""

        self.sections.load()
        self.items.load()
        snapshot = self.state.snapshot()
        log_event(
            LOGGER,
            logging.INFO,
            "inventory_loaded",
            section_count=len(snapshot.sections),
            item_count=len(snapshot.items),
        )
        return snapshot

    def snapshot(self) -> InventorySnapshot:
        return self.state.snapshot()


__all__ = ["SmartWardrobeApp"]
