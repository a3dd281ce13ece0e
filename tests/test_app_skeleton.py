"""
Bootstrap tests for the Smart Wardrobe service: module wiring, configuration
loading, structured logging and the notification area.
"""

from importlib import import_module
from pathlib import Path
from typing import Tuple

import json
import logging
import sys

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from wardrobe_app.app import SmartWardrobeApp
from wardrobe_app.config import DEFAULT_ALLOWED_IMAGE_TYPES, WardrobeConfig
from wardrobe_app.logging_config import JsonFormatter, correlation_context, log_event, redact_for_log
from logic.errors import NotFoundError
from tools.notifications import CollectingNotifier
from tools.object_storage import LocalObjectStorage
from tools.record_store import SECTIONS_TABLE, ITEMS_TABLE, SQLiteRecordStore

_CONFIG_KEYS = (
    "APP_ENV",
    "APP_CONFIG_PATH",
    "RECORD_STORE_BACKEND",
    "DATABASE_PATH",
    "REQUIRE_IMAGE_ON_CREATE",
    "ALLOWED_IMAGE_TYPES",
    "MAX_UPLOAD_BYTES",
    "NOTIFICATION_LIMIT",
    "SUPABASE_URL",
    "SUPABASE_KEY",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for key in _CONFIG_KEYS:
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture()
def local_config(tmp_path: Path) -> WardrobeConfig:
    return WardrobeConfig(
        database_path=str(tmp_path / "wardrobe.db"),
        storage_dir=str(tmp_path / "uploads"),
    )


def test_defaults_describe_a_local_setup(clean_env: pytest.MonkeyPatch) -> None:
    config = WardrobeConfig.from_env()
    assert config.record_store_backend == "sqlite"
    assert config.storage_backend == "local"
    assert config.require_image_on_create is False
    assert config.max_upload_bytes == 5 * 1024 * 1024
    assert config.allowed_image_types == DEFAULT_ALLOWED_IMAGE_TYPES
    assert config.notification_limit == 1
    assert config.environment is None


def test_yaml_file_is_merged_with_environment(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Environment variables win over values from the environment YAML file."""

    config_dir = tmp_path / "environments"
    config_dir.mkdir()
    (config_dir / "staging.yaml").write_text(
        "# staging\n"
        "record_store_backend: rest\n"
        'supabase_url: "https://project.example.co"\n'
        "require_image_on_create: yes\n"
        "notification_limit: 3\n"
    )
    clean_env.setenv("APP_ENV", "staging")
    clean_env.setenv("WARDROBE_CONFIG_DIR", str(config_dir))
    clean_env.setenv("SUPABASE_KEY", "anon-key")
    clean_env.setenv("ALLOWED_IMAGE_TYPES", "image/PNG, image/webp")
    clean_env.setenv("NOTIFICATION_LIMIT", "5")

    config = WardrobeConfig.from_env()

    assert config.environment == "staging"
    assert config.record_store_backend == "rest"
    assert config.supabase_url == "https://project.example.co"
    assert config.supabase_key == "anon-key"
    assert config.require_image_on_create is True
    assert config.allowed_image_types == ("image/png", "image/webp")
    assert config.notification_limit == 5


def test_app_wires_local_boundaries(local_config: WardrobeConfig) -> None:
    app = SmartWardrobeApp(config=local_config)

    assert isinstance(app.record_store, SQLiteRecordStore)
    assert isinstance(app.object_storage, LocalObjectStorage)
    assert app.notifier.limit == 1
    assert app.uploader.max_bytes == local_config.max_upload_bytes


def test_load_reads_both_collections(local_config: WardrobeConfig) -> None:
    record_store = SQLiteRecordStore(local_config.database_path)
    record_store.insert(SECTIONS_TABLE, {"name": "Closet"})
    record_store.insert(
        ITEMS_TABLE,
        {"name": "Red Dress", "location": "Closet", "category": "partywear", "tags": ["favorite"]},
    )

    app = SmartWardrobeApp(config=local_config, record_store=record_store)
    snapshot = app.load()

    assert [section.name for section in snapshot.sections] == ["Closet"]
    assert snapshot.item_count("Closet") == 1
    assert snapshot.items[0].image_url == local_config.placeholder_image_url
    assert app.snapshot() == snapshot


@pytest.mark.parametrize(
    "module_path, public_members",
    [
        ("memory.section_store", ("SectionStore",)),
        ("memory.item_store", ("ItemStore",)),
        ("memory.inventory_state", ("InventoryState", "InventorySnapshot", "RenameInconsistency")),
        ("logic.filtering", ("ViewState", "visible")),
        ("logic.validation", ("parse_item_row", "parse_section_row")),
        ("tools.record_store", ("RecordStore", "SQLiteRecordStore", "RestRecordStore")),
        ("tools.object_storage", ("ObjectStorage", "LocalObjectStorage", "RestObjectStorage")),
        ("tools.asset_upload", ("AssetUploadPipeline", "ImageFile")),
        ("tools.notifications", ("Notifier", "LoggingNotifier", "CollectingNotifier")),
    ],
)
def test_modules_export_expected_members(module_path: str, public_members: Tuple[str, ...]) -> None:
    """Modules should import cleanly and expose expected members."""

    module = import_module(module_path)
    for member in public_members:
        assert hasattr(module, member), f"{module_path} is missing {member}"


def test_redaction_masks_credentials_and_payloads() -> None:
    scrubbed = redact_for_log(
        {
            "apikey": "secret",
            "Authorization": "Bearer secret",
            "path": "items/1-abc.png",
            "public_url": "https://project.example.co/storage/v1/object/public/b/items/1.png?token=abc",
            "nested": {"data": b"\x89PNG", "contact": "me@example.com"},
            "blob": b"\x00" * 10,
            "tags": frozenset({"party", "favorite"}),
        }
    )

    assert scrubbed["apikey"] == "[redacted]"
    assert scrubbed["Authorization"] == "[redacted]"
    assert scrubbed["path"] == "items/1-abc.png"
    assert scrubbed["public_url"] == "https://project.example.co/storage/v1/object/public/b/items/1.png"
    assert scrubbed["nested"] == {"data": "[redacted]", "contact": "[redacted-email]"}
    assert scrubbed["blob"] == "[10 bytes]"
    assert scrubbed["tags"] == ["favorite", "party"]


def test_json_formatter_includes_event_fields() -> None:
    record = logging.LogRecord("wardrobe", logging.INFO, __file__, 1, "section_created", None, None)
    record.event = "section_created"
    record.operation = "sections.create"
    record.duration_ms = 12.5

    with correlation_context("abc123"):
        payload = json.loads(JsonFormatter().format(record))

    assert payload["service"] == "smart-wardrobe"
    assert payload["event"] == "section_created"
    assert payload["operation"] == "sections.create"
    assert payload["duration_ms"] == 12.5
    assert payload["correlation_id"] == "abc123"
    assert payload["logger"] == "wardrobe"
    assert "module" not in payload


def test_log_event_prefixes_reserved_field_names() -> None:
    records = []

    class _Capture(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            records.append(record)

    logger = logging.getLogger("tests.log_event")
    logger.propagate = False
    logger.setLevel(logging.INFO)
    logger.addHandler(_Capture())

    with correlation_context("req-1"):
        log_event(logger, logging.INFO, "section_created", name="Closet", apikey="secret")

    [record] = records
    assert record.name == "tests.log_event"
    assert record.field_name == "Closet"
    assert record.apikey == "[redacted]"
    assert record.correlation_id == "req-1"


def test_collecting_notifier_keeps_newest_first() -> None:
    notifier = CollectingNotifier(limit=2)
    notifier.report("info", "Section added", "Closet")
    notifier.report("info", "Section added", "Drawer 1")
    notifier.report_error(NotFoundError("Item 9 does not exist"))

    notices = notifier.notices()
    assert [notice["message"] for notice in notices] == ["Item 9 does not exist", "Drawer 1"]
    assert notices[0]["severity"] == "error"

    notifier.dismiss(notices[0]["id"])
    assert [notice["message"] for notice in notifier.notices()] == ["Drawer 1"]
    notifier.dismiss()
    assert notifier.notices() == []
