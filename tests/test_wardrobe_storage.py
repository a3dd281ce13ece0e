"""Taxonomy, row schemas and record store tests."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, List

import pytest
import requests

sys.path.append(str(Path(__file__).resolve().parents[1]))

from logic.errors import PersistenceError
from logic.validation import parse_item_row, parse_section_row
from models import taxonomy
from models.section import Section
from models.wardrobe_item import WardrobeItem, is_favorite, with_favorite
from tools.record_store import ITEMS_TABLE, SECTIONS_TABLE, RestRecordStore, SQLiteRecordStore


@pytest.fixture()
def sample_row() -> Dict[str, object]:
    return {
        "id": 7,
        "name": "Blue T-Shirt",
        "type": "T-Shirt",
        "color": "Blue",
        "style": "Casual",
        "location": "Drawer 1",
        "image_url": "https://placehold.co/400x320",
        "tags": ["favorite"],
        "category": "casual",
    }


def test_taxonomy_contains_expected_tabs() -> None:
    """Categories plus the two virtual tabs, in display order."""

    assert set(taxonomy.CATEGORIES) == {"workwear", "partywear", "casual"}
    assert [tab["id"] for tab in taxonomy.tab_options()] == [
        "all-items",
        "workwear",
        "partywear",
        "casual",
        "favorites",
    ]


def test_validate_category_accepts_ids_and_display_names() -> None:
    assert taxonomy.validate_category("Work Wear") == "workwear"
    assert taxonomy.validate_category("party_wear") == "partywear"
    with pytest.raises(ValueError):
        taxonomy.validate_category("favorites")
    assert taxonomy.validate_tab("favorites") == "favorites"


def test_favorite_helpers_keep_other_tags() -> None:
    assert with_favorite(["party", " "], True) == frozenset({"party", "favorite"})
    assert with_favorite({"party", "favorite"}, False) == frozenset({"party"})


def test_section_count_label() -> None:
    assert Section.describe_count(0) == "Empty"
    assert Section.describe_count(1) == "1 item"
    assert Section.describe_count(4) == "4 items"
    assert Section(id="1", name="Closet").matches_name("  CLOSET ")


def test_parse_item_row_coerces_shape(sample_row: Dict[str, object]) -> None:
    item = parse_item_row(sample_row)
    assert isinstance(item, WardrobeItem)
    assert item.id == "7"
    assert item.tags == frozenset({"favorite"})
    assert is_favorite(item)


@pytest.mark.parametrize("tags", ['["favorite", "party"]', "favorite,party", ("favorite", "party")])
def test_parse_item_row_accepts_stored_tag_encodings(sample_row: Dict[str, object], tags: Any) -> None:
    item = parse_item_row({**sample_row, "tags": tags})
    assert item.tags == frozenset({"favorite", "party"})


def test_parse_item_row_fills_defaults(sample_row: Dict[str, object]) -> None:
    raw = {key: sample_row[key] for key in ("id", "name", "location", "category")}
    item = parse_item_row({**raw, "tags": None}, placeholder_image_url="https://placehold.co/400x320")
    assert item.image_url == "https://placehold.co/400x320"
    assert (item.type, item.color, item.style) == ("Other", "Unknown", "Unknown")
    assert item.tags == frozenset()


@pytest.mark.parametrize("missing", ["id", "name", "location", "category"])
def test_malformed_item_rows_raise_persistence_error(sample_row: Dict[str, object], missing: str) -> None:
    row = dict(sample_row)
    row.pop(missing)
    with pytest.raises(PersistenceError):
        parse_item_row(row)


def test_parse_section_row() -> None:
    assert parse_section_row({"id": 3, "name": " Closet "}) == Section(id="3", name="Closet")
    with pytest.raises(PersistenceError):
        parse_section_row({"id": 3, "name": "   "})


@pytest.fixture()
def store(tmp_path: Path) -> SQLiteRecordStore:
    return SQLiteRecordStore(tmp_path / "wardrobe.db")


def test_sqlite_store_round_trip(store: SQLiteRecordStore, sample_row: Dict[str, object]) -> None:
    """Inserting assigns ids; rows read back with tags as lists."""

    row = {key: value for key, value in sample_row.items() if key != "id"}
    stored = store.insert(ITEMS_TABLE, row)

    assert stored["id"] == 1
    assert stored["tags"] == ["favorite"]
    assert store.select(ITEMS_TABLE) == [stored]
    assert store.select(ITEMS_TABLE, {"location": "Drawer 1"}) == [stored]
    assert store.select(ITEMS_TABLE, {"location": "Closet"}) == []


def test_sqlite_update_and_delete(store: SQLiteRecordStore) -> None:
    section = store.insert(SECTIONS_TABLE, {"name": "Drawer 1"})
    updated = store.update(SECTIONS_TABLE, str(section["id"]), {"name": "Drawer A"})
    assert updated == {"id": section["id"], "name": "Drawer A"}

    store.delete(SECTIONS_TABLE, str(section["id"]))
    assert store.select(SECTIONS_TABLE) == []
    with pytest.raises(PersistenceError):
        store.update(SECTIONS_TABLE, str(section["id"]), {"name": "Gone"})


def test_sqlite_rejects_unknown_tables_and_columns(store: SQLiteRecordStore) -> None:
    with pytest.raises(PersistenceError):
        store.select("outfits")
    with pytest.raises(PersistenceError):
        store.select(SECTIONS_TABLE, {"colour": "red"})


class _Response:
    def __init__(self, payload: Any = None, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.content = b"" if payload is None else b"json"

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> Any:
        return self._payload


def test_rest_store_speaks_postgrest(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: List[Dict[str, Any]] = []
    responses = iter(
        [
            _Response([{"id": 1, "name": "Closet"}]),
            _Response([{"id": 2, "name": "Drawer 1"}]),
            _Response([{"id": 2, "name": "Drawer A"}]),
            _Response(None),
        ]
    )

    def fake_request(method, url, headers=None, timeout=None, **kwargs):
        calls.append({"method": method, "url": url, "headers": headers, **kwargs})
        return next(responses)

    monkeypatch.setattr(requests, "request", fake_request)
    store = RestRecordStore("https://project.example.co/", api_key="anon")

    assert store.select(SECTIONS_TABLE, {"name": "Closet"}) == [{"id": 1, "name": "Closet"}]
    assert store.insert(SECTIONS_TABLE, {"name": "Drawer 1", "ignored": True})["id"] == 2
    assert store.update(SECTIONS_TABLE, "2", {"name": "Drawer A"})["name"] == "Drawer A"
    store.delete(SECTIONS_TABLE, "2")

    assert [call["method"] for call in calls] == ["GET", "POST", "PATCH", "DELETE"]
    assert calls[0]["url"] == "https://project.example.co/rest/v1/sections"
    assert calls[0]["params"]["name"] == "eq.Closet"
    assert calls[1]["json"] == {"name": "Drawer 1"}
    assert calls[2]["params"] == {"id": "eq.2"}
    assert calls[1]["headers"]["Prefer"] == "return=representation"
    assert calls[1]["headers"]["apikey"] == "anon"


def test_rest_store_wraps_failures(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_request(*_, **__):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr(requests, "request", failing_request)
    store = RestRecordStore("https://project.example.co")

    with pytest.raises(PersistenceError) as excinfo:
        store.select(ITEMS_TABLE)
    assert isinstance(excinfo.value.cause, requests.ConnectionError)


def test_rest_store_requires_returned_row(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(requests, "request", lambda *_, **__: _Response([]))
    store = RestRecordStore("https://project.example.co")
    with pytest.raises(PersistenceError):
        store.update(ITEMS_TABLE, "404", {"name": "Ghost"})
