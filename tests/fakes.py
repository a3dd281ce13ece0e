"""Test doubles for the record store and object storage boundaries."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

from logic.errors import PersistenceError, UploadFailed
from tools.object_storage import ObjectStorage
from tools.record_store import SQLiteRecordStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


class FlakyRecordStore(SQLiteRecordStore):
    """SQLite store that records every call and fails the ones listed in ``failing``.

    Entries are ``(operation, table)`` or ``(operation, table, record_id)``.
    """

    def __init__(self, database_path: Path) -> None:
        super().__init__(database_path)
        self.failing: Set[Tuple[Any, ...]] = set()
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    def _check(self, operation: str, table: str, record_id: Optional[str] = None) -> None:
        self.calls.append((operation, table, record_id))
        if (operation, table) in self.failing or (operation, table, str(record_id)) in self.failing:
            raise PersistenceError(f"{operation} on {table} failed")

    def select(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        self._check("select", table)
        return super().select(table, filters)

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        self._check("insert", table)
        return super().insert(table, row)

    def update(self, table: str, record_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        self._check("update", table, record_id)
        return super().update(table, record_id, patch)

    def delete(self, table: str, record_id: str) -> None:
        self._check("delete", table, record_id)
        super().delete(table, record_id)


class RecordingStorage(ObjectStorage):
    """Object storage double that records uploads and can be told to fail."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.uploads: List[Tuple[str, int, str]] = []

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        self.uploads.append((path, len(data), content_type))
        if self.fail:
            raise UploadFailed("bucket unavailable", ConnectionError("connection reset"))

    def public_url(self, path: str) -> str:
        return f"https://cdn.example.com/public/{path}"


__all__ = ["FlakyRecordStore", "PNG_BYTES", "RecordingStorage"]
