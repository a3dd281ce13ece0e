"""Record store abstractions with SQLite and REST implementations.

The inventory engine talks to persistence through four calls only:
``select``, ``insert``, ``update`` and ``delete``. Rows are plain
dictionaries; validation happens on ingress in :mod:`logic.validation`.
"""
from __future__ import annotations

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from logic.errors import PersistenceError

LOGGER = logging.getLogger(__name__)

SECTIONS_TABLE = "sections"
ITEMS_TABLE = "wardrobe_items"

TABLE_COLUMNS: Dict[str, tuple] = {
    SECTIONS_TABLE: ("name",),
    ITEMS_TABLE: ("name", "location", "category", "image_url", "type", "color", "style", "tags"),
}

Row = Dict[str, Any]


class RecordStore(ABC):
    """Persistence interface for section and item rows."""

    @abstractmethod
    def select(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Row]:
        """Return every row of ``table`` matching the equality ``filters``."""

    @abstractmethod
    def insert(self, table: str, row: Row) -> Row:
        """Persist ``row`` and return it with its server-assigned id."""

    @abstractmethod
    def update(self, table: str, record_id: str, patch: Row) -> Row:
        """Apply ``patch`` to one row and return the stored result."""

    @abstractmethod
    def delete(self, table: str, record_id: str) -> None:
        """Remove one row."""


def _columns(table: str) -> tuple:
    try:
        return TABLE_COLUMNS[table]
    except KeyError:
        raise PersistenceError(f"Unknown table '{table}'") from None


class SQLiteRecordStore(RecordStore):
    """Local SQLite-backed record store."""

    def __init__(self, database_path: str | Path = "data/wardrobe.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS sections (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS wardrobe_items (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    location TEXT NOT NULL,
                    category TEXT NOT NULL,
                    image_url TEXT,
                    type TEXT,
                    color TEXT,
                    style TEXT,
                    tags TEXT
                );
                """
            )

    @staticmethod
    def _serialise(value: Any) -> Any:
        if isinstance(value, (list, tuple, set, frozenset)):
            return json.dumps(sorted(value))
        return value

    @staticmethod
    def _row_to_dict(row: sqlite3.Row) -> Row:
        record = dict(row)
        if "tags" in record:
            record["tags"] = json.loads(record["tags"]) if record["tags"] else []
        return record

    def _fetch(self, conn: sqlite3.Connection, table: str, record_id: Any) -> Optional[Row]:
        cursor = conn.execute(f"SELECT * FROM {table} WHERE id = ?", (record_id,))
        row = cursor.fetchone()
        return self._row_to_dict(row) if row else None

    def select(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Row]:
        columns = _columns(table)
        clauses = []
        params: List[Any] = []
        for key, value in (filters or {}).items():
            if key != "id" and key not in columns:
                raise PersistenceError(f"Cannot filter {table} by '{key}'")
            clauses.append(f"{key} = ?")
            params.append(self._serialise(value))
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        try:
            with self._connect() as conn:
                cursor = conn.execute(f"SELECT * FROM {table}{where} ORDER BY id", params)
                return [self._row_to_dict(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to read {table}", exc) from exc

    def insert(self, table: str, row: Row) -> Row:
        columns = [key for key in _columns(table) if key in row]
        placeholders = ", ".join("?" for _ in columns)
        values = [self._serialise(row[key]) for key in columns]
        try:
            with self._connect() as conn:
                cursor = conn.execute(
                    f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
                    values,
                )
                stored = self._fetch(conn, table, cursor.lastrowid)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to insert into {table}", exc) from exc
        if stored is None:
            raise PersistenceError(f"Inserted {table} row could not be read back")
        return stored

    def update(self, table: str, record_id: str, patch: Row) -> Row:
        columns = [key for key in _columns(table) if key in patch]
        try:
            with self._connect() as conn:
                if columns:
                    assignments = ", ".join(f"{key} = ?" for key in columns)
                    values = [self._serialise(patch[key]) for key in columns]
                    conn.execute(
                        f"UPDATE {table} SET {assignments} WHERE id = ?",
                        (*values, record_id),
                    )
                stored = self._fetch(conn, table, record_id)
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to update {table} row {record_id}", exc) from exc
        if stored is None:
            raise PersistenceError(f"No {table} row with id {record_id}")
        return stored

    def delete(self, table: str, record_id: str) -> None:
        _columns(table)
        try:
            with self._connect() as conn:
                conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
        except sqlite3.Error as exc:
            raise PersistenceError(f"Failed to delete {table} row {record_id}", exc) from exc


class RestRecordStore(RecordStore):
    """Record store backed by a PostgREST-compatible HTTP API."""

    def __init__(self, base_url: str, api_key: str | None = None, timeout_seconds: float = 10.0) -> None:
        if not base_url:
            raise ValueError("base_url is required for the REST record store")
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        }
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _url(self, table: str) -> str:
        _columns(table)
        return f"{self.base_url}/rest/v1/{table}"

    def _request(self, method: str, table: str, **kwargs: Any) -> Any:
        url = self._url(table)
        try:
            response = requests.request(
                method, url, headers=self._headers(), timeout=self.timeout_seconds, **kwargs
            )
            response.raise_for_status()
            if not response.content:
                return None
            return response.json()
        except requests.RequestException as exc:
            LOGGER.error("Record store request failed", extra={"method": method, "table": table})
            raise PersistenceError(f"{method} {table} failed: {exc}", exc) from exc
        except ValueError as exc:
            raise PersistenceError(f"{method} {table} returned invalid JSON", exc) from exc

    @staticmethod
    def _single(rows: Any, table: str) -> Row:
        if isinstance(rows, list) and rows:
            return rows[0]
        if isinstance(rows, dict):
            return rows
        raise PersistenceError(f"Record store returned no {table} row")

    def select(self, table: str, filters: Optional[Dict[str, Any]] = None) -> List[Row]:
        params = {"select": "*", "order": "id"}
        for key, value in (filters or {}).items():
            params[key] = f"eq.{value}"
        rows = self._request("GET", table, params=params)
        if rows is None:
            return []
        if not isinstance(rows, list):
            raise PersistenceError(f"Record store returned a non-list for {table}")
        return rows

    def insert(self, table: str, row: Row) -> Row:
        payload = {key: row[key] for key in _columns(table) if key in row}
        if "tags" in payload:
            payload["tags"] = sorted(payload["tags"])
        return self._single(self._request("POST", table, json=payload), table)

    def update(self, table: str, record_id: str, patch: Row) -> Row:
        payload = {key: patch[key] for key in _columns(table) if key in patch}
        if "tags" in payload:
            payload["tags"] = sorted(payload["tags"])
        rows = self._request("PATCH", table, params={"id": f"eq.{record_id}"}, json=payload)
        return self._single(rows, table)

    def delete(self, table: str, record_id: str) -> None:
        self._request("DELETE", table, params={"id": f"eq.{record_id}"})


__all__ = [
    "ITEMS_TABLE",
    "RecordStore",
    "RestRecordStore",
    "SECTIONS_TABLE",
    "SQLiteRecordStore",
]
