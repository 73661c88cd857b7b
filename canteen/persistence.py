"""SQLite-backed session storage and the bounded submission ledgers."""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any

from canteen.config import SESSION_DB_PATH
from canteen.models import SubmissionRecord

logger = logging.getLogger(__name__)

ORDER_KEY = "order"
LAST_ORDER_KEY = "lastOrder"
SUCCESS_LEDGER_KEY = "successful_submissions"
FAILED_LEDGER_KEY = "failed_submissions"


def _connect(db_path: str) -> sqlite3.Connection:
    if db_path != ":memory:":
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(db_path)


class SessionStorage:
    """String key/value store scoped to one app run, like browser sessionStorage."""

    def __init__(self, db_path: str = SESSION_DB_PATH) -> None:
        self._conn = _connect(db_path)
        self.bootstrap_schema()

    def bootstrap_schema(self) -> None:
        """Create the storage table if it does not already exist."""
        with self._conn:
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS session_items (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )

    def get_item(self, key: str) -> str | None:
        row = self._conn.execute("SELECT value FROM session_items WHERE key = ?", (key,)).fetchone()
        return None if row is None else str(row[0])

    def set_item(self, key: str, value: str) -> None:
        with self._conn:
            self._conn.execute(
                """
                INSERT INTO session_items (key, value) VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )

    def remove_item(self, key: str) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM session_items WHERE key = ?", (key,))

    def clear(self) -> None:
        with self._conn:
            self._conn.execute("DELETE FROM session_items")

    def get_json(self, key: str, default: Any = None) -> Any:
        """Decode a stored JSON value. Raises ``ValueError`` on corrupt data."""
        raw = self.get_item(key)
        if raw is None:
            return default
        return json.loads(raw)

    def set_json(self, key: str, value: Any) -> None:
        self.set_item(key, json.dumps(value, ensure_ascii=False))

    def close(self) -> None:
        self._conn.close()


class SubmissionLedger:
    """Bounded success/failure ledgers kept in session storage.

    Every operation reads, mutates and writes in one synchronous step, so
    no coroutine can interleave between the read and the write. Storage
    problems are logged and treated as an empty ledger.
    """

    def __init__(self, storage: SessionStorage) -> None:
        self.storage = storage

    def read_all(self, key: str) -> list[SubmissionRecord]:
        try:
            raw = self.storage.get_json(key, default=[])
            if not isinstance(raw, list):
                raise ValueError(f"ledger {key!r} is not a list")
            if not all(isinstance(entry, dict) for entry in raw):
                raise ValueError(f"ledger {key!r} holds a non-object entry")
            return [SubmissionRecord.from_dict(entry) for entry in raw]
        except (sqlite3.Error, ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.warning("Failed to read ledger %s: %s", key, exc)
            return []

    def append_bounded(self, key: str, record: SubmissionRecord, capacity: int) -> None:
        """Append ``record`` and evict the oldest entries beyond ``capacity``."""
        records = self.read_all(key)
        records.append(record)
        self.replace_all(key, records[-capacity:] if capacity > 0 else [])

    def replace_all(self, key: str, records: list[SubmissionRecord]) -> None:
        try:
            self.storage.set_json(key, [record.to_dict() for record in records])
        except (sqlite3.Error, TypeError, ValueError) as exc:
            logger.warning("Failed to write ledger %s: %s", key, exc)
