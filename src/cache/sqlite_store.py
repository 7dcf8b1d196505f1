# src/cache/sqlite_store.py — v1
"""SQLite-based cache store (CACHE_BACKEND=sqlite).

Uses stdlib sqlite3, no external dependency. Keys are matched with
SQLite GLOB, which follows the same wildcard rules as fnmatch.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from pathlib import Path

from salesintel.cache.base_cache_store import BaseCacheStore
from salesintel.cache.models import CacheEntry

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_entries (
    key TEXT PRIMARY KEY,
    category TEXT NOT NULL,
    format TEXT NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL,
    expires_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_category ON cache_entries(category);
CREATE INDEX IF NOT EXISTS idx_expires_at ON cache_entries(expires_at);
"""

_COLUMNS = "key, category, format, payload, created_at, expires_at"


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store for a single host."""

    backend_name = "sqlite"

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def get_item(self, key: str) -> CacheEntry | None:
        cursor = self._conn.execute(
            f"SELECT {_COLUMNS} FROM cache_entries WHERE key = ?", (key,)
        )
        row = cursor.fetchone()
        return None if row is None else _row_to_entry(row)

    async def put_item(self, entry: CacheEntry) -> None:
        self._conn.execute(
            f"INSERT OR REPLACE INTO cache_entries ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?)",
            (
                entry.key,
                entry.category.value,
                entry.format,
                entry.payload,
                entry.created_at.isoformat(),
                entry.expires_at.isoformat(),
            ),
        )
        self._conn.commit()

    async def delete_item(self, key: str) -> bool:
        cursor = self._conn.execute("DELETE FROM cache_entries WHERE key = ?", (key,))
        self._conn.commit()
        return cursor.rowcount > 0

    async def scan_items(self, pattern: str = "*") -> list[CacheEntry]:
        cursor = self._conn.execute(
            f"SELECT {_COLUMNS} FROM cache_entries WHERE key GLOB ? ORDER BY key",
            (pattern,),
        )
        entries: list[CacheEntry] = []
        for row in cursor.fetchall():
            try:
                entries.append(_row_to_entry(row))
            except ValueError as e:
                logger.warning("Skipping malformed cache row %s: %s", row[0], e)
        return entries

    async def close(self) -> None:
        self._conn.close()


def _row_to_entry(row: tuple) -> CacheEntry:
    key, category, fmt, payload, created_at, expires_at = row
    return CacheEntry(
        key=key,
        category=category,
        format=fmt,
        payload=payload,
        created_at=datetime.fromisoformat(created_at),
        expires_at=datetime.fromisoformat(expires_at),
    )
