# src/cache/json_store.py — v1
"""JSON file-based cache store (CACHE_BACKEND=json).

Stores each entry as an individual JSON file under CACHE_ROOT. File names
are a digest of the key, so any key is safe on any filesystem; the key
itself is kept inside the file.
"""

from __future__ import annotations

import hashlib
import logging
from fnmatch import fnmatchcase
from pathlib import Path

from pydantic import ValidationError

from salesintel.cache.base_cache_store import BaseCacheStore
from salesintel.cache.models import CacheEntry

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    backend_name = "json"

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def get_item(self, key: str) -> CacheEntry | None:
        path = self._entry_path(key)
        if not path.exists():
            return None
        return CacheEntry.model_validate_json(path.read_text(encoding="utf-8"))

    async def put_item(self, entry: CacheEntry) -> None:
        path = self._entry_path(entry.key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)

    async def delete_item(self, key: str) -> bool:
        path = self._entry_path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    async def scan_items(self, pattern: str = "*") -> list[CacheEntry]:
        entries: list[CacheEntry] = []
        for path in sorted(self._root.glob("*.json")):
            try:
                entry = CacheEntry.model_validate_json(path.read_text(encoding="utf-8"))
            except (OSError, ValidationError) as e:
                logger.warning("Skipping unreadable cache file %s: %s", path.name, e)
                continue
            if fnmatchcase(entry.key, pattern):
                entries.append(entry)
        return entries

    def _entry_path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self._root / f"{digest}.json"
