# src/cache/json_store.py - v2
"""JSON file-based cache store (CACHE_BACKEND=json).

One JSON file per fingerprint under CACHE_ROOT. Writes go through a temp
file and ``os.replace`` so a reader never sees a half-written record.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from smartsaver.cache.base_cache_store import BaseCacheStore
from smartsaver.cache.matching import rank
from smartsaver.cache.models import CachedNutritionRecord, utcnow

logger = logging.getLogger(__name__)


class JsonCacheStore(BaseCacheStore):
    """File-based cache store using JSON files."""

    backend_name = "json"

    def __init__(self, cache_root: Path | str) -> None:
        self._root = Path(cache_root).expanduser()
        self._root.mkdir(parents=True, exist_ok=True)

    async def _get_and_touch(
        self, fingerprint: str
    ) -> CachedNutritionRecord | None:
        path = self._entry_path(fingerprint)
        if not path.exists():
            return None
        record = self._read(path)
        if record is None:
            return None
        record = record.model_copy(
            update={"hit_count": record.hit_count + 1, "last_used_at": utcnow()}
        )
        self._write(path, record)
        return record

    async def _upsert(self, fingerprint: str, record: CachedNutritionRecord) -> None:
        self._write(self._entry_path(fingerprint), record)

    async def _search(self, query: str, limit: int) -> list[CachedNutritionRecord]:
        return rank(await self._list_records(), query, limit)

    async def _list_records(self) -> list[CachedNutritionRecord]:
        records: list[CachedNutritionRecord] = []
        if not self._root.is_dir():
            return records
        for path in sorted(self._root.glob("*.json")):
            record = self._read(path)
            if record is not None:
                records.append(record)
        return records

    @staticmethod
    def _read(path: Path) -> CachedNutritionRecord | None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return CachedNutritionRecord(**data)
        except FileNotFoundError:
            return None
        except ValueError as e:
            # Corrupt file: treat as absent, the next put overwrites it
            logger.warning("Failed to read cache entry %s: %s", path.name, e)
            return None

    @staticmethod
    def _write(path: Path, record: CachedNutritionRecord) -> None:
        tmp = path.with_suffix(f".{os.getpid()}.tmp")
        tmp.write_text(record.model_dump_json(indent=2), encoding="utf-8")
        os.replace(tmp, path)

    def _entry_path(self, fingerprint: str) -> Path:
        safe_key = fingerprint.replace("/", "_").replace("\\", "_")
        return self._root / f"{safe_key}.json"
