# src/cache/base_cache_store.py - v2
"""Abstract cache store interface.

Backends implement the ``_``-prefixed primitives. The public methods wrap
them so that no storage error ever escapes the store: a failed read is a
miss, a failed write is logged and reported as ``False``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from smartsaver.cache.models import (
    CachedNutritionRecord,
    CacheLookupResult,
    CacheStats,
    utcnow,
)

logger = logging.getLogger(__name__)


class BaseCacheStore(ABC):
    """Unified interface for cache storage backends."""

    backend_name: str = "base"

    # --- Public, failure-absorbing API ---

    async def lookup(self, fingerprint: str) -> CacheLookupResult:
        """Exact lookup; bumps ``hit_count`` and ``last_used_at`` on a hit."""
        try:
            record = await self._get_and_touch(fingerprint)
        except Exception as e:
            logger.warning(
                "Cache lookup failed on %s backend for %s: %s",
                self.backend_name, fingerprint[:8], e,
            )
            return CacheLookupResult(status="unavailable", error=str(e))
        if record is None:
            return CacheLookupResult(status="miss")
        return CacheLookupResult(status="hit", record=record)

    async def get(self, fingerprint: str) -> CachedNutritionRecord | None:
        """Retrieve a record by fingerprint (None on miss or storage error)."""
        result = await self.lookup(fingerprint)
        return result.record if result.hit else None

    async def put(self, fingerprint: str, record: CachedNutritionRecord) -> bool:
        """Upsert a record; resets ``hit_count`` to 1 and both timestamps."""
        now = utcnow()
        record = record.model_copy(
            update={
                "fingerprint": fingerprint,
                "hit_count": 1,
                "created_at": now,
                "last_used_at": now,
            }
        )
        try:
            await self._upsert(fingerprint, record)
        except Exception as e:
            logger.warning(
                "Cache write failed on %s backend for %s: %s",
                self.backend_name, fingerprint[:8], e,
            )
            return False
        logger.debug("Saved to cache: %s", fingerprint[:8])
        return True

    async def find_similar(
        self, query: str, limit: int = 5
    ) -> list[CachedNutritionRecord]:
        """Fuzzy text search, most popular first. Empty list on any error."""
        if limit <= 0:
            return []
        try:
            return await self._search(query, limit)
        except Exception as e:
            logger.warning(
                "Similar search failed on %s backend: %s", self.backend_name, e
            )
            return []

    async def list_records(self) -> list[CachedNutritionRecord]:
        """Every stored record (for stats). Empty list on any error."""
        try:
            return await self._list_records()
        except Exception as e:
            logger.warning(
                "Listing cache records failed on %s backend: %s",
                self.backend_name, e,
            )
            return []

    async def stats(self, top_n: int = 5) -> CacheStats:
        return CacheStats.from_records(await self.list_records(), top_n=top_n)

    def close(self) -> None:
        """Release backend resources."""

    # --- Backend primitives ---

    @abstractmethod
    async def _get_and_touch(
        self, fingerprint: str
    ) -> CachedNutritionRecord | None:
        """Read a record and bump its popularity bookkeeping."""

    @abstractmethod
    async def _upsert(self, fingerprint: str, record: CachedNutritionRecord) -> None:
        """Insert or fully replace the record for a fingerprint."""

    @abstractmethod
    async def _search(self, query: str, limit: int) -> list[CachedNutritionRecord]:
        """Text search over ``query_text`` ordered by popularity."""

    @abstractmethod
    async def _list_records(self) -> list[CachedNutritionRecord]:
        """List all stored records."""
