# src/cache/redis_store.py - v2
"""Redis-based cache store (CACHE_BACKEND=redis).

Requires 'redis' package: pip install redis.
Suitable for multi-instance deployments. Each record is a hash holding the
JSON payload plus ``hit_count``/``last_used_at`` fields, so the popularity
bump is an atomic ``HINCRBY`` rather than a read-modify-write.
"""

from __future__ import annotations

import json
import logging

from smartsaver.cache.base_cache_store import BaseCacheStore
from smartsaver.cache.matching import rank
from smartsaver.cache.models import CachedNutritionRecord, utcnow

logger = logging.getLogger(__name__)

_KEY_PREFIX = "smartsaver:food:"
_INDEX_KEY = "smartsaver:food:__index__"


class RedisCacheStore(BaseCacheStore):
    """Redis-backed cache store for distributed deployments."""

    backend_name = "redis"

    def __init__(self, redis_url: str) -> None:
        try:
            import redis
        except ImportError as e:
            raise ImportError(
                "redis package required: pip install redis"
            ) from e

        self._client = redis.Redis.from_url(redis_url, decode_responses=True)

    async def _get_and_touch(
        self, fingerprint: str
    ) -> CachedNutritionRecord | None:
        key = f"{_KEY_PREFIX}{fingerprint}"
        if not self._client.exists(key):
            return None
        self._client.hincrby(key, "hit_count", 1)
        self._client.hset(key, "last_used_at", utcnow().isoformat())
        return self._load(key)

    async def _upsert(self, fingerprint: str, record: CachedNutritionRecord) -> None:
        key = f"{_KEY_PREFIX}{fingerprint}"
        self._client.hset(
            key,
            mapping={
                "data": record.model_dump_json(
                    exclude={"hit_count", "last_used_at"}
                ),
                "hit_count": record.hit_count,
                "last_used_at": record.last_used_at.isoformat(),
            },
        )
        # Key index for list/search scans
        self._client.sadd(_INDEX_KEY, fingerprint)

    async def _search(self, query: str, limit: int) -> list[CachedNutritionRecord]:
        # No secondary index on query_text: scan and rank in process
        return rank(await self._list_records(), query, limit)

    async def _list_records(self) -> list[CachedNutritionRecord]:
        records: list[CachedNutritionRecord] = []
        for fingerprint in sorted(self._client.smembers(_INDEX_KEY)):
            record = self._load(f"{_KEY_PREFIX}{fingerprint}")
            if record is not None:
                records.append(record)
        return records

    def _load(self, key: str) -> CachedNutritionRecord | None:
        fields = self._client.hgetall(key)
        if not fields or "data" not in fields:
            return None
        try:
            data = json.loads(fields["data"])
            data["hit_count"] = int(fields.get("hit_count", 1))
            data["last_used_at"] = fields.get("last_used_at") or data.get("created_at")
            return CachedNutritionRecord(**data)
        except ValueError as e:
            logger.warning("Failed to deserialize cache entry %s: %s", key, e)
            return None

    def close(self) -> None:
        """Close the Redis connection."""
        self._client.close()
