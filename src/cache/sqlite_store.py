# src/cache/sqlite_store.py - v2
"""SQLite-based cache store (CACHE_BACKEND=sqlite, the default).

Uses stdlib sqlite3. The popularity bump is a single
``UPDATE ... SET hit_count = hit_count + 1`` so concurrent hits never lose
increments, and upserts use ``ON CONFLICT(fingerprint) DO UPDATE``.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from smartsaver.cache.base_cache_store import BaseCacheStore
from smartsaver.cache.matching import query_terms
from smartsaver.cache.models import CachedNutritionRecord, utcnow

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS food_cache (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    fingerprint TEXT NOT NULL UNIQUE,
    query_type TEXT NOT NULL CHECK (query_type IN ('text', 'image', 'combined')),
    query_text TEXT NOT NULL DEFAULT '',
    food_name TEXT NOT NULL,
    calories INTEGER NOT NULL CHECK (calories >= 0),
    protein INTEGER NOT NULL CHECK (protein >= 0),
    carbs INTEGER NOT NULL CHECK (carbs >= 0),
    fats INTEGER NOT NULL CHECK (fats >= 0),
    fiber INTEGER NOT NULL DEFAULT 0 CHECK (fiber >= 0),
    portion_size TEXT,
    portion_grams INTEGER,
    health_score TEXT CHECK (
        health_score IN ('excellent', 'good', 'moderate', 'indulgent')
    ),
    health_tip TEXT,
    cooking_method TEXT,
    cuisine_type TEXT,
    ai_provider TEXT,
    hit_count INTEGER NOT NULL DEFAULT 1,
    created_at TEXT NOT NULL,
    last_used_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_food_cache_hits ON food_cache(hit_count DESC);
"""

_COLUMNS = (
    "fingerprint",
    "query_type",
    "query_text",
    "food_name",
    "calories",
    "protein",
    "carbs",
    "fats",
    "fiber",
    "portion_size",
    "portion_grams",
    "health_score",
    "health_tip",
    "cooking_method",
    "cuisine_type",
    "ai_provider",
    "hit_count",
    "created_at",
    "last_used_at",
)

_UPSERT = f"""
INSERT INTO food_cache ({", ".join(_COLUMNS)})
VALUES ({", ".join("?" for _ in _COLUMNS)})
ON CONFLICT(fingerprint) DO UPDATE SET
{", ".join(f"{c} = excluded.{c}" for c in _COLUMNS if c != "fingerprint")}
"""

_ORDER_BY = "ORDER BY hit_count DESC, last_used_at DESC, fingerprint ASC"


def _ts(value: datetime) -> str:
    """Fixed-width UTC timestamp so text ordering matches time ordering."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SqliteCacheStore(BaseCacheStore):
    """SQLite-backed cache store."""

    backend_name = "sqlite"

    def __init__(self, db_path: Path | str) -> None:
        self._db_path = Path(db_path).expanduser()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.executescript(_SCHEMA)

    async def _get_and_touch(
        self, fingerprint: str
    ) -> CachedNutritionRecord | None:
        with self._conn:
            cursor = self._conn.execute(
                """UPDATE food_cache
                   SET hit_count = hit_count + 1, last_used_at = ?
                   WHERE fingerprint = ?""",
                (_ts(utcnow()), fingerprint),
            )
            if cursor.rowcount == 0:
                return None
            row = self._conn.execute(
                "SELECT * FROM food_cache WHERE fingerprint = ?", (fingerprint,)
            ).fetchone()
        return self._to_record(row) if row is not None else None

    async def _upsert(self, fingerprint: str, record: CachedNutritionRecord) -> None:
        data = record.model_dump()
        data["fingerprint"] = fingerprint
        data["created_at"] = _ts(record.created_at)
        data["last_used_at"] = _ts(record.last_used_at)
        with self._conn:
            self._conn.execute(_UPSERT, tuple(data[c] for c in _COLUMNS))

    async def _search(self, query: str, limit: int) -> list[CachedNutritionRecord]:
        terms = query_terms(query)
        if not terms:
            return []
        # Each term must prefix a word of the normalized query text
        clauses = " AND ".join(
            "(' ' || query_text) LIKE ? ESCAPE '\\'" for _ in terms
        )
        params: list[object] = [f"% {_escape_like(t)}%" for t in terms]
        params.append(limit)
        rows = self._conn.execute(
            f"SELECT * FROM food_cache WHERE {clauses} {_ORDER_BY} LIMIT ?",
            params,
        ).fetchall()
        return [self._to_record(r) for r in rows]

    async def _list_records(self) -> list[CachedNutritionRecord]:
        rows = self._conn.execute(f"SELECT * FROM food_cache {_ORDER_BY}").fetchall()
        records: list[CachedNutritionRecord] = []
        for row in rows:
            try:
                records.append(self._to_record(row))
            except ValueError as e:
                logger.warning("Skipping unreadable cache row: %s", e)
        return records

    @staticmethod
    def _to_record(row: sqlite3.Row) -> CachedNutritionRecord:
        data = {c: row[c] for c in _COLUMNS}
        return CachedNutritionRecord(**data)

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
