# src/cache/matching.py - v1
"""Word-prefix text matching shared by the scan-based cache backends."""

from __future__ import annotations

from smartsaver.cache.fingerprint import normalize_text
from smartsaver.cache.models import CachedNutritionRecord


def query_terms(query: str) -> list[str]:
    """Normalized search terms; empty when the query has no word characters."""
    return normalize_text(query).split()


def matches(text: str, terms: list[str]) -> bool:
    """True when every term is a prefix of some word in ``text``."""
    if not terms:
        return False
    words = normalize_text(text).split()
    return all(any(w.startswith(t) for w in words) for t in terms)


def popularity_key(record: CachedNutritionRecord) -> tuple[int, float, str]:
    """Sort key: hit_count desc, last_used_at desc, fingerprint asc."""
    return (-record.hit_count, -record.last_used_at.timestamp(), record.fingerprint)


def rank(
    records: list[CachedNutritionRecord], query: str, limit: int
) -> list[CachedNutritionRecord]:
    terms = query_terms(query)
    found = [r for r in records if matches(r.query_text, terms)]
    found.sort(key=popularity_key)
    return found[:limit]
