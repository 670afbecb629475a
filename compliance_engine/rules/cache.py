"""
In-memory cache for evaluation results.

Holds one slot per caller-supplied key (usually a rule or tree id): the hash of
the facts last evaluated under that key and the result. A different fact hash
is a miss and the slot is overwritten.
"""

from __future__ import annotations

import hashlib
import json
import logging
import threading
from typing import Any

from pydantic import BaseModel, Field

from .trace import EvaluationResult

logger = logging.getLogger(__name__)


def hash_facts(facts: dict[str, Any]) -> str:
    """Stable content hash of a fact bag.

    Keys are sorted at every level, so key order never affects the hash.

    Raises:
        TypeError: If a value is not JSON-serializable
        ValueError: If the facts contain a reference cycle
    """
    canonical = json.dumps(facts, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def _try_hash(key: str, facts: dict[str, Any]) -> str | None:
    """Hash facts for the cache, or None when they cannot be cached."""
    try:
        return hash_facts(facts)
    except (TypeError, ValueError) as e:
        logger.debug("Facts for %s are not cacheable: %s", key, e)
        return None


class CacheStats(BaseModel):
    """Cache statistics for diagnostics."""
    size: int
    keys: list[str] = Field(default_factory=list)
    hits: int = 0
    misses: int = 0


class _CacheEntry:
    __slots__ = ("fact_hash", "result")

    def __init__(self, fact_hash: str, result: EvaluationResult):
        self.fact_hash = fact_hash
        self.result = result


class EvaluationCache:
    """Thread-safe single-slot-per-key cache of EvaluationResults."""

    def __init__(self) -> None:
        self._entries: dict[str, _CacheEntry] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str, facts: dict[str, Any]) -> EvaluationResult | None:
        """Get the cached result for key if the facts are unchanged.

        Args:
            key: Caller-supplied identity (e.g. tree id)
            facts: The facts about to be evaluated

        Returns:
            EvaluationResult on a hit, None otherwise (always None for facts
            that are not JSON-serializable)
        """
        fact_hash = _try_hash(key, facts)
        with self._lock:
            entry = self._entries.get(key)
            if fact_hash is not None and entry is not None and entry.fact_hash == fact_hash:
                self._hits += 1
                logger.debug("Evaluation cache hit for %s", key)
                return entry.result
            self._misses += 1
            logger.debug("Evaluation cache miss for %s", key)
            return None

    def put(self, key: str, facts: dict[str, Any], result: EvaluationResult) -> None:
        """Store a result, replacing whatever the key held before.

        Facts that are not JSON-serializable are not stored.
        """
        fact_hash = _try_hash(key, facts)
        if fact_hash is None:
            return
        with self._lock:
            self._entries[key] = _CacheEntry(fact_hash, result)

    def invalidate(self, key: str) -> bool:
        """Drop one key.

        Returns:
            True if the key was cached
        """
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> int:
        """Drop every entry and reset counters.

        Returns:
            Number of entries dropped
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
            self._hits = 0
            self._misses = 0
            return count

    def stats(self) -> CacheStats:
        """Get cache statistics."""
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                keys=list(self._entries.keys()),
                hits=self._hits,
                misses=self._misses,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries


# Global cache instance
_global_cache: EvaluationCache | None = None


def get_evaluation_cache() -> EvaluationCache:
    """Get or create the process-wide evaluation cache."""
    global _global_cache
    if _global_cache is None:
        _global_cache = EvaluationCache()
    return _global_cache


def reset_evaluation_cache() -> None:
    """Reset the process-wide evaluation cache."""
    global _global_cache
    _global_cache = None
