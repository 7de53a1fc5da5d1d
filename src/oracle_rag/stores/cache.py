# src/oracle_rag/stores/cache.py
"""Search result cache with age-based expiry and a pluggable backend."""

import hashlib
import json
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from oracle_rag.logging_config import get_logger
from oracle_rag.models import SearchResult

logger = get_logger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    results: tuple[SearchResult, ...]
    stored_at: float


class CacheBackend(ABC):
    """Abstract key-value backend for cache entries."""

    @abstractmethod
    def get(self, key: str) -> CacheEntry | None:
        """Return the entry for a key, or None."""
        ...

    @abstractmethod
    def set(self, key: str, entry: CacheEntry) -> None:
        """Store an entry, replacing any existing one."""
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove an entry if present."""
        ...

    @abstractmethod
    def clear(self) -> None:
        """Remove every entry."""
        ...

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys, oldest insertion first."""
        ...


class InMemoryCacheBackend(CacheBackend):
    """Process-local dict backend.

    Last write wins and nothing is locked: two concurrent identical searches
    may both miss and both write. Entries expire by age, so a redundant write
    is harmless.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> CacheEntry | None:
        return self._entries.get(key)

    def set(self, key: str, entry: CacheEntry) -> None:
        # Re-inserting moves the key to the end so keys() stays oldest-first
        self._entries.pop(key, None)
        self._entries[key] = entry

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)


class SearchCache:
    """TTL cache for search results, injected into the search engine.

    Args:
        backend: Storage for entries. Defaults to an in-memory dict.
        clock: Returns the current time in seconds. Injectable for tests.
        max_entries: Evict the oldest entry once this many are stored.
    """

    def __init__(
        self,
        backend: CacheBackend | None = None,
        clock: Callable[[], float] = time.time,
        max_entries: int | None = None,
    ) -> None:
        self.backend = backend or InMemoryCacheBackend()
        self._clock = clock
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(query_text: str, filters: dict[str, Any], method: str) -> str:
        """Deterministic key over (query text, filters, strategy)."""
        payload = json.dumps(
            {"query": query_text, "filters": filters, "method": method},
            sort_keys=True,
            default=str,
        )
        return hashlib.sha256(payload.encode("utf-8")).hexdigest()

    def _age_minutes(self, entry: CacheEntry) -> float:
        return (self._clock() - entry.stored_at) / 60.0

    def get(self, key: str, ttl_minutes: float) -> list[SearchResult] | None:
        """Return cached results while ``age_minutes < ttl_minutes``.

        Expired entries are evicted on read.
        """
        entry = self.backend.get(key)
        if entry is None:
            self.misses += 1
            return None
        if self._age_minutes(entry) >= ttl_minutes:
            self.backend.delete(key)
            self.misses += 1
            return None
        self.hits += 1
        return list(entry.results)

    def put(self, key: str, results: list[SearchResult]) -> None:
        self.backend.set(key, CacheEntry(results=tuple(results), stored_at=self._clock()))
        if self.max_entries is not None:
            keys = self.backend.keys()
            for stale in keys[: max(0, len(keys) - self.max_entries)]:
                self.backend.delete(stale)

    def prune(self, ttl_minutes: float) -> int:
        """Drop every entry older than ``ttl_minutes``. Returns the number removed."""
        removed = 0
        for key in self.backend.keys():
            entry = self.backend.get(key)
            if entry is not None and self._age_minutes(entry) >= ttl_minutes:
                self.backend.delete(key)
                removed += 1
        if removed:
            logger.debug("search_cache_pruned", removed=removed)
        return removed

    def clear(self) -> None:
        self.backend.clear()
