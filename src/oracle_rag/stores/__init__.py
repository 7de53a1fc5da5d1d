# src/oracle_rag/stores/__init__.py
"""Passage stores and the search result cache."""

from oracle_rag.stores.base import PassageFilter, PassageStore
from oracle_rag.stores.cache import CacheBackend, InMemoryCacheBackend, SearchCache
from oracle_rag.stores.chroma import ChromaPassageStore
from oracle_rag.stores.memory import InMemoryPassageStore

__all__ = [
    "PassageStore",
    "PassageFilter",
    "ChromaPassageStore",
    "InMemoryPassageStore",
    "SearchCache",
    "CacheBackend",
    "InMemoryCacheBackend",
]
