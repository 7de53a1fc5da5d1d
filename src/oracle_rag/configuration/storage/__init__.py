"""Storage configurations for Oracle."""

from oracle_rag.configuration.storage.local import InMemoryStorage, LocalStorage

__all__ = ["LocalStorage", "InMemoryStorage"]
