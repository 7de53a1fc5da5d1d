"""Configuration objects for Oracle.

Instead of factory methods, you pass configuration objects that know how to
build their components.

Example:
    from oracle_rag import LiteLLMProvider, LocalStorage, Oracle

    oracle = Oracle(
        provider=LiteLLMProvider(embedding="openai/text-embedding-3-small"),
        storage=LocalStorage("./data"),
    )
"""

from oracle_rag.configuration.base import ProviderConfig, StorageConfig
from oracle_rag.configuration.providers import LiteLLMProvider
from oracle_rag.configuration.storage import InMemoryStorage, LocalStorage

__all__ = [
    "ProviderConfig",
    "StorageConfig",
    "LiteLLMProvider",
    "LocalStorage",
    "InMemoryStorage",
]
