# src/oracle_rag/configuration/base.py
"""Protocol definitions for configuration objects.

Provider and storage configurations are frozen dataclasses that know how to
build their components. Any object with the right methods satisfies these
protocols; no inheritance is needed. Stores and clients, by contrast, are
ABCs (see ``oracle_rag.stores.base`` and ``oracle_rag.providers.base``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from oracle_rag.embedder import Embedder
    from oracle_rag.providers import LLMClient
    from oracle_rag.settings import Settings
    from oracle_rag.stores import PassageStore


@runtime_checkable
class ProviderConfig(Protocol):
    """Protocol for provider configurations.

    Provider configurations build the model-backed components:
    - Embedder: embeds query text for vector search
    - LLMClient: optional answer synthesis
    """

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build an embedder for query embeddings."""
        ...

    def build_llm_client(self, settings: Settings | None = None) -> LLMClient:
        """Build an LLM client for answer synthesis."""
        ...


@runtime_checkable
class StorageConfig(Protocol):
    """Protocol for storage configurations.

    Example implementation:
        @dataclass(frozen=True)
        class LocalStorage:
            data_dir: str

            def build_store(self) -> PassageStore: ...
    """

    def build_store(self) -> PassageStore:
        """Build the passage store holding the pre-embedded corpus."""
        ...
