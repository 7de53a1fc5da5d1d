# src/oracle_rag/configuration/providers/litellm.py
"""LiteLLM provider configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from oracle_rag.providers.litellm.client import DEFAULT_CHAT_MODEL, DEFAULT_EMBEDDING_MODEL

if TYPE_CHECKING:
    from oracle_rag.embedder import Embedder
    from oracle_rag.providers import LLMClient
    from oracle_rag.settings import Settings


@dataclass(frozen=True)
class LiteLLMProvider:
    """Provider configuration using LiteLLM for embedding and completion calls.

    The embedding model must be the one the corpus was embedded with.

    Args:
        llm: LiteLLM model identifier for answer synthesis.
        embedding: LiteLLM model identifier for query embeddings.

    Example:
        provider = LiteLLMProvider(
            llm="openai/gpt-4o-mini",
            embedding="openai/text-embedding-3-small",
        )
    """

    llm: str = DEFAULT_CHAT_MODEL
    embedding: str = DEFAULT_EMBEDDING_MODEL

    def build_embedder(self, settings: Settings) -> Embedder:
        """Build a ClientEmbedder using the LiteLLM embedding client.

        Args:
            settings: Settings containing num_retries for rate limit handling.
        """
        from oracle_rag.embedder import ClientEmbedder
        from oracle_rag.providers.litellm import LiteLLMEmbeddingClient

        embedding_client = LiteLLMEmbeddingClient(
            model=self.embedding,
            num_retries=settings.num_retries,
        )
        return ClientEmbedder(embedding_client=embedding_client)

    def build_llm_client(self, settings: Settings | None = None) -> LLMClient:
        from oracle_rag.providers.litellm import LiteLLMClient

        num_retries = settings.num_retries if settings else 3
        return LiteLLMClient(model=self.llm, num_retries=num_retries)
