# src/oracle_rag/providers/litellm/__init__.py
"""LiteLLM-backed provider clients."""

from oracle_rag.providers.litellm.client import (
    DEFAULT_CHAT_MODEL,
    DEFAULT_EMBEDDING_MODEL,
    LiteLLMClient,
    LiteLLMEmbeddingClient,
)

__all__ = [
    "LiteLLMClient",
    "LiteLLMEmbeddingClient",
    "DEFAULT_CHAT_MODEL",
    "DEFAULT_EMBEDDING_MODEL",
]
