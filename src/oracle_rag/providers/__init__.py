# src/oracle_rag/providers/__init__.py
"""LLM and embedding provider clients."""

from oracle_rag.providers.base import EmbeddingClient, LLMClient

__all__ = ["LLMClient", "EmbeddingClient"]
