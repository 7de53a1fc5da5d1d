# src/oracle_rag/embedder/client.py
"""Client-based embedder implementation."""

from oracle_rag.embedder.base import Embedder
from oracle_rag.providers.base import EmbeddingClient


class ClientEmbedder(Embedder):
    """Embedder that delegates to an EmbeddingClient.

    Example:
        from oracle_rag.providers.litellm import LiteLLMEmbeddingClient
        from oracle_rag.embedder import ClientEmbedder

        embedder = ClientEmbedder(LiteLLMEmbeddingClient("openai/text-embedding-3-small"))
    """

    def __init__(self, embedding_client: EmbeddingClient) -> None:
        self._client = embedding_client

    def embed_text(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text."""
        result = self._client.embed([text])
        if not result:
            raise ValueError("Embedding client returned no vectors")
        return result[0]

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (batched)."""
        if not texts:
            return []
        return self._client.embed(texts)
