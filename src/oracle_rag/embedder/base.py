# src/oracle_rag/embedder/base.py
"""Embedder abstract base class."""

from abc import ABC, abstractmethod


class Embedder(ABC):
    """Abstract base class for query embedding.

    Subclasses must implement embed_text and embed_texts.
    """

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text."""
        ...

    @abstractmethod
    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for multiple texts (batched)."""
        ...
