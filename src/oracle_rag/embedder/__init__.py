# src/oracle_rag/embedder/__init__.py
"""Query embedding."""

from oracle_rag.embedder.base import Embedder
from oracle_rag.embedder.client import ClientEmbedder

__all__ = ["Embedder", "ClientEmbedder"]
