# src/oracle_rag/stores/base.py
"""Abstract base classes for passage storage and search."""

import re
from abc import ABC, abstractmethod

from oracle_rag.models import SearchResult

# Field name -> allowed values. A passage matches when every listed field
# holds one of the allowed values. Passages missing a TAG_FIELDS value are
# untagged and match any clause on it; other missing fields never match.
PassageFilter = dict[str, list[str]]

TAG_FIELDS = frozenset({"business_phase", "complexity_level", "category"})

_TERM_RE = re.compile(r"[a-z0-9][a-z0-9\-/]+")
_STOPWORDS = frozenset(
    {
        "the",
        "and",
        "for",
        "how",
        "what",
        "with",
        "can",
        "does",
        "are",
        "you",
        "your",
        "our",
        "this",
        "that",
        "from",
        "into",
        "should",
        "would",
    }
)


def query_terms(text: str) -> list[str]:
    """Distinct lowercase keyword terms in a query, in first-seen order."""
    seen: dict[str, None] = {}
    for term in _TERM_RE.findall(text.lower()):
        if len(term) >= 3 and term not in _STOPWORDS:
            seen.setdefault(term, None)
    return list(seen)


def keyword_score(terms: list[str], title: str, content: str) -> float:
    """Fraction of query terms that appear in a passage."""
    if not terms:
        return 0.0
    haystack = f"{title}\n{content}".lower()
    return sum(1 for term in terms if term in haystack) / len(terms)


def hybrid_score(vector_score: float, keyword: float, keyword_weight: float) -> float:
    return (1.0 - keyword_weight) * vector_score + keyword_weight * keyword


class PassageStore(ABC):
    """Abstract base class for the external vector store holding the corpus.

    Ingestion is out of scope; ``add`` exists so callers can load passages
    that were embedded elsewhere.
    """

    @abstractmethod
    def add(self, passages: list[SearchResult], embeddings: list[list[float]]) -> None:
        """Add passages with their precomputed embeddings."""
        ...

    @abstractmethod
    def search(
        self,
        embedding: list[float],
        k: int = 5,
        threshold: float = 0.0,
        where: PassageFilter | None = None,
        timeout: float | None = None,
    ) -> list[SearchResult]:
        """Embedding-similarity search.

        Returns at most ``k`` passages scoring at least ``threshold``, most
        similar first. ``timeout`` is a deadline hint for remote stores.
        """
        ...

    @abstractmethod
    def hybrid_search(
        self,
        query_text: str,
        embedding: list[float],
        k: int = 5,
        threshold: float = 0.0,
        keyword_weight: float = 0.3,
        where: PassageFilter | None = None,
        timeout: float | None = None,
    ) -> list[SearchResult]:
        """Similarity search blended with keyword matching on ``query_text``."""
        ...

    @abstractmethod
    def get(self, passage_ids: list[str]) -> list[SearchResult]:
        """Fetch passages by id. Missing ids are skipped."""
        ...

    @abstractmethod
    def count(self) -> int:
        """Number of passages in the store."""
        ...

    def close(self) -> None:
        """Release resources held by the store."""
        return None
