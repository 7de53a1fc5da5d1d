# src/oracle_rag/stores/memory.py
"""In-memory passage store backed by numpy."""

import numpy as np

from oracle_rag.models import SearchResult
from oracle_rag.stores.base import (
    TAG_FIELDS,
    PassageFilter,
    PassageStore,
    hybrid_score,
    keyword_score,
    query_terms,
)


def _matches(passage: SearchResult, where: PassageFilter | None) -> bool:
    if not where:
        return True
    for field, allowed in where.items():
        value = getattr(passage, field, None)
        if value is None:
            value = passage.metadata.get(field)
        if value is None:
            if field in TAG_FIELDS:
                continue
            return False
        if str(value) not in allowed:
            return False
    return True


class InMemoryPassageStore(PassageStore):
    """Brute-force cosine search over passages held in memory.

    Suitable for tests and small corpora loaded from JSON.
    """

    def __init__(self) -> None:
        self._passages: dict[str, SearchResult] = {}
        self._vectors: dict[str, np.ndarray] = {}

    def add(self, passages: list[SearchResult], embeddings: list[list[float]]) -> None:
        if len(passages) != len(embeddings):
            raise ValueError(
                f"embeddings length ({len(embeddings)}) must match "
                f"passages length ({len(passages)})"
            )
        for passage, embedding in zip(passages, embeddings, strict=True):
            if not passage.id:
                raise ValueError("Stored passages must have an id")
            vector = np.asarray(embedding, dtype=float)
            norm = np.linalg.norm(vector)
            self._passages[passage.id] = passage
            self._vectors[passage.id] = vector / norm if norm > 0 else vector

    def _similarities(
        self, embedding: list[float], where: PassageFilter | None
    ) -> list[tuple[str, float]]:
        query = np.asarray(embedding, dtype=float)
        norm = np.linalg.norm(query)
        if norm == 0:
            return []
        query = query / norm

        scored = []
        for passage_id, passage in self._passages.items():
            if not _matches(passage, where):
                continue
            similarity = float(np.dot(query, self._vectors[passage_id]))
            scored.append((passage_id, min(1.0, max(0.0, similarity))))
        return scored

    def _to_results(
        self, scored: list[tuple[str, float]], k: int, threshold: float
    ) -> list[SearchResult]:
        scored = [item for item in scored if item[1] >= threshold]
        scored.sort(key=lambda item: item[1], reverse=True)
        return [
            self._passages[passage_id].model_copy(update={"similarity_score": score})
            for passage_id, score in scored[:k]
        ]

    def search(
        self,
        embedding: list[float],
        k: int = 5,
        threshold: float = 0.0,
        where: PassageFilter | None = None,
        timeout: float | None = None,
    ) -> list[SearchResult]:
        return self._to_results(self._similarities(embedding, where), k, threshold)

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
        terms = query_terms(query_text)
        blended = []
        for passage_id, similarity in self._similarities(embedding, where):
            passage = self._passages[passage_id]
            keywords = keyword_score(terms, passage.title, passage.content)
            blended.append((passage_id, hybrid_score(similarity, keywords, keyword_weight)))
        return self._to_results(blended, k, threshold)

    def get(self, passage_ids: list[str]) -> list[SearchResult]:
        return [self._passages[pid] for pid in passage_ids if pid in self._passages]

    def count(self) -> int:
        return len(self._passages)
