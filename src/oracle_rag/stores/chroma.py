# src/oracle_rag/stores/chroma.py
"""ChromaDB passage store implementation."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import chromadb

from oracle_rag.logging_config import get_logger
from oracle_rag.models import SearchResult
from oracle_rag.stores.base import (
    TAG_FIELDS,
    PassageFilter,
    PassageStore,
    hybrid_score,
    keyword_score,
    query_terms,
)

logger = get_logger(__name__)

# Optional string fields flattened into Chroma metadata. Chroma rejects None
# values, so absent fields are left out except for TAG_FIELDS.
_OPTIONAL_FIELDS = (
    "category",
    "business_phase",
    "complexity_level",
    "source_type",
    "source_url",
    "authority_level",
    "verification_status",
)

# Untagged tag fields are stored as "" so filters can still match them
_UNTAGGED = ""

# Hybrid search reranks a wider vector candidate pool by keyword overlap
_HYBRID_POOL_FACTOR = 3


def _to_metadata(passage: SearchResult) -> dict[str, Any]:
    meta: dict[str, Any] = {
        "title": passage.title,
        "content_preview": passage.content_preview,
        "framework_tags": ",".join(passage.framework_tags),
    }
    for field in _OPTIONAL_FIELDS:
        value = getattr(passage, field)
        if value is not None:
            meta[field] = value
        elif field in TAG_FIELDS:
            meta[field] = _UNTAGGED
    if passage.published_at is not None:
        meta["published_at"] = passage.published_at.isoformat()
    if passage.metadata:
        meta["extra"] = json.dumps(passage.metadata, sort_keys=True, default=str)
    return meta


def _from_metadata(
    passage_id: str, document: str, meta: dict[str, Any], score: float
) -> SearchResult:
    tags = str(meta.get("framework_tags") or "")
    published = meta.get("published_at")
    extra = meta.get("extra")
    return SearchResult(
        id=passage_id,
        title=str(meta.get("title") or ""),
        content=document or "",
        content_preview=str(meta.get("content_preview") or ""),
        similarity_score=score,
        framework_tags=[tag for tag in tags.split(",") if tag],
        published_at=datetime.fromisoformat(str(published)) if published else None,
        metadata=json.loads(str(extra)) if extra else {},
        **{
            field: meta[field]
            for field in _OPTIONAL_FIELDS
            if meta.get(field) not in (None, _UNTAGGED)
        },
    )


def _to_where(where: PassageFilter | None) -> dict[str, Any] | None:
    if not where:
        return None
    clauses = [
        {field: {"$in": [*allowed, _UNTAGGED] if field in TAG_FIELDS else list(allowed)}}
        for field, allowed in where.items()
    ]
    if len(clauses) == 1:
        return clauses[0]
    return {"$and": clauses}


class ChromaPassageStore(PassageStore):
    """ChromaDB-based passage store using cosine distance."""

    def __init__(self, persist_dir: str, collection_name: str = "oracle") -> None:
        Path(persist_dir).mkdir(parents=True, exist_ok=True)
        self._client = chromadb.PersistentClient(path=persist_dir)
        self._collection = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
        )

    def close(self) -> None:
        """Close the store and release resources.

        ChromaDB has no official close method; ``_system.stop()`` releases
        file handles so long test runs don't hit 'too many open files'.
        """
        self._collection = None  # type: ignore[assignment]
        try:
            if self._client is not None and hasattr(self._client, "_system"):
                self._client._system.stop()
        except Exception as exc:
            logger.debug("chroma_close_failed", error=str(exc))
        self._client = None  # type: ignore[assignment]

    def add(self, passages: list[SearchResult], embeddings: list[list[float]]) -> None:
        if not passages:
            return
        if len(passages) != len(embeddings):
            raise ValueError(
                f"embeddings length ({len(embeddings)}) must match "
                f"passages length ({len(passages)})"
            )
        if any(not p.id for p in passages):
            raise ValueError("Stored passages must have an id")

        self._collection.add(
            ids=[p.id for p in passages],  # type: ignore[misc]
            embeddings=embeddings,  # type: ignore[arg-type]
            documents=[p.content for p in passages],
            metadatas=[_to_metadata(p) for p in passages],
        )

    def _query(
        self, embedding: list[float], n_results: int, where: PassageFilter | None
    ) -> list[SearchResult]:
        total = self._collection.count()
        if total == 0:
            return []

        results = self._collection.query(
            query_embeddings=[embedding],  # type: ignore[arg-type]
            n_results=min(n_results, total),
            where=_to_where(where),  # type: ignore[arg-type]
            include=["documents", "metadatas", "distances"],
        )

        ids = results["ids"][0]
        documents = results["documents"][0]  # type: ignore[index]
        metadatas = results["metadatas"][0]  # type: ignore[index]
        distances = results["distances"][0]  # type: ignore[index]

        # Cosine distance -> similarity
        return [
            _from_metadata(pid, doc, dict(meta), 1.0 - dist)
            for pid, doc, meta, dist in zip(ids, documents, metadatas, distances, strict=True)
        ]

    def search(
        self,
        embedding: list[float],
        k: int = 5,
        threshold: float = 0.0,
        where: PassageFilter | None = None,
        timeout: float | None = None,
    ) -> list[SearchResult]:
        results = self._query(embedding, k, where)
        return [r for r in results if r.similarity_score >= threshold]

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
        candidates = self._query(embedding, k * _HYBRID_POOL_FACTOR, where)

        rescored = []
        for result in candidates:
            keywords = keyword_score(terms, result.title, result.content)
            score = hybrid_score(result.similarity_score, keywords, keyword_weight)
            if score >= threshold:
                rescored.append(result.model_copy(update={"similarity_score": score}))

        rescored.sort(key=lambda r: r.similarity_score, reverse=True)
        return rescored[:k]

    def get(self, passage_ids: list[str]) -> list[SearchResult]:
        if not passage_ids:
            return []
        results = self._collection.get(ids=passage_ids, include=["documents", "metadatas"])
        documents = results["documents"] or []
        metadatas = results["metadatas"] or []
        return [
            _from_metadata(pid, doc, dict(meta), 1.0)
            for pid, doc, meta in zip(results["ids"], documents, metadatas, strict=True)
        ]

    def count(self) -> int:
        return self._collection.count()
