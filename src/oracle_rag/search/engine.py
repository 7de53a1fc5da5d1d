# src/oracle_rag/search/engine.py
"""Vector search engine: semantic, hybrid, multi-vector and adaptive search."""

import asyncio
import time
from dataclasses import dataclass, field
from typing import assert_never

from oracle_rag.embedder import Embedder
from oracle_rag.exceptions import MalformedRequestError, SearchFanOutError, UpstreamError
from oracle_rag.logging_config import get_logger
from oracle_rag.models import (
    AdaptiveMethod,
    HybridMethod,
    MultiVectorMethod,
    SearchMethod,
    SearchResult,
    SemanticMethod,
    SemanticSearchQuery,
)
from oracle_rag.models.taxonomy import framework_phrase, phase_for_stage
from oracle_rag.search.expansion import expand_query
from oracle_rag.search.methods import select_adaptive_method
from oracle_rag.stores import PassageFilter, PassageStore, SearchCache

logger = get_logger(__name__)


@dataclass
class SearchOutcome:
    """Result of one search call.

    Attributes:
        results: Passages sorted by similarity, descending.
        method_used: The concrete method that ran (adaptive is resolved).
        from_cache: Whether the results came from the search cache.
        branch_errors: (branch_label, exception) for failed fan-out branches.
    """

    results: list[SearchResult]
    method_used: str
    from_cache: bool = False
    branch_errors: list[tuple[str, BaseException]] = field(default_factory=list)


def merge_results(result_sets: list[list[SearchResult]]) -> list[SearchResult]:
    """Merge result lists, deduplicating by id (or title + content prefix).

    When a passage appears more than once the higher similarity wins.
    """
    merged: dict[str, SearchResult] = {}
    for results in result_sets:
        for result in results:
            key = result.dedup_key
            existing = merged.get(key)
            if existing is None or result.similarity_score > existing.similarity_score:
                merged[key] = result
    return list(merged.values())


def passage_filter(query: SemanticSearchQuery) -> PassageFilter | None:
    """Store filter for a query's lifecycle stage and hard restrictions.

    The first lifecycle stage admits its phase plus phase-agnostic passages;
    ``required_phases`` narrows that set further. ``complexity_levels`` stays
    a ranking preference and is not filtered on.
    """
    filters = query.business_filters
    where: PassageFilter = {}
    phases: set[str] | None = None
    if filters.lifecycle_stages:
        phases = {phase_for_stage(filters.lifecycle_stages[0]), "all"}
    if filters.required_phases:
        required = {*filters.required_phases, "all"}
        phases = required if phases is None else phases & required
    if phases is not None:
        where["business_phase"] = sorted(phases)
    if filters.required_complexity:
        where["complexity_level"] = sorted(set(filters.required_complexity))
    if filters.required_categories:
        where["category"] = sorted(set(filters.required_categories))
    return where or None


class VectorSearchEngine:
    """Issues embedding-similarity queries against a passage store.

    Errors from the embedder or the store are wrapped in UpstreamError and
    propagated; nothing is retried here. Fan-out searches isolate failing
    branches and only fail when every branch fails.

    Args:
        store: The passage store to query.
        embedder: Embeds query text.
        cache: Optional search cache. Used only when a request sets
            ``cache_duration_minutes > 0``.
        max_concurrent: Maximum concurrent upstream calls during fan-out.
    """

    def __init__(
        self,
        store: PassageStore,
        embedder: Embedder,
        cache: SearchCache | None = None,
        max_concurrent: int = 8,
    ) -> None:
        self.store = store
        self.embedder = embedder
        self.cache = cache
        self.max_concurrent = max_concurrent

    def search(self, query: SemanticSearchQuery) -> list[SearchResult]:
        """Synchronous search. Must not be called from a running event loop."""
        return asyncio.run(self.asearch(query)).results

    async def asearch(self, query: SemanticSearchQuery) -> SearchOutcome:
        """Run a search and enforce the result contract.

        At most ``max_results`` passages are returned, each scoring at least
        ``similarity_threshold``, sorted by similarity descending.
        """
        if not query.query_text or not query.query_text.strip():
            raise MalformedRequestError("Search query text is empty", field="query_text")

        params = query.performance_parameters
        requested = query.search_strategy.primary_method
        cache_key = None
        if self.cache is not None and params.cache_duration_minutes > 0:
            cache_key = SearchCache.make_key(
                query.query_text,
                query.business_filters.model_dump(mode="json"),
                requested.kind,
            )
            cached = self.cache.get(cache_key, params.cache_duration_minutes)
            if cached is not None:
                logger.debug("search_cache_hit", method=requested.kind, count=len(cached))
                return SearchOutcome(
                    results=self._enforce_contract(cached, query),
                    method_used=requested.kind,
                    from_cache=True,
                )

        start = time.perf_counter()
        outcome = await self._run_method(requested, query)

        # Fallbacks only run when the primary method found nothing
        for fallback in query.search_strategy.fallback_methods:
            if outcome.results:
                break
            logger.info("search_fallback", method=fallback.kind, after=outcome.method_used)
            fallback_outcome = await self._run_method(fallback, query)
            fallback_outcome.branch_errors = outcome.branch_errors + fallback_outcome.branch_errors
            outcome = fallback_outcome

        outcome.results = self._enforce_contract(outcome.results, query)
        logger.info(
            "search_completed",
            method=outcome.method_used,
            count=len(outcome.results),
            failed_branches=len(outcome.branch_errors),
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )

        if cache_key is not None and self.cache is not None:
            self.cache.put(cache_key, outcome.results)
        return outcome

    async def _run_method(self, method: SearchMethod, query: SemanticSearchQuery) -> SearchOutcome:
        match method:
            case SemanticMethod():
                expand = query.performance_parameters.query_expansion
                results = await self._semantic(query, expand=expand)
                return SearchOutcome(results=results, method_used=method.kind)
            case HybridMethod():
                results = await self._hybrid(query, method.keyword_weight)
                return SearchOutcome(results=results, method_used=method.kind)
            case MultiVectorMethod():
                return await self._multi_vector(query)
            case AdaptiveMethod():
                selected = select_adaptive_method(query.query_text)
                logger.debug("adaptive_method_selected", method=selected.kind)
                return await self._run_method(selected, query)
            case _:
                assert_never(method)

    @staticmethod
    def _enforce_contract(
        results: list[SearchResult], query: SemanticSearchQuery
    ) -> list[SearchResult]:
        params = query.performance_parameters
        kept = [r for r in results if r.similarity_score >= params.similarity_threshold]
        kept.sort(key=lambda r: r.similarity_score, reverse=True)
        return kept[: params.max_results]

    async def _embed(self, text: str) -> list[float]:
        try:
            return await asyncio.to_thread(self.embedder.embed_text, text)
        except UpstreamError:
            raise
        except Exception as e:
            raise UpstreamError(f"Embedding failed: {e}", stage="embedding") from e

    async def _semantic(
        self, query: SemanticSearchQuery, expand: bool, text: str | None = None
    ) -> list[SearchResult]:
        text = text or query.query_text
        if expand:
            text = expand_query(text)
        embedding = await self._embed(text)
        params = query.performance_parameters
        try:
            return await asyncio.to_thread(
                self.store.search,
                embedding,
                params.max_results,
                params.similarity_threshold,
                passage_filter(query),
                params.timeout_seconds,
            )
        except Exception as e:
            raise UpstreamError(f"Vector store search failed: {e}", stage="vector_store") from e

    async def _hybrid(
        self, query: SemanticSearchQuery, keyword_weight: float
    ) -> list[SearchResult]:
        params = query.performance_parameters
        text = expand_query(query.query_text) if params.query_expansion else query.query_text
        embedding = await self._embed(text)
        try:
            return await asyncio.to_thread(
                self.store.hybrid_search,
                text,
                embedding,
                params.max_results,
                params.similarity_threshold,
                keyword_weight,
                passage_filter(query),
                params.timeout_seconds,
            )
        except Exception as e:
            raise UpstreamError(
                f"Vector store hybrid search failed: {e}", stage="vector_store"
            ) from e

    async def _multi_vector(self, query: SemanticSearchQuery) -> SearchOutcome:
        """Fan out the base query plus one sub-query per framework and scenario."""
        filters = query.business_filters
        branches: list[tuple[str, str | None, bool]] = [
            ("base", None, query.performance_parameters.query_expansion)
        ]
        for framework in filters.framework_focus:
            text = f"{framework_phrase(framework)} {query.query_text}"
            branches.append((f"framework:{framework}", text, False))
        for scenario in filters.business_scenarios:
            branches.append(
                (f"scenario:{scenario}", f"{scenario.replace('_', ' ')} {query.query_text}", False)
            )

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def run_branch(text: str | None, expand: bool) -> list[SearchResult]:
            async with semaphore:
                return await self._semantic(query, expand=expand, text=text)

        outcomes = await asyncio.gather(
            *[run_branch(text, expand) for _, text, expand in branches],
            return_exceptions=True,
        )

        result_sets: list[list[SearchResult]] = []
        errors: list[tuple[str, BaseException]] = []
        for (label, _, _), outcome in zip(branches, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                logger.warning("search_branch_failed", branch=label, error=str(outcome))
                errors.append((label, outcome))
                continue
            result_sets.append(outcome)

        merged = merge_results(result_sets)
        if errors and len(errors) == len(branches):
            raise SearchFanOutError(
                f"All {len(branches)} search branches failed",
                partial_results=merged,
                errors=errors,
            )
        return SearchOutcome(results=merged, method_used="multi_vector", branch_errors=errors)
