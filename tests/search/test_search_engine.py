# tests/search/test_search_engine.py
"""Tests for the vector search engine."""

import pytest

from oracle_rag.embedder import Embedder
from oracle_rag.exceptions import MalformedRequestError, SearchFanOutError, UpstreamError
from oracle_rag.models import (
    BusinessFilters,
    PerformanceParameters,
    SearchResult,
    SearchStrategy,
    SemanticSearchQuery,
)
from oracle_rag.search import VectorSearchEngine, merge_results
from oracle_rag.search.engine import passage_filter
from oracle_rag.stores import InMemoryPassageStore, SearchCache


def _query(text: str = "grand slam offer", method="semantic", **params) -> SemanticSearchQuery:
    fields = {"similarity_threshold": 0.0, "max_results": 5}
    fields.update(params)
    return SemanticSearchQuery(
        query_text=text,
        search_strategy=SearchStrategy(primary_method=method),
        performance_parameters=PerformanceParameters(**fields),
    )


class FailingEmbedder(Embedder):
    def embed_text(self, text: str) -> list[float]:
        raise RuntimeError("rate limited")

    def embed_texts(self, texts: list[str]) -> list[list[float]]:
        raise RuntimeError("rate limited")


class FailingStore(InMemoryPassageStore):
    def search(self, *args, **kwargs):
        raise ConnectionError("store unavailable")


class SelectiveFailingStore(InMemoryPassageStore):
    """Fails every search whose embedding differs from the base query's."""

    def __init__(self, allowed: list[float]) -> None:
        super().__init__()
        self.allowed = allowed

    def search(self, embedding, *args, **kwargs):
        if embedding != self.allowed:
            raise ConnectionError("branch unavailable")
        return super().search(embedding, *args, **kwargs)


class TestSearchContract:
    def test_results_sorted_and_bounded(self, memory_store, keyword_embedder):
        engine = VectorSearchEngine(memory_store, keyword_embedder)
        results = engine.search(_query(max_results=3))
        assert len(results) <= 3
        scores = [r.similarity_score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_threshold_is_enforced(self, memory_store, keyword_embedder):
        engine = VectorSearchEngine(memory_store, keyword_embedder)
        results = engine.search(_query(similarity_threshold=0.3))
        assert all(r.similarity_score >= 0.3 for r in results)

    def test_most_relevant_passage_first(self, memory_store, keyword_embedder):
        engine = VectorSearchEngine(memory_store, keyword_embedder)
        results = engine.search(_query("core four outreach channels leads"))
        assert results[0].id == "core4-1"

    def test_empty_query_rejected(self, memory_store, keyword_embedder):
        engine = VectorSearchEngine(memory_store, keyword_embedder)
        with pytest.raises(MalformedRequestError):
            engine.search(_query("   "))

    def test_phase_filter_limits_results(self, memory_store, keyword_embedder):
        engine = VectorSearchEngine(memory_store, keyword_embedder)
        query = _query().model_copy(
            update={"business_filters": BusinessFilters(lifecycle_stages=["startup"])}
        )
        results = engine.search(query)
        assert results
        assert {r.business_phase for r in results} <= {"startup", "all"}

    def test_hybrid_method(self, memory_store, keyword_embedder):
        engine = VectorSearchEngine(memory_store, keyword_embedder)
        results = engine.search(_query("ltv cac ratio", method="hybrid"))
        assert results[0].id == "ltv-1"


class TestUpstreamFailures:
    def test_embedding_failure(self, memory_store):
        engine = VectorSearchEngine(memory_store, FailingEmbedder())
        with pytest.raises(UpstreamError) as exc_info:
            engine.search(_query())
        assert exc_info.value.stage == "embedding"

    def test_store_failure(self, keyword_embedder):
        engine = VectorSearchEngine(FailingStore(), keyword_embedder)
        with pytest.raises(UpstreamError) as exc_info:
            engine.search(_query())
        assert exc_info.value.stage == "vector_store"

    def test_multi_vector_all_branches_fail(self, keyword_embedder):
        engine = VectorSearchEngine(FailingStore(), keyword_embedder)
        query = _query(method="multi_vector").model_copy(
            update={"business_filters": BusinessFilters(framework_focus=["grand_slam_offers"])}
        )
        with pytest.raises(SearchFanOutError) as exc_info:
            engine.search(query)
        assert len(exc_info.value.errors) == 2

    @pytest.mark.asyncio
    async def test_multi_vector_partial_failure_keeps_results(
        self, sample_passages, keyword_embedder
    ):
        text = "grand slam offer"
        store = SelectiveFailingStore(allowed=keyword_embedder.embed_text(text))
        store.add(
            sample_passages,
            keyword_embedder.embed_texts([f"{p.title} {p.content}" for p in sample_passages]),
        )
        engine = VectorSearchEngine(store, keyword_embedder)
        query = _query(text, method="multi_vector").model_copy(
            update={"business_filters": BusinessFilters(framework_focus=["core_four"])}
        )
        outcome = await engine.asearch(query)
        assert outcome.results
        assert [label for label, _ in outcome.branch_errors] == ["framework:core_four"]


class TestFallbacks:
    @pytest.mark.asyncio
    async def test_fallback_runs_when_primary_empty(self, keyword_embedder):
        engine = VectorSearchEngine(InMemoryPassageStore(), keyword_embedder)
        strategy = SearchStrategy(primary_method="semantic", fallback_methods=["hybrid"])
        outcome = await engine.asearch(_query().model_copy(update={"search_strategy": strategy}))
        assert outcome.results == []
        assert outcome.method_used == "hybrid"

    @pytest.mark.asyncio
    async def test_fallback_skipped_when_primary_has_results(
        self, memory_store, keyword_embedder
    ):
        engine = VectorSearchEngine(memory_store, keyword_embedder)
        strategy = SearchStrategy(primary_method="semantic", fallback_methods=["hybrid"])
        outcome = await engine.asearch(_query().model_copy(update={"search_strategy": strategy}))
        assert outcome.method_used == "semantic"

    @pytest.mark.asyncio
    async def test_adaptive_resolves_to_concrete_method(self, memory_store, keyword_embedder):
        engine = VectorSearchEngine(memory_store, keyword_embedder)
        outcome = await engine.asearch(_query("what is a lead magnet", method="adaptive"))
        assert outcome.method_used == "semantic"


class TestCaching:
    @pytest.mark.asyncio
    async def test_second_identical_search_hits_cache(self, memory_store, keyword_embedder):
        cache = SearchCache()
        engine = VectorSearchEngine(memory_store, keyword_embedder, cache=cache)
        query = _query(cache_duration_minutes=5)

        first = await engine.asearch(query)
        second = await engine.asearch(query)

        assert first.from_cache is False
        assert second.from_cache is True
        assert [r.id for r in second.results] == [r.id for r in first.results]

    @pytest.mark.asyncio
    async def test_cache_hit_respects_tighter_limits(self, memory_store, keyword_embedder):
        engine = VectorSearchEngine(memory_store, keyword_embedder, cache=SearchCache())
        broad = await engine.asearch(
            _query(max_results=8, similarity_threshold=0.0, cache_duration_minutes=10)
        )
        assert len(broad.results) > 2

        threshold = broad.results[1].similarity_score
        narrow = await engine.asearch(
            _query(max_results=2, similarity_threshold=threshold, cache_duration_minutes=10)
        )

        assert narrow.from_cache is True
        assert 0 < len(narrow.results) <= 2
        assert all(r.similarity_score >= threshold for r in narrow.results)

    @pytest.mark.asyncio
    async def test_zero_duration_bypasses_cache(self, memory_store, keyword_embedder):
        cache = SearchCache()
        engine = VectorSearchEngine(memory_store, keyword_embedder, cache=cache)
        await engine.asearch(_query(cache_duration_minutes=0))
        outcome = await engine.asearch(_query(cache_duration_minutes=0))
        assert outcome.from_cache is False
        assert cache.backend.keys() == []


class TestHelpers:
    def test_merge_keeps_highest_score(self):
        low = SearchResult(id="a", content="x", similarity_score=0.4)
        high = SearchResult(id="a", content="x", similarity_score=0.9)
        other = SearchResult(id="b", content="y", similarity_score=0.5)
        merged = merge_results([[low, other], [high]])
        assert {r.id: r.similarity_score for r in merged} == {"a": 0.9, "b": 0.5}

    def test_merge_dedups_untitled_by_content(self):
        a = SearchResult(title="T", content="same body", similarity_score=0.2)
        b = SearchResult(title="T", content="same body", similarity_score=0.3)
        assert len(merge_results([[a], [b]])) == 1

    def test_passage_filter_maps_stage_to_phase(self):
        query = _query().model_copy(
            update={"business_filters": BusinessFilters(lifecycle_stages=["growth"])}
        )
        assert passage_filter(query) == {"business_phase": ["all", "scaling"]}

    def test_passage_filter_absent_without_restrictions(self):
        query = _query().model_copy(
            update={"business_filters": BusinessFilters(complexity_levels=["beginner"])}
        )
        assert passage_filter(_query()) is None
        assert passage_filter(query) is None

    def test_required_phases_narrow_stage_phase(self):
        filters = BusinessFilters(lifecycle_stages=["growth"], required_phases=["startup"])
        query = _query().model_copy(update={"business_filters": filters})
        assert passage_filter(query) == {"business_phase": ["all"]}

    def test_required_restrictions_become_clauses(self):
        filters = BusinessFilters(
            required_phases=["scaling", "startup"],
            required_complexity=["advanced", "intermediate"],
            required_categories=["case_study"],
        )
        query = _query().model_copy(update={"business_filters": filters})
        assert passage_filter(query) == {
            "business_phase": ["all", "scaling", "startup"],
            "complexity_level": ["advanced", "intermediate"],
            "category": ["case_study"],
        }
