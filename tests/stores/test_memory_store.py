# tests/stores/test_memory_store.py
"""Tests for the in-memory passage store."""

import pytest

from oracle_rag.models import SearchResult
from oracle_rag.stores import InMemoryPassageStore


def _passage(pid: str, **kwargs) -> SearchResult:
    return SearchResult(id=pid, content=f"content {pid}", similarity_score=0.0, **kwargs)


class TestInMemoryPassageStoreAdd:
    def test_add_and_count(self):
        store = InMemoryPassageStore()
        store.add([_passage("a"), _passage("b")], [[1.0, 0.0], [0.0, 1.0]])
        assert store.count() == 2

    def test_add_length_mismatch(self):
        store = InMemoryPassageStore()
        with pytest.raises(ValueError, match="must match"):
            store.add([_passage("a")], [[1.0, 0.0], [0.0, 1.0]])

    def test_add_requires_id(self):
        store = InMemoryPassageStore()
        passage = SearchResult(content="no id", similarity_score=0.0)
        with pytest.raises(ValueError, match="id"):
            store.add([passage], [[1.0, 0.0]])

    def test_get_skips_missing(self):
        store = InMemoryPassageStore()
        store.add([_passage("a")], [[1.0, 0.0]])
        results = store.get(["a", "missing"])
        assert [r.id for r in results] == ["a"]


class TestInMemoryPassageStoreSearch:
    @pytest.fixture
    def store(self):
        store = InMemoryPassageStore()
        store.add(
            [
                _passage("x", business_phase="startup"),
                _passage("y", business_phase="scaling"),
                _passage("z", business_phase="all", metadata={"region": "eu"}),
            ],
            [[1.0, 0.0, 0.0], [0.7, 0.7, 0.0], [0.0, 0.0, 1.0]],
        )
        return store

    def test_results_sorted_by_similarity(self, store):
        results = store.search([1.0, 0.0, 0.0], k=3)
        assert [r.id for r in results] == ["x", "y", "z"]
        scores = [r.similarity_score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_scores_within_unit_interval(self, store):
        results = store.search([-1.0, 0.0, 0.0], k=3)
        assert all(0.0 <= r.similarity_score <= 1.0 for r in results)

    def test_respects_k_and_threshold(self, store):
        assert len(store.search([1.0, 0.0, 0.0], k=1)) == 1
        results = store.search([1.0, 0.0, 0.0], k=3, threshold=0.5)
        assert {r.id for r in results} == {"x", "y"}

    def test_where_filters_on_attribute(self, store):
        results = store.search([1.0, 0.0, 0.0], k=3, where={"business_phase": ["scaling"]})
        assert [r.id for r in results] == ["y"]

    def test_where_filters_on_metadata(self, store):
        results = store.search([1.0, 0.0, 0.0], k=3, where={"region": ["eu"]})
        assert [r.id for r in results] == ["z"]

    def test_untagged_passage_passes_tag_filters(self, store):
        store.add([_passage("u")], [[0.9, 0.1, 0.0]])
        where = {"business_phase": ["scaling"], "complexity_level": ["beginner"]}
        results = store.search([1.0, 0.0, 0.0], k=3, where=where)
        assert [r.id for r in results] == ["u", "y"]

    def test_untagged_passage_fails_metadata_filter(self, store):
        store.add([_passage("u")], [[0.9, 0.1, 0.0]])
        results = store.search([1.0, 0.0, 0.0], k=4, where={"region": ["eu"]})
        assert [r.id for r in results] == ["z"]

    def test_zero_query_vector_returns_nothing(self, store):
        assert store.search([0.0, 0.0, 0.0]) == []

    def test_search_does_not_mutate_stored_passages(self, store):
        store.search([1.0, 0.0, 0.0], k=3)
        assert store.get(["x"])[0].similarity_score == 0.0

    def test_hybrid_search_rewards_keyword_overlap(self):
        store = InMemoryPassageStore()
        store.add(
            [
                SearchResult(id="plain", content="general advice", similarity_score=0.0),
                SearchResult(id="pricing", content="pricing advice", similarity_score=0.0),
            ],
            [[1.0, 0.0], [1.0, 0.0]],
        )
        results = store.hybrid_search("pricing", [1.0, 0.0], k=2, keyword_weight=0.5)
        assert results[0].id == "pricing"
        assert results[0].similarity_score > results[1].similarity_score
