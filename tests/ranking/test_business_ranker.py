# tests/ranking/test_business_ranker.py
"""Tests for business-context ranking of passages."""

from datetime import UTC, datetime

import pytest

from oracle_rag.models import (
    BusinessFilters,
    PerformanceParameters,
    SearchResult,
    SemanticSearchQuery,
)
from oracle_rag.models.search import ResultEnhancement
from oracle_rag.ranking import (
    BusinessContextRanker,
    RuleBasedScoreProvider,
    diversify,
    optimize_snippet,
)
from oracle_rag.ranking.ranker import SNIPPET_LENGTH

GSO_QUERY = "How do I implement Grand Slam Offers for a SaaS startup?"


def _query(
    text: str = GSO_QUERY,
    stages=("startup",),
    frameworks=("grand_slam_offers",),
    max_results: int = 5,
    diversification: bool = False,
) -> SemanticSearchQuery:
    return SemanticSearchQuery(
        query_text=text,
        business_filters=BusinessFilters(
            lifecycle_stages=list(stages), framework_focus=list(frameworks)
        ),
        performance_parameters=PerformanceParameters(
            max_results=max_results,
            similarity_threshold=0.0,
            result_diversification=diversification,
        ),
    )


def _passage(pid: str, score: float, tags=("grand_slam_offers",), **kwargs) -> SearchResult:
    return SearchResult(
        id=pid,
        title=pid,
        content=f"Content for {pid}",
        similarity_score=score,
        framework_tags=list(tags),
        **kwargs,
    )


@pytest.fixture
def ranker():
    fixed_now = datetime(2025, 1, 1, tzinfo=UTC)
    return BusinessContextRanker(RuleBasedScoreProvider(clock=lambda: fixed_now))


class TestComponentScores:
    def test_grand_slam_offer_startup_passage(self, ranker):
        passage = _passage(
            "gso",
            0.9,
            tags=("framework:grand_slam_offers",),
            business_phase="startup",
            complexity_level="beginner",
        )
        scored = ranker.score(passage, _query())
        assert scored.business_context_score >= 0.5
        assert scored.implementation_score >= 0.7
        assert scored.semantic_score == 0.9

    def test_phase_mismatch_scores_lower(self, ranker):
        matching = ranker.score(_passage("a", 0.8, business_phase="startup"), _query())
        other = ranker.score(_passage("b", 0.8, business_phase="optimization"), _query())
        assert matching.business_context_score > other.business_context_score

    def test_phase_agnostic_passage_matches_any_stage(self, ranker):
        scored = ranker.score(_passage("a", 0.8, tags=(), business_phase="all"), _query())
        assert scored.business_context_score == pytest.approx(0.3)

    def test_implementation_neutral_without_signal(self, ranker):
        scored = ranker.score(
            _passage("a", 0.8, complexity_level="beginner"),
            _query("Why do grand slam offers work?"),
        )
        assert scored.implementation_score == 0.5

    def test_framework_alignment_from_query_text(self, ranker):
        scored = ranker.score(_passage("a", 0.8), _query())
        assert scored.framework_alignment_score == 0.25

    def test_enhanced_result_keeps_raw_fields(self, ranker):
        passage = _passage("a", 0.8, source_type="book", complexity_level="advanced")
        scored = ranker.score(passage, _query())
        assert scored.id == "a"
        assert scored.source_type == "book"
        assert scored.implementation_complexity == "advanced"
        assert scored.key_concepts == ["grand_slam_offers"]
        assert scored.result_explanation.startswith("Relevance: ")
        assert 0.0 <= scored.final_relevance_score <= 1.0


class TestRank:
    def test_output_is_non_increasing(self, ranker):
        raw = [
            _passage("a", 0.5, business_phase="scaling"),
            _passage("b", 0.95, business_phase="startup", complexity_level="beginner"),
            _passage("c", 0.7, tags=()),
            _passage("d", 0.6, business_phase="all"),
        ]
        ranked = ranker.rank(raw, _query())
        scores = [r.final_relevance_score for r in ranked]
        assert scores == sorted(scores, reverse=True)
        assert ranked[0].id == "b"

    def test_respects_max_results(self, ranker):
        raw = [_passage(f"p{i}", 0.5 + i / 20) for i in range(8)]
        assert len(ranker.rank(raw, _query(max_results=3))) == 3

    def test_duplicates_removed(self, ranker):
        raw = [_passage("a", 0.6), _passage("a", 0.9), _passage("b", 0.7)]
        ranked = ranker.rank(raw, _query())
        assert [r.id for r in ranked].count("a") == 1
        assert next(r for r in ranked if r.id == "a").semantic_score == 0.9

    def test_empty_input(self, ranker):
        assert ranker.rank([], _query()) == []

    def test_ranking_is_deterministic(self, ranker):
        raw = [_passage(f"p{i}", 0.3 + i / 10) for i in range(5)]
        first = ranker.rank(raw, _query())
        second = ranker.rank(raw, _query())
        assert [r.id for r in first] == [r.id for r in second]
        assert [r.final_relevance_score for r in first] == [
            r.final_relevance_score for r in second
        ]

    def test_diversification_drops_repeated_concepts(self, ranker):
        raw = [_passage(f"gso{i}", 0.9 - i / 100) for i in range(4)]
        raw.append(_passage("core", 0.5, tags=("core_four",)))
        ranked = ranker.rank(raw, _query(diversification=True))
        ids = [r.id for r in ranked]
        assert ids[:3] == ["gso0", "gso1", "gso2"]
        assert "gso3" not in ids
        assert "core" in ids


class TestDiversify:
    def test_first_three_always_kept(self, ranker):
        raw = [_passage(f"p{i}", 0.9 - i / 10) for i in range(3)]
        enhanced = [ranker.score(r, _query()) for r in raw]
        assert diversify(enhanced, max_results=5) == enhanced

    def test_stops_at_max_results(self, ranker):
        raw = [_passage(f"p{i}", 0.9, tags=(f"tag{i}",)) for i in range(6)]
        enhanced = [ranker.score(r, _query()) for r in raw]
        assert len(diversify(enhanced, max_results=4)) == 4


class TestResultEnhancement:
    def _enhanced_query(self, **flags) -> SemanticSearchQuery:
        return _query().model_copy(update={"result_enhancement": ResultEnhancement(**flags)})

    def test_flags_off_leave_passages_untouched(self, ranker):
        ranked = ranker.rank([_passage("a", 0.9, content_preview="Stored preview")], _query())
        assert ranked[0].content_preview == "Stored preview"
        assert "citation" not in ranked[0].metadata

    def test_citations_added_to_metadata(self, ranker):
        passage = _passage("a", 0.9, source_type="book", metadata={"stance": "pro"})
        ranked = ranker.rank([passage], self._enhanced_query(include_citations=True))
        assert ranked[0].metadata == {"stance": "pro", "citation": "a, book"}

    def test_snippet_centred_on_query_term(self, ranker):
        content = "Filler text about nothing. " * 20 + "The grand slam offer stacks value."
        passage = _passage("a", 0.9).model_copy(update={"content": content})
        ranked = ranker.rank([passage], self._enhanced_query(snippet_optimization=True))
        preview = ranked[0].content_preview
        assert preview.startswith("...")
        assert "grand slam offer" in preview
        assert len(preview) <= SNIPPET_LENGTH + 6


class TestOptimizeSnippet:
    def test_short_content_returned_whole(self):
        assert optimize_snippet("Short passage.", "grand slam") == "Short passage."

    def test_no_matching_term_uses_opening(self):
        content = "x" * 300
        assert optimize_snippet(content, "grand slam offer") == "x" * SNIPPET_LENGTH + "..."

    def test_window_clamped_to_passage_end(self):
        content = "a" * 300 + " offer"
        snippet = optimize_snippet(content, "offer")
        assert snippet.startswith("...")
        assert snippet.endswith("offer")
