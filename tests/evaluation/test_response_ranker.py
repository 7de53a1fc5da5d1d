# tests/evaluation/test_response_ranker.py
"""Tests for candidate response ranking."""

import pytest

from oracle_rag.assembly import ContextAssemblyEngine, build_context
from oracle_rag.evaluation import NO_QUALIFYING_CANDIDATES, ComponentScorer, ResponseRanker
from oracle_rag.models import RankingRequest
from oracle_rag.models.ranking import RankingCriteria, UserPreferences, WeightingScheme

CONTEXT_WEIGHTS = WeightingScheme(
    semantic_relevance=0.2,
    business_context_alignment=0.4,
    framework_application=0.0,
    implementation_practicality=0.0,
    source_authority=0.4,
    content_freshness=0.0,
    user_intent_match=0.0,
    complexity_appropriateness=0.0,
)


@pytest.fixture
def assemble(make_classification, make_candidate):
    """Assemble a candidate from its own sources."""
    engine = ContextAssemblyEngine()

    def _assemble(sources, candidate_id, classification=None):
        classification = classification or make_classification()
        response = engine.assemble(build_context(classification, sources))
        return make_candidate(response, sources, candidate_id=candidate_id)

    return _assemble


@pytest.fixture
def broad_candidate(assemble, make_enhanced):
    """Five beginner passages that fit the asker's stage and level."""
    return assemble([make_enhanced(f"broad-{i}") for i in range(5)], "broad")


@pytest.fixture
def narrow_candidate(assemble, make_enhanced):
    """One advanced passage with a slightly better semantic match."""
    source = make_enhanced(
        "narrow-0",
        similarity_score=0.95,
        semantic_score=0.95,
        complexity_level="advanced",
        implementation_complexity="advanced",
    )
    return assemble([source], "narrow")


@pytest.fixture
def empty_candidate(assemble):
    return assemble([], "empty")


def _request(classification, *candidates, weights=CONTEXT_WEIGHTS, **criteria):
    return RankingRequest(
        query_context=classification,
        candidate_responses=candidates,
        ranking_criteria=RankingCriteria(weighting_scheme=weights, **criteria),
    )


class TestComponentScorer:
    def test_business_context_alignment(
        self, make_classification, broad_candidate, narrow_candidate
    ):
        scorer = ComponentScorer()
        request = _request(make_classification(), broad_candidate, narrow_candidate)
        # framework 1.0, no scenarios (neutral), exact level match, stage match
        assert scorer.business_context_alignment(broad_candidate, request) == pytest.approx(
            0.35 + 0.25 * 0.7 + 0.25 + 0.15
        )
        assert scorer.business_context_alignment(narrow_candidate, request) == pytest.approx(
            0.35 + 0.25 * 0.7 + 0.15
        )

    def test_source_authority_rewards_breadth(
        self, make_classification, broad_candidate, narrow_candidate
    ):
        scorer = ComponentScorer()
        request = _request(make_classification(), broad_candidate)
        assert scorer.source_authority(broad_candidate, request) == pytest.approx(0.93)
        assert scorer.source_authority(narrow_candidate, request) == pytest.approx(0.73)

    def test_complexity_appropriateness(self, make_classification, narrow_candidate):
        scorer = ComponentScorer()
        request = _request(make_classification(), narrow_candidate)
        assert scorer.complexity_appropriateness(narrow_candidate, request) == pytest.approx(0.2)

    def test_user_preference_overrides_classified_level(
        self, make_classification, narrow_candidate
    ):
        scorer = ComponentScorer()
        request = _request(
            make_classification(),
            narrow_candidate,
            user_preferences=UserPreferences(complexity_preference="advanced"),
        )
        assert scorer.implementation_context_match(narrow_candidate, request) == 1.0

    def test_components_without_sources(self, make_classification, empty_candidate):
        scorer = ComponentScorer()
        request = _request(make_classification(), empty_candidate)
        assert scorer.source_authority(empty_candidate, request) == 0.0
        assert scorer.stage_match(empty_candidate, make_classification()) == 0.0
        assert scorer.framework_application(empty_candidate, request) == 0.0

    def test_scores_are_normalized_and_weighted(self, make_classification, broad_candidate):
        scores = ComponentScorer().score(
            broad_candidate, _request(make_classification(), broad_candidate)
        )
        assert len(scores) == 8
        for score in scores:
            assert 0.0 <= score.normalized_score <= 1.0
            assert score.contribution_to_final_score == pytest.approx(
                score.normalized_score * score.weight
            )


class TestRank:
    def test_broad_context_fit_beats_single_close_match(
        self, make_classification, broad_candidate, narrow_candidate
    ):
        result = ResponseRanker().rank(
            _request(make_classification(), narrow_candidate, broad_candidate)
        )
        assert [r.candidate.candidate_id for r in result.ranked_responses] == ["broad", "narrow"]
        assert [r.rank for r in result.ranked_responses] == [1, 2]
        assert result.best.candidate.candidate_id == "broad"
        assert result.recommendations[0].recommendation_type == "response_selection"

    def test_scores_non_increasing(
        self, make_classification, broad_candidate, narrow_candidate
    ):
        result = ResponseRanker().rank(
            _request(make_classification(), narrow_candidate, broad_candidate)
        )
        scores = [r.final_weighted_score for r in result.ranked_responses]
        assert scores == sorted(scores, reverse=True)
        assert result.ranked_responses[0].ranking_scores.percentile_ranking == 100.0

    def test_ranking_is_idempotent(
        self, make_classification, broad_candidate, narrow_candidate
    ):
        ranker = ResponseRanker()
        request = _request(make_classification(), narrow_candidate, broad_candidate)
        assert ranker.rank(request).summary() == ranker.rank(request).summary()

    def test_confidence_interval_is_symmetric(self, make_classification, broad_candidate):
        result = ResponseRanker().rank(
            _request(make_classification(), broad_candidate, confidence_epsilon=0.1)
        )
        ranked = result.ranked_responses[0]
        final = ranked.final_weighted_score
        assert ranked.confidence_interval.lower_bound == pytest.approx(final - 0.1)
        assert ranked.confidence_interval.upper_bound == pytest.approx(final + 0.1)

    def test_candidate_at_floor_is_excluded(
        self, make_classification, broad_candidate, empty_candidate
    ):
        result = ResponseRanker().rank(
            _request(make_classification(), empty_candidate, broad_candidate)
        )
        assert [r.candidate.candidate_id for r in result.ranked_responses] == ["broad"]
        assert result.ranking_metadata.excluded_candidate_ids == ["empty"]
        assert result.ranking_metadata.candidate_count == 2

    def test_no_qualifying_candidates(self, make_classification, empty_candidate):
        result = ResponseRanker().rank(_request(make_classification(), empty_candidate))
        assert result.ranked_responses == []
        assert result.best is None
        assert result.recommendations[0].recommendation_text.startswith(
            NO_QUALIFYING_CANDIDATES
        )
        assert result.ranking_metadata.ranking_confidence == 0.0

    def test_ties_keep_declaration_order(self, make_classification, make_candidate, make_enhanced):
        sources = [make_enhanced(f"s{i}") for i in range(3)]
        response = ContextAssemblyEngine().assemble(build_context(make_classification(), sources))
        first = make_candidate(response, sources, candidate_id="first")
        second = make_candidate(response, sources, candidate_id="second")

        result = ResponseRanker().rank(_request(make_classification(), first, second))
        assert [r.candidate.candidate_id for r in result.ranked_responses] == ["first", "second"]
        assert any(
            r.recommendation_type == "criteria_adjustment" for r in result.recommendations
        )

    def test_criteria_used_lists_weighted_components(
        self, make_classification, broad_candidate
    ):
        result = ResponseRanker().rank(_request(make_classification(), broad_candidate))
        assert result.ranking_metadata.evaluation_criteria_used == [
            "semantic_relevance",
            "business_context_alignment",
            "source_authority",
        ]

    def test_single_source_candidate_gets_diversification_advice(
        self, make_classification, narrow_candidate
    ):
        result = ResponseRanker().rank(_request(make_classification(), narrow_candidate))
        ranked = result.ranked_responses[0]
        kinds = [s.suggestion_type for s in ranked.improvement_suggestions]
        assert "source_diversification" in kinds
        assert "Limited source diversity" in ranked.confidence_interval.uncertainty_sources

    def test_explanation_has_decision_factors(self, make_classification, broad_candidate):
        result = ResponseRanker().rank(_request(make_classification(), broad_candidate))
        explanation = result.ranked_responses[0].ranking_explanation
        names = {f.factor_name for f in explanation.ranking_decision_factors}
        assert names <= {"semantic_relevance", "business_context_alignment", "source_authority"}
        assert explanation.business_alignment_assessment == (
            "Well aligned with the business context"
        )
