# tests/evaluation/test_quality_assessor.py
"""Tests for the six-dimension quality rubric."""

import pytest

from oracle_rag.assembly import ContextAssemblyEngine, build_context
from oracle_rag.evaluation import BENCHMARKS, DIMENSION_WEIGHTS, QualityAssessor
from oracle_rag.evaluation.quality import benchmark_category


@pytest.fixture
def sources(make_enhanced):
    return [
        make_enhanced("a"),
        make_enhanced(
            "b",
            content="Price the offer on value. Anchor against the full stack.",
            framework_tags=["grand_slam_offers", "pricing_psychology"],
            source_type="video",
            implementation_complexity="intermediate",
        ),
        make_enhanced(
            "c",
            content="Add a guarantee that removes the risk. Bonuses raise perceived value.",
            source_type="case_study",
            implementation_complexity="advanced",
        ),
    ]


@pytest.fixture
def rich_response(make_classification, sources):
    return ContextAssemblyEngine().assemble(build_context(make_classification(), sources))


@pytest.fixture
def empty_response(make_classification):
    return ContextAssemblyEngine().assemble(build_context(make_classification(), []))


def test_dimension_weights_sum_to_one():
    assert sum(DIMENSION_WEIGHTS.values()) == pytest.approx(1.0)
    assert set(DIMENSION_WEIGHTS) == set(BENCHMARKS)


@pytest.mark.parametrize(
    "difference,category",
    [
        (0.1, "exceeds"),
        (0.0, "meets"),
        (-0.05, "approaches"),
        (-0.2, "below"),
        (-0.5, "significantly_below"),
    ],
)
def test_benchmark_category(difference, category):
    assert benchmark_category(difference) == category


class TestAssess:
    def test_six_dimensions(self, rich_response, make_classification):
        assessment = QualityAssessor().assess(rich_response, make_classification())
        assert [d.dimension for d in assessment.dimension_scores] == list(DIMENSION_WEIGHTS)
        for dimension in assessment.dimension_scores:
            assert 0.0 <= dimension.score <= 1.0
            assert dimension.weight == DIMENSION_WEIGHTS[dimension.dimension]
            assert dimension.criteria
        assert 0.0 <= assessment.overall_score <= 1.0
        assert assessment.response_id == rich_response.response_id

    def test_dimension_lookup(self, rich_response, make_classification):
        assessment = QualityAssessor().assess(rich_response, make_classification())
        assert assessment.dimension("clarity").dimension == "clarity"
        with pytest.raises(KeyError):
            assessment.dimension("style")

    def test_integrated_frameworks_count_as_covered(self, rich_response, make_classification):
        relevance = QualityAssessor().assess(rich_response, make_classification()).dimension(
            "relevance"
        )
        coverage = next(c for c in relevance.criteria if c.criterion == "framework_coverage")
        assert coverage.score == 1.0

    def test_rich_response_beats_empty(self, rich_response, empty_response, make_classification):
        assessor = QualityAssessor()
        classification = make_classification()
        rich = assessor.assess(rich_response, classification)
        empty = assessor.assess(empty_response, classification)
        assert rich.overall_score > empty.overall_score
        assert rich.framework_integration_score > empty.framework_integration_score == 0.0

    def test_empty_response_recommendations(self, empty_response, make_classification):
        assessment = QualityAssessor().assess(empty_response, make_classification())
        kinds = [r.recommendation_type for r in assessment.recommendations]
        assert "framework_integration" in kinds
        priorities = [r.priority for r in assessment.recommendations]
        assert priorities == sorted(priorities, key=["high", "medium", "low"].index)
        assert assessment.dimension("actionability").benchmark.category == "significantly_below"

    def test_sources_refine_authority(self, rich_response, make_classification, sources):
        assessor = QualityAssessor()
        without = assessor.assess(rich_response, make_classification()).dimension("authority")
        with_sources = assessor.assess(
            rich_response, make_classification(), sources=sources
        ).dimension("authority")
        assert len(with_sources.criteria) == len(without.criteria) + 1
        assert with_sources.criteria[-1].criterion == "source_authority"
        assert with_sources.criteria[-1].score == pytest.approx(0.9)

    def test_custom_benchmarks(self, rich_response, make_classification):
        assessor = QualityAssessor(benchmarks={"clarity": 0.0})
        clarity = assessor.assess(rich_response, make_classification()).dimension("clarity")
        assert clarity.benchmark.benchmark_score == 0.0
        assert clarity.benchmark.category in ("meets", "exceeds")
        assert assessor.benchmarks["relevance"] == BENCHMARKS["relevance"]

    def test_resolved_conflict_keeps_full_traceability(self, make_classification, make_enhanced):
        sources = [
            make_enhanced("winner", metadata={"stance": "raise"}, authority_score=0.9),
            make_enhanced("loser", metadata={"stance": "lower"}, authority_score=0.4),
        ]
        response = ContextAssemblyEngine(conflict_policy="prefer_authority").assemble(
            build_context(make_classification(), sources)
        )
        assert response.source_integration.primary_sources == ["winner"]

        accuracy = QualityAssessor().assess(response, make_classification()).dimension("accuracy")
        traceability = next(c for c in accuracy.criteria if c.criterion == "traceability")
        assert traceability.score == 1.0
