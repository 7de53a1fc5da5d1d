# src/oracle_rag/evaluation/quality.py
"""Six-dimension quality rubric for a single assembled response.

Independent of the ranking weights. Each dimension is the mean of its
criteria and is compared against a stored historical baseline.
"""

from collections.abc import Sequence
from datetime import UTC, datetime

from oracle_rag.logging_config import get_logger
from oracle_rag.models import AssembledResponse, EnhancedSearchResult, QueryClassification
from oracle_rag.models.quality import (
    BenchmarkComparison,
    CriterionScore,
    DimensionScore,
    QualityAssessment,
    QualityRecommendation,
)
from oracle_rag.models.taxonomy import framework_display_name
from oracle_rag.stores.base import keyword_score, query_terms

logger = get_logger(__name__)

DIMENSION_WEIGHTS: dict[str, float] = {
    "relevance": 0.25,
    "accuracy": 0.2,
    "completeness": 0.15,
    "actionability": 0.15,
    "clarity": 0.15,
    "authority": 0.1,
}

# Historical baselines per dimension
BENCHMARKS: dict[str, float] = {
    "relevance": 0.87,
    "accuracy": 0.91,
    "completeness": 0.83,
    "actionability": 0.79,
    "clarity": 0.85,
    "authority": 0.92,
}

_RECOMMENDATION_TYPES = {
    "relevance": "content_enhancement",
    "accuracy": "source_diversification",
    "completeness": "content_enhancement",
    "actionability": "implementation_detail",
    "clarity": "content_enhancement",
    "authority": "source_diversification",
}

_DIFFICULTY = {
    "content_enhancement": "moderate",
    "source_diversification": "difficult",
    "framework_integration": "moderate",
    "implementation_detail": "easy",
}

_RECOMMENDATION_TEXT = {
    "relevance": "Address the question's key terms and detected frameworks directly",
    "accuracy": "Back each claim with consistent, verified sources",
    "completeness": "Cover the summary, explanation, insights, evidence and roadmap",
    "actionability": "Add prerequisites and success metrics to each insight",
    "clarity": "Keep the summary short and the explanation well structured",
    "authority": "Add sources from more authoritative source types",
}

EXPLANATION_MIN_WORDS = 80
EXPLANATION_MAX_WORDS = 800


def _clamp(value: float) -> float:
    return round(min(1.0, max(0.0, value)), 4)


def _fraction(flags: list[bool], default: float) -> float:
    return sum(flags) / len(flags) if flags else default


def benchmark_category(difference: float) -> str:
    if difference >= 0.05:
        return "exceeds"
    if difference >= 0.0:
        return "meets"
    if difference >= -0.1:
        return "approaches"
    if difference >= -0.25:
        return "below"
    return "significantly_below"


def _roadmap_coverage(response: AssembledResponse) -> float:
    roadmap = response.implementation_roadmap
    buckets = [roadmap.immediate_actions, roadmap.short_term_actions, roadmap.long_term_actions]
    return sum(1 for bucket in buckets if bucket) / len(buckets)


def _framework_coverage(response: AssembledResponse, classification: QueryClassification) -> float:
    detected = classification.framework_names
    if not detected:
        return 0.7
    integrated = {f.framework for f in response.synthesized_content.framework_integration}
    return _fraction([framework_display_name(fw) in integrated for fw in detected], 0.0)


class QualityAssessor:
    """Scores one response on relevance, accuracy, completeness, actionability,
    clarity and authority, then blends in the business-level scores.

    Args:
        benchmarks: Override the historical baselines per dimension.
    """

    def __init__(self, benchmarks: dict[str, float] | None = None) -> None:
        self.benchmarks = {**BENCHMARKS, **(benchmarks or {})}

    def assess(
        self,
        response: AssembledResponse,
        classification: QueryClassification,
        sources: Sequence[EnhancedSearchResult] = (),
    ) -> QualityAssessment:
        """Assess a response.

        Args:
            response: The assembled response to score.
            classification: The classified query it answers.
            sources: Passages behind the response; refines the authority
                dimension when given.

        Returns:
            QualityAssessment with per-dimension scores and recommendations.
        """
        criteria = {
            "relevance": self._relevance(response, classification),
            "accuracy": self._accuracy(response),
            "completeness": self._completeness(response),
            "actionability": self._actionability(response),
            "clarity": self._clarity(response),
            "authority": self._authority(response, sources),
        }
        dimension_scores = [self._dimension(name, items) for name, items in criteria.items()]
        weighted = sum(d.score * d.weight for d in dimension_scores)

        bi = self.business_intelligence(response, classification)
        fi = self.framework_integration(response)
        readiness = self.implementation_readiness(response)
        credibility = self.source_credibility(response)
        clarity = next(d.score for d in dimension_scores if d.dimension == "clarity")
        ux = self.user_experience(response, clarity)

        overall = (
            0.4 * weighted
            + 0.2 * bi
            + 0.15 * fi
            + 0.1 * readiness
            + 0.1 * credibility
            + 0.05 * ux
        )
        assessment = QualityAssessment(
            response_id=response.response_id,
            assessed_at=datetime.now(UTC),
            dimension_scores=dimension_scores,
            weighted_dimension_score=_clamp(weighted),
            business_intelligence_score=bi,
            framework_integration_score=fi,
            implementation_readiness=readiness,
            source_credibility=credibility,
            user_experience=ux,
            overall_score=_clamp(overall),
            recommendations=self._recommendations(dimension_scores, fi),
        )
        logger.debug(
            "quality_assessed",
            response_id=response.response_id,
            overall=assessment.overall_score,
            below_benchmark=[
                d.dimension
                for d in dimension_scores
                if d.benchmark.category in ("below", "significantly_below")
            ],
        )
        return assessment

    def _dimension(self, name: str, criteria: list[CriterionScore]) -> DimensionScore:
        score = _clamp(sum(c.score for c in criteria) / len(criteria))
        benchmark = self.benchmarks[name]
        difference = round(score - benchmark, 4)
        return DimensionScore(
            dimension=name,
            score=score,
            weight=DIMENSION_WEIGHTS[name],
            criteria=criteria,
            benchmark=BenchmarkComparison(
                benchmark_score=benchmark,
                difference=difference,
                category=benchmark_category(difference),
            ),
        )

    # -- Dimensions --------------------------------------------------------

    @staticmethod
    def _relevance(
        response: AssembledResponse, classification: QueryClassification
    ) -> list[CriterionScore]:
        content = response.synthesized_content
        text = f"{content.executive_summary}\n{content.detailed_explanation}"
        terms = query_terms(classification.original_query)
        return [
            CriterionScore(
                criterion="query_term_coverage",
                score=_clamp(keyword_score(terms, "", text)),
                explanation="Share of query terms addressed in the summary and explanation",
            ),
            CriterionScore(
                criterion="framework_coverage",
                score=_clamp(_framework_coverage(response, classification)),
                explanation="Detected frameworks that the response integrates",
            ),
            CriterionScore(
                criterion="business_relevance",
                score=response.quality_metrics.business_relevance,
            ),
        ]

    @staticmethod
    def _accuracy(response: AssembledResponse) -> list[CriterionScore]:
        content = response.synthesized_content
        integration = response.source_integration
        known = set(integration.primary_sources) | set(integration.supporting_sources)
        traced = _fraction(
            [
                bool(i.source_ids) and set(i.source_ids) <= known
                for i in content.actionable_insights
            ],
            0.5,
        )
        return [
            CriterionScore(
                criterion="source_consistency", score=response.quality_metrics.consistency_score
            ),
            CriterionScore(
                criterion="evidence_backing", score=response.quality_metrics.evidence_strength
            ),
            CriterionScore(
                criterion="traceability",
                score=_clamp(traced),
                explanation="Insights that cite passages used by the response",
            ),
            CriterionScore(
                criterion="conflict_free",
                score=0.5 if integration.conflicting_sources else 1.0,
            ),
        ]

    @staticmethod
    def _completeness(response: AssembledResponse) -> list[CriterionScore]:
        content = response.synthesized_content
        uncertain = bool(response.confidence_assessment.uncertainty_areas)
        disclosed = 1.0 if content.potential_limitations or not uncertain else 0.5
        return [
            CriterionScore(
                criterion="information_completeness",
                score=response.quality_metrics.information_completeness,
            ),
            CriterionScore(criterion="roadmap_coverage", score=_clamp(_roadmap_coverage(response))),
            CriterionScore(
                criterion="limitation_disclosure",
                score=disclosed,
                explanation="Known uncertainty is stated as a limitation",
            ),
        ]

    @staticmethod
    def _actionability(response: AssembledResponse) -> list[CriterionScore]:
        insights = response.synthesized_content.actionable_insights
        return [
            CriterionScore(
                criterion="insight_count", score=response.quality_metrics.actionability_score
            ),
            CriterionScore(
                criterion="prerequisites_stated",
                score=_clamp(_fraction([bool(i.prerequisites) for i in insights], 0.0)),
            ),
            CriterionScore(
                criterion="success_metrics_stated",
                score=_clamp(_fraction([bool(i.success_metrics) for i in insights], 0.0)),
            ),
            CriterionScore(
                criterion="immediate_next_step",
                score=1.0 if response.implementation_roadmap.immediate_actions else 0.0,
            ),
        ]

    @staticmethod
    def _clarity(response: AssembledResponse) -> list[CriterionScore]:
        content = response.synthesized_content
        summary_len = len(content.executive_summary)
        if 50 <= summary_len <= 600:
            summary = 1.0
        elif summary_len:
            summary = 0.5
        else:
            summary = 0.0

        words = len(content.detailed_explanation.split())
        if words == 0:
            length = 0.0
        elif words < EXPLANATION_MIN_WORDS:
            length = words / EXPLANATION_MIN_WORDS
        elif words > EXPLANATION_MAX_WORDS:
            length = EXPLANATION_MAX_WORDS / words
        else:
            length = 1.0

        sections = [
            content.framework_integration,
            content.actionable_insights,
            content.supporting_evidence,
        ]
        return [
            CriterionScore(criterion="summary_length", score=summary),
            CriterionScore(criterion="explanation_length", score=_clamp(length)),
            CriterionScore(
                criterion="structure",
                score=_clamp(sum(1 for s in sections if s) / len(sections)),
                explanation="Share of structured sections that are populated",
            ),
        ]

    @staticmethod
    def _authority(
        response: AssembledResponse, sources: Sequence[EnhancedSearchResult]
    ) -> list[CriterionScore]:
        evidence = response.synthesized_content.supporting_evidence
        criteria = [
            CriterionScore(
                criterion="source_reliability",
                score=response.confidence_assessment.source_reliability,
            ),
            CriterionScore(
                criterion="source_diversity", score=response.quality_metrics.source_diversity_score
            ),
            CriterionScore(
                criterion="citations_present",
                score=_clamp(_fraction([bool(e.citation) for e in evidence], 0.0)),
            ),
        ]
        if sources:
            criteria.append(
                CriterionScore(
                    criterion="source_authority",
                    score=_clamp(sum(s.authority_score for s in sources) / len(sources)),
                )
            )
        return criteria

    # -- Business-level scores ---------------------------------------------

    @staticmethod
    def business_intelligence(
        response: AssembledResponse, classification: QueryClassification
    ) -> float:
        insights = response.synthesized_content.actionable_insights
        measured = 1.0 if any(i.success_metrics for i in insights) else 0.0
        return _clamp(
            0.5 * response.quality_metrics.business_relevance
            + 0.3 * _framework_coverage(response, classification)
            + 0.2 * measured
        )

    @staticmethod
    def framework_integration(response: AssembledResponse) -> float:
        integrations = response.synthesized_content.framework_integration
        if not integrations:
            return 0.0
        per_framework = [
            0.4 * bool(f.integration_points)
            + 0.3 * bool(f.application_guidance)
            + 0.3 * bool(f.source_ids)
            for f in integrations
        ]
        return _clamp(sum(per_framework) / len(per_framework))

    @staticmethod
    def implementation_readiness(response: AssembledResponse) -> float:
        return _clamp(
            0.4 * response.quality_metrics.actionability_score
            + 0.3 * _roadmap_coverage(response)
            + 0.3 * response.confidence_assessment.implementation_feasibility
        )

    @staticmethod
    def source_credibility(response: AssembledResponse) -> float:
        confidence = response.confidence_assessment
        return _clamp(
            0.5 * confidence.source_reliability
            + 0.3 * confidence.consensus_level
            + 0.2 * response.quality_metrics.evidence_strength
        )

    @staticmethod
    def user_experience(response: AssembledResponse, clarity: float) -> float:
        warnings = len(response.assembly_metadata.assembly_warnings)
        return _clamp(0.6 * clarity + 0.4 * (1 - min(warnings, 5) / 5))

    @staticmethod
    def _recommendations(
        dimensions: list[DimensionScore], framework_integration: float
    ) -> list[QualityRecommendation]:
        recommendations = []
        for d in dimensions:
            if d.benchmark.category not in ("below", "significantly_below"):
                continue
            kind = _RECOMMENDATION_TYPES[d.dimension]
            recommendations.append(
                QualityRecommendation(
                    recommendation_type=kind,
                    dimension=d.dimension,
                    priority="high" if d.benchmark.category == "significantly_below" else "medium",
                    recommendation=_RECOMMENDATION_TEXT[d.dimension],
                    difficulty=_DIFFICULTY[kind],
                )
            )
        if framework_integration < 0.5:
            recommendations.append(
                QualityRecommendation(
                    recommendation_type="framework_integration",
                    priority="medium",
                    recommendation="Explain how each relevant framework applies to this situation",
                    difficulty=_DIFFICULTY["framework_integration"],
                )
            )
        # High priority first, stable within a priority
        order = {"high": 0, "medium": 1, "low": 2}
        return sorted(recommendations, key=lambda r: order[r.priority])
