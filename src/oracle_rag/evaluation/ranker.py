# src/oracle_rag/evaluation/ranker.py
"""Rank independently assembled candidate responses for one query."""

import time
from dataclasses import dataclass
from datetime import UTC, datetime

from oracle_rag.evaluation.components import ComponentScorer
from oracle_rag.logging_config import get_logger
from oracle_rag.models import CandidateResponse, RankedResponse, RankingRequest, RankingResult
from oracle_rag.models.ranking import (
    ComponentScore,
    ConfidenceInterval,
    DecisionFactor,
    ImprovementSuggestion,
    QualityDistribution,
    RankingExplanation,
    RankingMetadata,
    RankingQualityAssessment,
    RankingRecommendation,
    RankingScores,
)

logger = get_logger(__name__)

RANKING_ALGORITHM_VERSION = "2.0.0"
CONFIDENCE_LEVEL = 0.85
NO_QUALIFYING_CANDIDATES = "No qualifying candidates"

STRENGTH_THRESHOLD = 0.75
WEAKNESS_THRESHOLD = 0.5

_LABELS = {
    "semantic_relevance": "semantic relevance",
    "business_context_alignment": "business context alignment",
    "framework_application": "framework application",
    "implementation_practicality": "implementation practicality",
    "source_authority": "source authority",
    "content_freshness": "content freshness",
    "user_intent_match": "user intent match",
    "complexity_appropriateness": "complexity fit",
}


@dataclass
class _Scored:
    candidate: CandidateResponse
    components: list[ComponentScore]
    final: float

    def component(self, name: str) -> float:
        for score in self.components:
            if score.component_name == name:
                return score.normalized_score
        raise KeyError(name)


def _distinct_sources(candidate: CandidateResponse) -> int:
    return len({r.dedup_key for r in candidate.source_results})


def percentile(score: float, scores: list[float]) -> float:
    """Share of the batch scoring at or below ``score``, as a percentage."""
    if not scores:
        return 0.0
    return round(100.0 * sum(1 for s in scores if s <= score) / len(scores), 2)


class ResponseRanker:
    """Orders candidate responses by a weighted sum of component scores.

    Ranking is a pure function of the candidates and the criteria: ids and
    timestamps in the metadata aside, ranking the same request twice gives
    the same order and the same scores.

    Example:
        ranker = ResponseRanker()
        result = ranker.rank(RankingRequest(query_context=qc, candidate_responses=(a, b)))
        best = result.best
    """

    def __init__(self, scorer: ComponentScorer | None = None) -> None:
        self.scorer = scorer or ComponentScorer()

    def rank(self, request: RankingRequest) -> RankingResult:
        start = time.perf_counter()
        criteria = request.ranking_criteria

        qualifying: list[CandidateResponse] = []
        excluded: list[str] = []
        for candidate in request.candidate_responses:
            overall = candidate.assembled_response.quality_metrics.overall_quality_score
            if overall > criteria.quality_floor:
                qualifying.append(candidate)
            else:
                excluded.append(candidate.candidate_id)

        scored = []
        for candidate in qualifying:
            components = self.scorer.score(candidate, request)
            final = round(sum(c.contribution_to_final_score for c in components), 6)
            scored.append(_Scored(candidate, components, final))

        # sorted() is stable, so equal scores keep declaration order
        ordered = sorted(scored, key=lambda s: s.final, reverse=True)
        batch_scores = [s.final for s in ordered]

        ranked = [
            RankedResponse(
                rank=position,
                candidate=s.candidate,
                ranking_scores=RankingScores(
                    component_scores=s.components,
                    final_weighted_score=s.final,
                    percentile_ranking=percentile(s.final, batch_scores),
                ),
                ranking_explanation=self._explain(s),
                confidence_interval=self._confidence_interval(s, criteria.confidence_epsilon),
                improvement_suggestions=self._suggestions(s),
            )
            for position, s in enumerate(ordered, start=1)
        ]

        duration_ms = (time.perf_counter() - start) * 1000
        scheme = criteria.weighting_scheme
        result = RankingResult(
            request_id=request.request_id,
            ranked_responses=ranked,
            ranking_metadata=RankingMetadata(
                ranking_timestamp=datetime.now(UTC),
                processing_duration_ms=duration_ms,
                ranking_algorithm_version=RANKING_ALGORITHM_VERSION,
                evaluation_criteria_used=[
                    name for name, weight in scheme.model_dump().items() if weight > 0
                ],
                candidate_count=len(request.candidate_responses),
                excluded_candidate_ids=excluded,
                ranking_confidence=self._ranking_confidence(
                    batch_scores, criteria.confidence_epsilon
                ),
            ),
            quality_assessment=self._assess(ordered),
            recommendations=self._recommendations(
                ordered,
                excluded,
                candidate_count=len(request.candidate_responses),
                quality_floor=criteria.quality_floor,
                epsilon=criteria.confidence_epsilon,
            ),
        )
        logger.info(
            "ranking_completed",
            request_id=request.request_id,
            candidates=len(request.candidate_responses),
            ranked=len(ranked),
            excluded=len(excluded),
            duration_ms=round(duration_ms, 2),
        )
        return result

    # -- Per-candidate detail ----------------------------------------------

    def _explain(self, scored: _Scored) -> RankingExplanation:
        by_score = sorted(scored.components, key=lambda c: c.normalized_score, reverse=True)
        strengths = [
            f"Strong {_LABELS[c.component_name]} ({c.normalized_score:.2f})"
            for c in by_score
            if c.normalized_score >= STRENGTH_THRESHOLD
        ][:3]
        weaknesses = [
            f"Weak {_LABELS[c.component_name]} ({c.normalized_score:.2f})"
            for c in reversed(by_score)
            if c.normalized_score < WEAKNESS_THRESHOLD
        ][:3]

        factors = []
        for c in sorted(
            scored.components, key=lambda c: c.contribution_to_final_score, reverse=True
        ):
            if c.weight <= 0:
                continue
            contribution = c.contribution_to_final_score
            if contribution >= 0.15:
                magnitude = "high"
            elif contribution >= 0.07:
                magnitude = "medium"
            else:
                magnitude = "low"
            if c.normalized_score >= 0.6:
                direction = "positive"
            elif c.normalized_score < 0.4:
                direction = "negative"
            else:
                direction = "neutral"
            factors.append(
                DecisionFactor(
                    factor_name=c.component_name,
                    impact_magnitude=magnitude,
                    impact_direction=direction,
                    explanation=f"{c.score_explanation}: {c.normalized_score:.2f} x {c.weight:.2f}",
                )
            )

        business = scored.component("business_context_alignment")
        intent = scored.component("user_intent_match")
        practicality = scored.component("implementation_practicality")
        return RankingExplanation(
            primary_strengths=strengths,
            key_weaknesses=weaknesses,
            business_alignment_assessment=(
                "Well aligned with the business context"
                if business >= 0.7
                else "Partially aligned with the business context"
                if business >= 0.4
                else "Poorly aligned with the business context"
            ),
            user_intent_match_explanation=(
                f"Covers {intent:.0%} of what the detected intent calls for"
            ),
            implementation_feasibility_notes=(
                "Practical and actionable"
                if practicality >= 0.7
                else "Needs more concrete implementation detail"
            ),
            ranking_decision_factors=factors[:4],
        )

    @staticmethod
    def _confidence_interval(scored: _Scored, epsilon: float) -> ConfidenceInterval:
        response = scored.candidate.assembled_response
        uncertainty = []
        if _distinct_sources(scored.candidate) < 3:
            uncertainty.append("Limited source diversity")
        if response.source_integration.conflicting_sources:
            uncertainty.append("Conflicting sources")
        if response.confidence_assessment.overall_confidence < 0.7:
            uncertainty.append("Low assembly confidence")
        return ConfidenceInterval(
            confidence_level=CONFIDENCE_LEVEL,
            lower_bound=scored.final - epsilon,
            upper_bound=scored.final + epsilon,
            uncertainty_sources=uncertainty,
        )

    @staticmethod
    def _suggestions(scored: _Scored) -> list[ImprovementSuggestion]:
        response = scored.candidate.assembled_response
        content = response.synthesized_content
        metrics = response.quality_metrics
        suggestions = []

        content_score = min(
            scored.component("semantic_relevance"), scored.component("framework_application")
        )
        if content_score < 0.6:
            suggestions.append(
                ImprovementSuggestion(
                    suggestion_type="content_enhancement",
                    priority="high" if content_score < 0.4 else "medium",
                    specific_recommendation=(
                        "Tie the explanation more closely to the query and the detected frameworks"
                    ),
                    expected_impact="Higher semantic relevance and framework application scores",
                    implementation_difficulty="moderate",
                )
            )

        if _distinct_sources(scored.candidate) < 3 or metrics.source_diversity_score < 0.5:
            suggestions.append(
                ImprovementSuggestion(
                    suggestion_type="source_diversification",
                    priority="high" if _distinct_sources(scored.candidate) < 2 else "medium",
                    specific_recommendation="Draw on more, and more varied, source passages",
                    expected_impact="Stronger source authority and confidence",
                    implementation_difficulty="difficult",
                )
            )

        if len(content.supporting_evidence) < min(3, _distinct_sources(scored.candidate)) or (
            metrics.evidence_strength < 0.6
        ):
            suggestions.append(
                ImprovementSuggestion(
                    suggestion_type="citation_improvement",
                    priority="medium",
                    specific_recommendation="Cite a supporting passage for each key claim",
                    expected_impact="Better traceability and evidence strength",
                    implementation_difficulty="easy",
                )
            )

        complexity_fit = scored.component("complexity_appropriateness")
        if len(content.executive_summary) < 50 or complexity_fit < 0.6:
            suggestions.append(
                ImprovementSuggestion(
                    suggestion_type="clarity_enhancement",
                    priority="low",
                    specific_recommendation=(
                        "Tighten the summary and pitch the detail at the preferred complexity"
                    ),
                    expected_impact="Easier to read and act on",
                    implementation_difficulty="moderate",
                )
            )
        return suggestions

    # -- Batch level ---------------------------------------------------------

    @staticmethod
    def _ranking_confidence(scores: list[float], epsilon: float) -> float:
        """Blend of the top score and how clearly it beats the runner-up."""
        if not scores:
            return 0.0
        if len(scores) == 1:
            return round(min(1.0, scores[0]), 4)
        margin = scores[0] - scores[1]
        separation = 1.0 if epsilon == 0 else min(1.0, margin / (2 * epsilon))
        return round(min(1.0, 0.5 * scores[0] + 0.5 * separation), 4)

    @staticmethod
    def _assess(ordered: list[_Scored]) -> RankingQualityAssessment:
        if not ordered:
            return RankingQualityAssessment(
                quality_gaps_identified=["No candidate met the quality floor"],
            )

        scores = [s.final for s in ordered]
        distribution = QualityDistribution()
        for score in scores:
            if score >= 0.8:
                distribution.excellent += 1
            elif score >= 0.65:
                distribution.good += 1
            elif score >= 0.5:
                distribution.average += 1
            else:
                distribution.below_average += 1

        standout = [
            f"{s.candidate.candidate_id} scores {s.final:.2f}" for s in ordered if s.final >= 0.8
        ]

        gaps = []
        for name in _LABELS:
            mean = sum(s.component(name) for s in ordered) / len(ordered)
            if mean < WEAKNESS_THRESHOLD:
                gaps.append(f"Low {_LABELS[name]} across candidates ({mean:.2f})")

        average = sum(scores) / len(scores)
        return RankingQualityAssessment(
            average_quality_score=round(average, 4),
            quality_distribution=distribution,
            standout_responses=standout,
            quality_gaps_identified=gaps,
            overall_satisfaction_prediction=round(0.6 * scores[0] + 0.4 * average, 4),
        )

    @staticmethod
    def _recommendations(
        ordered: list[_Scored],
        excluded: list[str],
        candidate_count: int,
        quality_floor: float,
        epsilon: float,
    ) -> list[RankingRecommendation]:
        if not ordered:
            return [
                RankingRecommendation(
                    recommendation_type="quality_improvement",
                    recommendation_text=(
                        f"{NO_QUALIFYING_CANDIDATES}: all {candidate_count} candidate(s) scored "
                        f"at or below the quality floor of {quality_floor:.2f}"
                    ),
                    confidence=1.0,
                    priority="immediate",
                )
            ]

        top = ordered[0]
        runner_up = ordered[1].final if len(ordered) > 1 else 0.0
        recommendations = [
            RankingRecommendation(
                recommendation_type="response_selection",
                recommendation_text=(
                    f"Select candidate {top.candidate.candidate_id} (score {top.final:.2f})"
                ),
                confidence=round(min(1.0, 0.5 + (top.final - runner_up)), 4),
                priority="immediate",
            )
        ]
        if len(ordered) > 1 and top.final - runner_up < 2 * epsilon:
            recommendations.append(
                RankingRecommendation(
                    recommendation_type="criteria_adjustment",
                    recommendation_text=(
                        "The top two candidates overlap within their confidence intervals; "
                        "adjust the weighting scheme to separate them"
                    ),
                    confidence=0.6,
                    priority="short_term",
                )
            )
        if excluded:
            recommendations.append(
                RankingRecommendation(
                    recommendation_type="quality_improvement",
                    recommendation_text=(
                        f"{len(excluded)} candidate(s) excluded at or below the quality floor "
                        f"of {quality_floor:.2f}"
                    ),
                    confidence=0.8,
                    priority="short_term",
                )
            )
        return recommendations
