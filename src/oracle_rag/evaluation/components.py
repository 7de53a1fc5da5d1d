# src/oracle_rag/evaluation/components.py
"""Eight-component scoring of candidate responses.

Every component is a deterministic function of the candidate and the
request, clamped to [0, 1]. The ranker combines them under the request's
weighting scheme.
"""

from collections.abc import Callable

from oracle_rag.models import CandidateResponse, QueryClassification, RankingRequest
from oracle_rag.models.ranking import COMPONENT_NAMES, ComponentScore
from oracle_rag.models.taxonomy import (
    COMPLEXITY_LEVELS,
    SCENARIO_KEYWORDS,
    framework_phrase,
    phase_for_stage,
)
from oracle_rag.stores.base import keyword_score, query_terms

# Neutral sub-score when the query carries no signal to compare against
NEUTRAL = 0.7

COMPONENT_EXPLANATIONS: dict[str, str] = {
    "semantic_relevance": "How well the response matches the semantic intent of the query",
    "business_context_alignment": "Alignment with the detected business context and scenarios",
    "framework_application": "How well the relevant frameworks are applied and integrated",
    "implementation_practicality": "How practical and actionable the response is",
    "source_authority": "Authority and breadth of the sources behind the response",
    "content_freshness": "How current the underlying sources are",
    "user_intent_match": "How well the response shape fits the detected user intent",
    "complexity_appropriateness": "Whether source complexity matches the preferred level",
}

# Response elements that serve each intent
INTENT_ELEMENTS: dict[str, tuple[str, ...]] = {
    "learning": ("summary", "explanation", "evidence", "frameworks"),
    "implementation": ("insights", "roadmap", "metrics", "prerequisites"),
    "troubleshooting": ("insights", "limitations", "evidence"),
    "benchmarking": ("evidence", "frameworks", "metrics"),
    "validation": ("evidence", "limitations", "frameworks"),
    "optimization": ("insights", "frameworks", "roadmap"),
    "research": ("evidence", "explanation", "frameworks"),
    "planning": ("roadmap", "insights", "milestones"),
}


def clamp(value: float) -> float:
    return round(min(1.0, max(0.0, value)), 4)


def _mean(values: list[float], default: float = 0.0) -> float:
    return sum(values) / len(values) if values else default


def _fraction(flags: list[bool], default: float = 0.0) -> float:
    return sum(flags) / len(flags) if flags else default


def response_text(candidate: CandidateResponse) -> str:
    content = candidate.assembled_response.synthesized_content
    parts = [content.executive_summary, content.detailed_explanation]
    parts.extend(f.framework for f in content.framework_integration)
    parts.extend(i.insight_text for i in content.actionable_insights)
    return "\n".join(parts).lower()


def _source_frameworks(candidate: CandidateResponse) -> set[str]:
    tags = {t.lower() for r in candidate.source_results for t in r.framework_tags}
    content = candidate.assembled_response.synthesized_content
    tags.update(f.framework.lower() for f in content.framework_integration)
    return tags


def _complexity_distance(a: str, b: str) -> int:
    return abs(COMPLEXITY_LEVELS.index(a) - COMPLEXITY_LEVELS.index(b))


def preferred_complexity(request: RankingRequest) -> str | None:
    """User preference wins over the classified preference; "adaptive" defers."""
    prefs = request.ranking_criteria.user_preferences
    if prefs and prefs.complexity_preference != "adaptive":
        return prefs.complexity_preference
    return request.query_context.complexity_preference


def element_present(candidate: CandidateResponse, element: str) -> bool:
    response = candidate.assembled_response
    content = response.synthesized_content
    roadmap = response.implementation_roadmap
    match element:
        case "summary":
            return bool(content.executive_summary)
        case "explanation":
            return bool(content.detailed_explanation)
        case "evidence":
            return bool(content.supporting_evidence)
        case "frameworks":
            return bool(content.framework_integration)
        case "insights":
            return bool(content.actionable_insights)
        case "limitations":
            return bool(content.potential_limitations)
        case "metrics":
            return any(i.success_metrics for i in content.actionable_insights)
        case "prerequisites":
            return any(i.prerequisites for i in content.actionable_insights)
        case "roadmap":
            return bool(
                roadmap.immediate_actions or roadmap.short_term_actions or roadmap.long_term_actions
            )
        case "milestones":
            return bool(roadmap.success_milestones)
        case _:
            raise ValueError(f"Unknown response element: {element}")


class ComponentScorer:
    """Computes the eight ranking components for one candidate.

    Sub-score methods are public so callers (and the quality assessor) can
    reuse them. All of them are pure.
    """

    def __init__(self) -> None:
        self._components: dict[str, Callable[[CandidateResponse, RankingRequest], float]] = {
            "semantic_relevance": self.semantic_relevance,
            "business_context_alignment": self.business_context_alignment,
            "framework_application": self.framework_application,
            "implementation_practicality": self.implementation_practicality,
            "source_authority": self.source_authority,
            "content_freshness": self.content_freshness,
            "user_intent_match": self.user_intent_match,
            "complexity_appropriateness": self.complexity_appropriateness,
        }

    def score(self, candidate: CandidateResponse, request: RankingRequest) -> list[ComponentScore]:
        scheme = request.ranking_criteria.weighting_scheme
        scores = []
        for name in COMPONENT_NAMES:
            raw = self._components[name](candidate, request)
            normalized = clamp(raw)
            weight = scheme.weight_for(name)
            scores.append(
                ComponentScore(
                    component_name=name,
                    raw_score=raw,
                    normalized_score=normalized,
                    weight=weight,
                    contribution_to_final_score=normalized * weight,
                    score_explanation=COMPONENT_EXPLANATIONS[name],
                )
            )
        return scores

    # -- Semantic relevance ------------------------------------------------

    def content_alignment(self, candidate: CandidateResponse, query: str) -> float:
        explanation = candidate.assembled_response.synthesized_content.detailed_explanation
        return keyword_score(query_terms(query), "", explanation)

    def concept_coverage(
        self, candidate: CandidateResponse, classification: QueryClassification
    ) -> float:
        concepts = [framework_phrase(f) for f in classification.framework_names]
        if not concepts:
            return NEUTRAL
        text = response_text(candidate).replace("_", " ")
        return _fraction([c in text for c in concepts])

    def semantic_relevance(self, candidate: CandidateResponse, request: RankingRequest) -> float:
        classification = request.query_context
        avg_semantic = _mean([r.semantic_score for r in candidate.source_results])
        return clamp(
            0.4 * avg_semantic
            + 0.3 * self.content_alignment(candidate, classification.original_query)
            + 0.3 * self.concept_coverage(candidate, classification)
        )

    # -- Business context alignment ---------------------------------------

    def framework_match(
        self, candidate: CandidateResponse, classification: QueryClassification
    ) -> float:
        detected = classification.framework_names
        if not detected:
            return NEUTRAL
        covered = _source_frameworks(candidate)
        return _fraction([fw in covered for fw in detected])

    def scenario_match(
        self, candidate: CandidateResponse, classification: QueryClassification
    ) -> float:
        if not classification.scenarios:
            return NEUTRAL
        text = response_text(candidate)
        return _fraction(
            [
                any(kw in text for kw in SCENARIO_KEYWORDS.get(scenario, ()))
                for scenario in classification.scenarios
            ]
        )

    def implementation_context_match(
        self, candidate: CandidateResponse, request: RankingRequest
    ) -> float:
        """Share of sources pitched at exactly the preferred complexity."""
        preferred = preferred_complexity(request)
        if not candidate.source_results:
            return 0.0
        if preferred is None:
            return NEUTRAL
        return _fraction(
            [r.implementation_complexity == preferred for r in candidate.source_results]
        )

    def stage_match(
        self, candidate: CandidateResponse, classification: QueryClassification
    ) -> float:
        if not candidate.source_results:
            return 0.0
        stage = classification.primary_stage
        if stage is None:
            return NEUTRAL
        phase = phase_for_stage(stage)
        return _fraction(
            [r.business_phase in ("all", phase) for r in candidate.source_results]
        )

    def business_context_alignment(
        self, candidate: CandidateResponse, request: RankingRequest
    ) -> float:
        classification = request.query_context
        return clamp(
            0.35 * self.framework_match(candidate, classification)
            + 0.25 * self.scenario_match(candidate, classification)
            + 0.25 * self.implementation_context_match(candidate, request)
            + 0.15 * self.stage_match(candidate, classification)
        )

    # -- Framework application --------------------------------------------

    def framework_application(self, candidate: CandidateResponse, request: RankingRequest) -> float:
        integrations = candidate.assembled_response.synthesized_content.framework_integration
        if not integrations:
            return 0.0
        integration_quality = _fraction([bool(f.integration_points) for f in integrations])
        accuracy = _fraction([bool(f.source_ids) for f in integrations])
        guidance = _fraction([bool(f.application_guidance) for f in integrations])
        return clamp(0.4 * integration_quality + 0.3 * accuracy + 0.3 * guidance)

    # -- Implementation practicality --------------------------------------

    def roadmap_quality(self, candidate: CandidateResponse) -> float:
        roadmap = candidate.assembled_response.implementation_roadmap
        buckets = [
            roadmap.immediate_actions,
            roadmap.short_term_actions,
            roadmap.long_term_actions,
        ]
        filled = sum(1 for bucket in buckets if bucket) / len(buckets)
        return clamp(0.8 * filled + (0.2 if roadmap.success_milestones else 0.0))

    def implementation_practicality(
        self, candidate: CandidateResponse, request: RankingRequest
    ) -> float:
        insights = candidate.assembled_response.synthesized_content.actionable_insights
        actionability = min(len(insights) / 3, 1.0)
        resource_clarity = _fraction([bool(i.prerequisites) for i in insights])
        measurement = _fraction([bool(i.success_metrics) for i in insights])
        return clamp(
            0.35 * actionability
            + 0.25 * resource_clarity
            + 0.25 * self.roadmap_quality(candidate)
            + 0.15 * measurement
        )

    # -- Sources -----------------------------------------------------------

    def source_authority(self, candidate: CandidateResponse, request: RankingRequest) -> float:
        sources = candidate.source_results
        if not sources:
            return 0.0
        breadth = min(len({r.dedup_key for r in sources}) / 3, 1.0)
        return clamp(0.7 * _mean([r.authority_score for r in sources]) + 0.3 * breadth)

    def content_freshness(self, candidate: CandidateResponse, request: RankingRequest) -> float:
        return clamp(_mean([r.recency_score for r in candidate.source_results]))

    # -- User fit ----------------------------------------------------------

    def user_intent_match(self, candidate: CandidateResponse, request: RankingRequest) -> float:
        classification = request.query_context
        primary = INTENT_ELEMENTS[classification.primary_intent]
        score = _fraction([element_present(candidate, e) for e in primary])
        secondary = [
            element_present(candidate, e)
            for intent in classification.secondary_intents
            for e in INTENT_ELEMENTS[intent]
        ]
        if secondary:
            score = 0.8 * score + 0.2 * _fraction(secondary)
        return clamp(score)

    def complexity_appropriateness(
        self, candidate: CandidateResponse, request: RankingRequest
    ) -> float:
        """1.0 per exact match, 0.6 one level off, 0.2 two levels off."""
        preferred = preferred_complexity(request)
        if not candidate.source_results:
            return 0.0
        if preferred is None:
            return NEUTRAL
        return clamp(
            _mean(
                [
                    1.0 - 0.4 * _complexity_distance(r.implementation_complexity, preferred)
                    for r in candidate.source_results
                ]
            )
        )
