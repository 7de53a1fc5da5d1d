# src/oracle_rag/models/ranking.py
"""Candidate response ranking models."""

from datetime import datetime
from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from oracle_rag.models.assembly import AssembledResponse
from oracle_rag.models.classification import QueryClassification
from oracle_rag.models.search import EnhancedSearchResult
from oracle_rag.models.taxonomy import ComplexityLevel, Framework

COMPONENT_NAMES = (
    "semantic_relevance",
    "business_context_alignment",
    "framework_application",
    "implementation_practicality",
    "source_authority",
    "content_freshness",
    "user_intent_match",
    "complexity_appropriateness",
)


class WeightingScheme(BaseModel):
    """Weights for the eight candidate-level ranking components."""

    model_config = ConfigDict(frozen=True)

    semantic_relevance: float = Field(default=0.2, ge=0.0)
    business_context_alignment: float = Field(default=0.2, ge=0.0)
    framework_application: float = Field(default=0.15, ge=0.0)
    implementation_practicality: float = Field(default=0.15, ge=0.0)
    source_authority: float = Field(default=0.1, ge=0.0)
    content_freshness: float = Field(default=0.05, ge=0.0)
    user_intent_match: float = Field(default=0.1, ge=0.0)
    complexity_appropriateness: float = Field(default=0.05, ge=0.0)

    def weight_for(self, component: str) -> float:
        return float(getattr(self, component))


class UserPreferences(BaseModel):
    model_config = ConfigDict(frozen=True)

    preferred_response_style: Literal[
        "comprehensive", "concise", "action_oriented", "educational"
    ] = "comprehensive"
    complexity_preference: ComplexityLevel | Literal["adaptive"] = "adaptive"
    framework_focus_preference: tuple[Framework, ...] = ()


class RankingCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    weighting_scheme: WeightingScheme = Field(default_factory=WeightingScheme)
    # Candidates whose overall quality is at or below the floor are excluded
    quality_floor: float = Field(default=0.3, ge=0.0, le=1.0)
    confidence_epsilon: float = Field(default=0.05, ge=0.0)
    user_preferences: UserPreferences | None = None


class GenerationMetadata(BaseModel):
    generation_method: str = "context_assembly"
    processing_time_ms: float = 0.0
    source_count: int = 0
    assembly_strategy: str = ""


class CandidateResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    candidate_id: str = Field(default_factory=lambda: str(uuid4()))
    assembled_response: AssembledResponse
    source_results: tuple[EnhancedSearchResult, ...] = ()
    generation_metadata: GenerationMetadata = Field(default_factory=GenerationMetadata)


class RankingRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    request_id: str = Field(default_factory=lambda: str(uuid4()))
    query_context: QueryClassification
    candidate_responses: tuple[CandidateResponse, ...]
    ranking_criteria: RankingCriteria = Field(default_factory=RankingCriteria)


class ComponentScore(BaseModel):
    component_name: str
    raw_score: float
    normalized_score: float
    weight: float
    contribution_to_final_score: float
    score_explanation: str


class RankingScores(BaseModel):
    component_scores: list[ComponentScore]
    final_weighted_score: float
    percentile_ranking: float


class DecisionFactor(BaseModel):
    factor_name: str
    impact_magnitude: Literal["high", "medium", "low"]
    impact_direction: Literal["positive", "negative", "neutral"]
    explanation: str


class RankingExplanation(BaseModel):
    primary_strengths: list[str] = Field(default_factory=list)
    key_weaknesses: list[str] = Field(default_factory=list)
    business_alignment_assessment: str = ""
    user_intent_match_explanation: str = ""
    implementation_feasibility_notes: str = ""
    ranking_decision_factors: list[DecisionFactor] = Field(default_factory=list)


class ConfidenceInterval(BaseModel):
    confidence_level: float
    lower_bound: float
    upper_bound: float
    uncertainty_sources: list[str] = Field(default_factory=list)


SuggestionType = Literal[
    "content_enhancement",
    "source_diversification",
    "citation_improvement",
    "clarity_enhancement",
]
Difficulty = Literal["easy", "moderate", "difficult"]


class ImprovementSuggestion(BaseModel):
    suggestion_type: SuggestionType
    priority: Literal["high", "medium", "low"]
    specific_recommendation: str
    expected_impact: str
    implementation_difficulty: Difficulty


class RankedResponse(BaseModel):
    rank: int
    candidate: CandidateResponse
    ranking_scores: RankingScores
    ranking_explanation: RankingExplanation
    confidence_interval: ConfidenceInterval
    improvement_suggestions: list[ImprovementSuggestion] = Field(default_factory=list)

    @property
    def final_weighted_score(self) -> float:
        return self.ranking_scores.final_weighted_score


class QualityDistribution(BaseModel):
    excellent: int = 0
    good: int = 0
    average: int = 0
    below_average: int = 0


class RankingQualityAssessment(BaseModel):
    average_quality_score: float = 0.0
    quality_distribution: QualityDistribution = Field(default_factory=QualityDistribution)
    standout_responses: list[str] = Field(default_factory=list)
    quality_gaps_identified: list[str] = Field(default_factory=list)
    overall_satisfaction_prediction: float = 0.0


class RankingRecommendation(BaseModel):
    recommendation_type: Literal[
        "response_selection", "quality_improvement", "criteria_adjustment", "user_guidance"
    ]
    recommendation_text: str
    confidence: float
    priority: Literal["immediate", "short_term", "long_term"]


class RankingMetadata(BaseModel):
    ranking_timestamp: datetime
    processing_duration_ms: float
    ranking_algorithm_version: str = "2.0.0"
    evaluation_criteria_used: list[str] = Field(default_factory=list)
    candidate_count: int
    excluded_candidate_ids: list[str] = Field(default_factory=list)
    ranking_confidence: float


class RankingResult(BaseModel):
    ranking_id: str = Field(default_factory=lambda: str(uuid4()))
    request_id: str
    ranked_responses: list[RankedResponse]
    ranking_metadata: RankingMetadata
    quality_assessment: RankingQualityAssessment
    recommendations: list[RankingRecommendation] = Field(default_factory=list)

    @property
    def best(self) -> RankedResponse | None:
        return self.ranked_responses[0] if self.ranked_responses else None

    def summary(self) -> dict[str, Any]:
        return {
            "request_id": self.request_id,
            "order": [r.candidate.candidate_id for r in self.ranked_responses],
            "scores": [round(r.final_weighted_score, 4) for r in self.ranked_responses],
        }
