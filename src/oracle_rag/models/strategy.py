# src/oracle_rag/models/strategy.py
"""Framework-specific search strategy models."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from oracle_rag.models.taxonomy import (
    BusinessPhase,
    BusinessStage,
    ComplexityLevel,
    Framework,
    UrgencyLevel,
    UserIntent,
)

ApproachKind = Literal[
    "component_based",
    "scenario_driven",
    "progression_aware",
    "integration_focused",
]


class QueryExpansion(BaseModel):
    """Vocabularies appended to the base query when an approach runs."""

    model_config = ConfigDict(frozen=True)

    framework_terminology: tuple[str, ...] = ()
    component_keywords: dict[str, tuple[str, ...]] = Field(default_factory=dict)
    implementation_terms: tuple[str, ...] = ()
    business_context_terms: tuple[str, ...] = ()
    progression_steps: tuple[str, ...] = ()
    success_indicators: tuple[str, ...] = ()


class FilteringCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    complexity_levels: tuple[ComplexityLevel, ...] = ()
    business_phases: tuple[BusinessPhase, ...] = ()
    content_types: tuple[str, ...] = ()


class RankingAdjustments(BaseModel):
    """Multiplicative boosts applied to passages an approach retrieves."""

    model_config = ConfigDict(frozen=True)

    framework_boost: float = 1.0
    component_boost: float = 1.0
    implementation_boost: float = 1.0


class SearchApproach(BaseModel):
    model_config = ConfigDict(frozen=True)

    approach_name: str
    kind: ApproachKind
    query_expansion: QueryExpansion = Field(default_factory=QueryExpansion)
    filtering_criteria: FilteringCriteria = Field(default_factory=FilteringCriteria)
    ranking_adjustments: RankingAdjustments = Field(default_factory=RankingAdjustments)
    weight: float = Field(default=1.0, ge=0.0)


class SearchContext(BaseModel):
    """The query profile a strategy is tuned for."""

    model_config = ConfigDict(frozen=True)

    primary_intent: UserIntent
    business_stage: BusinessStage
    implementation_level: Literal["overview", "application", "deep_dive"] = "application"
    urgency_level: UrgencyLevel = "medium"
    complexity_preference: ComplexityLevel = "intermediate"


class OptimizationParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    semantic_search_weight: float = 0.25
    framework_component_weight: float = 0.3
    implementation_context_weight: float = 0.2
    business_alignment_weight: float = 0.15
    success_pattern_weight: float = 0.1
    diversity_factor: float = 0.3


class FrameworkSearchStrategy(BaseModel):
    model_config = ConfigDict(frozen=True)

    strategy_id: str
    framework: Framework
    search_context: SearchContext
    approaches: tuple[SearchApproach, ...]
    optimization_parameters: OptimizationParameters = Field(
        default_factory=OptimizationParameters
    )
    expected_outcomes: tuple[str, ...] = ()
    # Filled by the selector when a strategy is chosen for a query
    effectiveness_score: float = 0.0


class ApproachQuery(BaseModel):
    """One concrete query string produced by running an approach."""

    model_config = ConfigDict(frozen=True)

    strategy_id: str
    approach_name: str
    query_text: str
    filtering_criteria: FilteringCriteria = Field(default_factory=FilteringCriteria)
    ranking_adjustments: RankingAdjustments = Field(default_factory=RankingAdjustments)
    weight: float = 1.0
