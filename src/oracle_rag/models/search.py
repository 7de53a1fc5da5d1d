# src/oracle_rag/models/search.py
"""Search request and result models."""

from datetime import datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from oracle_rag.models.taxonomy import (
    AuthorityLevel,
    BusinessPhase,
    BusinessScenario,
    BusinessStage,
    ComplexityLevel,
    Framework,
    SourceType,
    VerificationStatus,
)


class SearchResult(BaseModel):
    """A raw scored passage returned by the vector store."""

    id: str | None = None
    title: str = ""
    content: str
    content_preview: str = ""
    category: str | None = None
    similarity_score: float = Field(ge=0.0, le=1.0)
    framework_tags: list[str] = Field(default_factory=list)
    business_phase: BusinessPhase | None = None
    complexity_level: ComplexityLevel | None = None

    # Provenance used by authority and recency scoring
    source_type: SourceType | None = None
    source_url: str | None = None
    authority_level: AuthorityLevel | None = None
    verification_status: VerificationStatus | None = None
    published_at: datetime | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_validator("similarity_score", mode="before")
    @classmethod
    def _clamp_similarity(cls, value: Any) -> Any:
        # Distance-derived scores can drift slightly outside [0, 1]
        if isinstance(value, int | float):
            return min(1.0, max(0.0, float(value)))
        return value

    @property
    def dedup_key(self) -> str:
        """Identity used to merge results across sub-queries."""
        if self.id:
            return self.id
        return f"{self.title}{self.content[:100]}"

    @property
    def preview(self) -> str:
        return self.content_preview or self.content[:200]


class EnhancedSearchResult(SearchResult):
    """A passage re-scored by the business-context ranker."""

    semantic_score: float = 0.0
    business_context_score: float = 0.0
    framework_alignment_score: float = 0.0
    implementation_score: float = 0.0
    authority_score: float = 0.0
    recency_score: float = 0.0
    final_relevance_score: float = 0.0
    result_explanation: str = ""
    key_concepts: list[str] = Field(default_factory=list)
    implementation_complexity: ComplexityLevel = "intermediate"


class RankingWeights(BaseModel):
    """Weights for the six passage-level ranking components.

    The weights need not sum to 1; all results of one request are scored
    with the same instance so they stay comparable.
    """

    semantic_similarity: float = 0.35
    business_context_match: float = 0.2
    framework_relevance: float = 0.15
    implementation_feasibility: float = 0.1
    authority_score: float = 0.1
    recency_score: float = 0.1


class SemanticMethod(BaseModel):
    kind: Literal["semantic"] = "semantic"


class HybridMethod(BaseModel):
    kind: Literal["hybrid"] = "hybrid"
    keyword_weight: float = Field(default=0.3, ge=0.0, le=1.0)


class MultiVectorMethod(BaseModel):
    kind: Literal["multi_vector"] = "multi_vector"


class AdaptiveMethod(BaseModel):
    kind: Literal["adaptive"] = "adaptive"


SearchMethod = Annotated[
    SemanticMethod | HybridMethod | MultiVectorMethod | AdaptiveMethod,
    Field(discriminator="kind"),
]

METHOD_KINDS = ("semantic", "hybrid", "multi_vector", "adaptive")


def _coerce_method(value: Any) -> Any:
    """Accept bare method names (``"hybrid"``) in place of tagged objects."""
    if isinstance(value, str):
        if value not in METHOD_KINDS:
            raise ValueError(f"Unknown search method '{value}'. Expected one of {METHOD_KINDS}")
        return {"kind": value}
    return value


class SearchStrategy(BaseModel):
    primary_method: SearchMethod = Field(default_factory=SemanticMethod)
    fallback_methods: list[SearchMethod] = Field(default_factory=list)
    ranking_weights: RankingWeights = Field(default_factory=RankingWeights)

    @field_validator("primary_method", mode="before")
    @classmethod
    def _coerce_primary(cls, value: Any) -> Any:
        return _coerce_method(value)

    @field_validator("fallback_methods", mode="before")
    @classmethod
    def _coerce_fallbacks(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_coerce_method(v) for v in value]
        return value


class BusinessFilters(BaseModel):
    lifecycle_stages: list[BusinessStage | BusinessPhase] = Field(default_factory=list)
    industry_verticals: list[str] = Field(default_factory=list)
    functional_areas: list[str] = Field(default_factory=list)
    framework_focus: list[Framework] = Field(default_factory=list)
    business_scenarios: list[BusinessScenario] = Field(default_factory=list)
    complexity_levels: list[ComplexityLevel] = Field(default_factory=list)
    # Hard store restrictions; untagged passages always pass them
    required_phases: list[BusinessPhase] = Field(default_factory=list)
    required_complexity: list[ComplexityLevel] = Field(default_factory=list)
    required_categories: list[str] = Field(default_factory=list)


class PerformanceParameters(BaseModel):
    max_results: int = Field(default=5, ge=1)
    similarity_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    query_expansion: bool = False
    result_diversification: bool = False
    cache_duration_minutes: float = Field(default=0.0, ge=0.0)
    # Passed through to the store untouched
    timeout_seconds: float | None = None


class ResultEnhancement(BaseModel):
    include_citations: bool = False
    snippet_optimization: bool = False


class SemanticSearchQuery(BaseModel):
    """Inbound search request."""

    model_config = ConfigDict(frozen=True)

    query_text: str
    search_strategy: SearchStrategy = Field(default_factory=SearchStrategy)
    business_filters: BusinessFilters = Field(default_factory=BusinessFilters)
    performance_parameters: PerformanceParameters = Field(default_factory=PerformanceParameters)
    result_enhancement: ResultEnhancement = Field(default_factory=ResultEnhancement)
