# src/oracle_rag/models/assembly.py
"""Context assembly input and output models."""

from datetime import datetime
from typing import Annotated, Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from oracle_rag.models.search import EnhancedSearchResult
from oracle_rag.models.taxonomy import (
    BusinessScenario,
    BusinessStage,
    ComplexityLevel,
    Framework,
    UrgencyLevel,
    UserIntent,
)

SynthesisApproach = Literal["comprehensive", "focused", "layered", "comparative"]
SourceIntegrationMethod = Literal["hierarchical", "complementary", "priority", "chronological"]
RedundancyHandling = Literal["eliminate", "consolidate", "highlight_variations"]
GapHandling = Literal["acknowledge", "research_additional", "infer_safely"]
ConflictPolicy = Literal["prefer_authority", "flag_both"]
CitationDensity = Literal["sparse", "moderate", "detailed"]

PriorityLevel = Literal["low", "medium", "high", "critical"]
ImplementationComplexity = Literal["simple", "moderate", "complex"]
ExpectedImpact = Literal["minimal", "moderate", "significant", "transformational"]
EvidenceType = Literal["statistical", "case_study", "expert_opinion", "framework_principle"]


class FrameworkBased(BaseModel):
    kind: Literal["framework_based"] = "framework_based"


class ActionOriented(BaseModel):
    kind: Literal["action_oriented"] = "action_oriented"


class ProblemSolution(BaseModel):
    kind: Literal["problem_solution"] = "problem_solution"


class Educational(BaseModel):
    kind: Literal["educational"] = "educational"


ContentOrganization = Annotated[
    FrameworkBased | ActionOriented | ProblemSolution | Educational,
    Field(discriminator="kind"),
]

ORGANIZATION_KINDS = ("framework_based", "action_oriented", "problem_solution", "educational")


class BusinessContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    business_stage: BusinessStage | None = None
    primary_frameworks: tuple[Framework, ...] = ()
    business_scenarios: tuple[BusinessScenario, ...] = ()
    implementation_focus: bool = False
    urgency_level: UrgencyLevel = "medium"
    complexity_preference: ComplexityLevel | None = None


class AssemblyStrategy(BaseModel):
    model_config = ConfigDict(frozen=True)

    synthesis_approach: SynthesisApproach = "comprehensive"
    source_integration_method: SourceIntegrationMethod = "hierarchical"
    content_organization: ContentOrganization = Field(default_factory=FrameworkBased)
    redundancy_handling: RedundancyHandling = "consolidate"
    gap_handling: GapHandling = "acknowledge"
    conflict_policy: ConflictPolicy | None = None  # None = engine default

    @field_validator("content_organization", mode="before")
    @classmethod
    def _coerce_organization(cls, value: Any) -> Any:
        if isinstance(value, str):
            if value not in ORGANIZATION_KINDS:
                raise ValueError(
                    f"Unknown content organization '{value}'. Expected one of {ORGANIZATION_KINDS}"
                )
            return {"kind": value}
        return value


class QualityRequirements(BaseModel):
    model_config = ConfigDict(frozen=True)

    minimum_source_count: int = Field(default=3, ge=0)
    maximum_response_length: int = Field(default=4000, ge=1)
    citation_density: CitationDensity = "moderate"
    evidence_strength: float = Field(default=0.6, ge=0.0, le=1.0)
    consistency_threshold: float = Field(default=0.7, ge=0.0, le=1.0)


class AssemblyContext(BaseModel):
    """Everything needed to assemble one answer. Created once per attempt."""

    model_config = ConfigDict(frozen=True)

    context_id: str = Field(default_factory=lambda: str(uuid4()))
    original_query: str
    user_intent: UserIntent
    business_context: BusinessContext = Field(default_factory=BusinessContext)
    source_chunks: tuple[EnhancedSearchResult, ...] = ()
    assembly_strategy: AssemblyStrategy
    quality_requirements: QualityRequirements = Field(default_factory=QualityRequirements)

    @property
    def source_ids(self) -> set[str]:
        return {chunk.dedup_key for chunk in self.source_chunks}


# -- Output -----------------------------------------------------------------


class FrameworkIntegration(BaseModel):
    framework: str
    relevance_to_query: float
    integration_points: list[str] = Field(default_factory=list)
    application_guidance: str = ""
    success_indicators: list[str] = Field(default_factory=list)
    source_ids: list[str] = Field(default_factory=list)


class ActionableInsight(BaseModel):
    insight_id: str
    insight_text: str
    priority_level: PriorityLevel
    implementation_complexity: ImplementationComplexity
    expected_impact: ExpectedImpact
    prerequisites: list[str] = Field(default_factory=list)
    success_metrics: list[str] = Field(default_factory=list)
    timeframe: str
    source_ids: list[str] = Field(min_length=1)


class Evidence(BaseModel):
    evidence_id: str
    evidence_text: str
    source_chunk_id: str
    evidence_type: EvidenceType
    strength_level: float
    relevance_score: float
    citation: str


class SynthesizedContent(BaseModel):
    executive_summary: str
    detailed_explanation: str
    framework_integration: list[FrameworkIntegration] = Field(default_factory=list)
    actionable_insights: list[ActionableInsight] = Field(default_factory=list)
    supporting_evidence: list[Evidence] = Field(default_factory=list)
    potential_limitations: list[str] = Field(default_factory=list)


class QualityMetrics(BaseModel):
    overall_quality_score: float
    source_diversity_score: float
    information_completeness: float
    consistency_score: float
    actionability_score: float
    evidence_strength: float
    business_relevance: float


class CrossReference(BaseModel):
    source_a: str
    source_b: str
    relationship: Literal["complementary", "conflicting", "supporting"]
    shared_concepts: list[str] = Field(default_factory=list)


class SourceIntegration(BaseModel):
    primary_sources: list[str] = Field(default_factory=list)
    supporting_sources: list[str] = Field(default_factory=list)
    conflicting_sources: list[str] = Field(default_factory=list)
    cross_references: list[CrossReference] = Field(default_factory=list)
    source_types: list[str] = Field(default_factory=list)


class RoadmapAction(BaseModel):
    action_id: str
    description: str
    priority: PriorityLevel
    estimated_effort: str
    dependencies: list[str] = Field(default_factory=list)
    success_criteria: list[str] = Field(default_factory=list)
    frameworks_applied: list[str] = Field(default_factory=list)


class ImplementationRoadmap(BaseModel):
    immediate_actions: list[RoadmapAction] = Field(default_factory=list)
    short_term_actions: list[RoadmapAction] = Field(default_factory=list)
    long_term_actions: list[RoadmapAction] = Field(default_factory=list)
    success_milestones: list[str] = Field(default_factory=list)
    risk_mitigation: list[str] = Field(default_factory=list)


class ConfidenceAssessment(BaseModel):
    overall_confidence: float
    source_reliability: float
    information_completeness: float
    consensus_level: float
    implementation_feasibility: float
    uncertainty_areas: list[str] = Field(default_factory=list)
    confidence_factors: dict[str, float] = Field(default_factory=dict)


class AssemblyMetadata(BaseModel):
    assembly_timestamp: datetime
    processing_duration_ms: float
    source_count: int
    assembly_version: str = "1.0.0"
    quality_checks_passed: list[str] = Field(default_factory=list)
    assembly_warnings: list[str] = Field(default_factory=list)


class AssembledResponse(BaseModel):
    response_id: str = Field(default_factory=lambda: str(uuid4()))
    context_id: str
    synthesized_content: SynthesizedContent
    quality_metrics: QualityMetrics
    source_integration: SourceIntegration
    implementation_roadmap: ImplementationRoadmap
    confidence_assessment: ConfidenceAssessment
    assembly_metadata: AssemblyMetadata
