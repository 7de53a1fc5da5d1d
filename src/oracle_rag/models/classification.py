# src/oracle_rag/models/classification.py
"""Query classification consumed read-only by every pipeline stage."""

from pydantic import BaseModel, ConfigDict, Field

from oracle_rag.models.taxonomy import (
    BusinessScenario,
    BusinessStage,
    ComplexityLevel,
    Framework,
    UrgencyLevel,
    UserIntent,
)


class FrameworkRelevance(BaseModel):
    """A framework detected in the query, with how strongly it applies."""

    model_config = ConfigDict(frozen=True)

    framework: Framework
    relevance_score: float = Field(ge=0.0, le=1.0)
    components: tuple[str, ...] = ()


class StageSignal(BaseModel):
    """Evidence that the asker's business is at a given lifecycle stage."""

    model_config = ConfigDict(frozen=True)

    stage: BusinessStage
    confidence: float = Field(ge=0.0, le=1.0)


class QueryClassification(BaseModel):
    """Pre-classified user query.

    Immutable once produced. The classifier that builds it is a pluggable
    collaborator; see ``oracle_rag.classifier`` for the keyword-based default.
    """

    model_config = ConfigDict(frozen=True)

    original_query: str
    primary_intent: UserIntent = "learning"
    secondary_intents: tuple[UserIntent, ...] = ()
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    frameworks: tuple[FrameworkRelevance, ...] = ()
    stage_signals: tuple[StageSignal, ...] = ()
    scenarios: tuple[BusinessScenario, ...] = ()
    industry_hints: tuple[str, ...] = ()
    functional_areas: tuple[str, ...] = ()
    urgency_level: UrgencyLevel = "medium"
    complexity_preference: ComplexityLevel | None = None

    def relevant_frameworks(self, min_relevance: float = 0.0) -> list[FrameworkRelevance]:
        """Frameworks whose relevance strictly exceeds ``min_relevance``, strongest first."""
        matches = [f for f in self.frameworks if f.relevance_score > min_relevance]
        return sorted(matches, key=lambda f: f.relevance_score, reverse=True)

    @property
    def framework_names(self) -> list[str]:
        return [f.framework for f in self.frameworks]

    @property
    def primary_stage(self) -> str | None:
        """Most confident stage signal, or None when no stage was detected."""
        if not self.stage_signals:
            return None
        return max(self.stage_signals, key=lambda s: s.confidence).stage

    @property
    def is_implementation_focused(self) -> bool:
        return (
            self.primary_intent == "implementation" or "implementation" in self.secondary_intents
        )
