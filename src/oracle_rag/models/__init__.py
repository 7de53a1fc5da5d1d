# src/oracle_rag/models/__init__.py
"""Data models for Oracle."""

from oracle_rag.models.assembly import (
    ActionableInsight,
    ActionOriented,
    AssembledResponse,
    AssemblyContext,
    AssemblyStrategy,
    BusinessContext,
    ContentOrganization,
    Educational,
    Evidence,
    FrameworkBased,
    ImplementationRoadmap,
    ProblemSolution,
    QualityMetrics,
    QualityRequirements,
)
from oracle_rag.models.classification import FrameworkRelevance, QueryClassification, StageSignal
from oracle_rag.models.quality import DimensionScore, QualityAssessment
from oracle_rag.models.ranking import (
    CandidateResponse,
    RankedResponse,
    RankingCriteria,
    RankingRequest,
    RankingResult,
    WeightingScheme,
)
from oracle_rag.models.search import (
    AdaptiveMethod,
    BusinessFilters,
    EnhancedSearchResult,
    HybridMethod,
    MultiVectorMethod,
    PerformanceParameters,
    RankingWeights,
    SearchMethod,
    SearchResult,
    SearchStrategy,
    SemanticMethod,
    SemanticSearchQuery,
)
from oracle_rag.models.strategy import ApproachQuery, FrameworkSearchStrategy, SearchApproach

__all__ = [
    # Classification
    "QueryClassification",
    "FrameworkRelevance",
    "StageSignal",
    # Search
    "SearchResult",
    "EnhancedSearchResult",
    "SemanticSearchQuery",
    "SearchStrategy",
    "SearchMethod",
    "SemanticMethod",
    "HybridMethod",
    "MultiVectorMethod",
    "AdaptiveMethod",
    "BusinessFilters",
    "PerformanceParameters",
    "RankingWeights",
    # Strategy
    "FrameworkSearchStrategy",
    "SearchApproach",
    "ApproachQuery",
    # Assembly
    "AssemblyContext",
    "AssemblyStrategy",
    "BusinessContext",
    "QualityRequirements",
    "ContentOrganization",
    "FrameworkBased",
    "ActionOriented",
    "ProblemSolution",
    "Educational",
    "AssembledResponse",
    "ActionableInsight",
    "Evidence",
    "QualityMetrics",
    "ImplementationRoadmap",
    # Ranking
    "WeightingScheme",
    "RankingCriteria",
    "CandidateResponse",
    "RankingRequest",
    "RankedResponse",
    "RankingResult",
    # Quality
    "QualityAssessment",
    "DimensionScore",
]
