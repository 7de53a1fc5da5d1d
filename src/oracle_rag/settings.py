# src/oracle_rag/settings.py
"""Behavioral settings for Oracle.

Settings are passed programmatically; the library itself never reads the
environment. ``oracle_rag.config`` layers YAML files and ORACLE_* env vars
on top of these defaults for applications and the CLI.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from oracle_rag.models.assembly import ConflictPolicy
from oracle_rag.models.ranking import RankingCriteria, WeightingScheme
from oracle_rag.models.search import (
    PerformanceParameters,
    RankingWeights,
    ResultEnhancement,
    SearchStrategy,
)

# Search profile definitions
# - "focused": a few high-confidence semantic matches
# - "exploratory": a wider hybrid net with diversification
SEARCH_PROFILES: dict[str, dict[str, Any]] = {
    "focused": {
        "search_method": "semantic",
        "similarity_threshold": 0.8,
        "max_results": 5,
        "result_diversification": False,
    },
    "exploratory": {
        "search_method": "hybrid",
        "similarity_threshold": 0.7,
        "max_results": 10,
        "result_diversification": True,
    },
}

SearchMethodName = Literal["semantic", "hybrid", "multi_vector", "adaptive"]


class Settings(BaseModel):
    """Behavioral settings for Oracle.

    Example:
        settings = Settings(max_results=8, conflict_policy="flag_both")

        # Or start from a search profile
        settings = Settings.with_profile("exploratory", cache_ttl_minutes=0)
    """

    # Search
    search_method: SearchMethodName = "adaptive"
    similarity_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    max_results: int = Field(default=8, ge=1)
    query_expansion: bool = True
    result_diversification: bool = True
    search_timeout_seconds: float | None = 30.0
    max_concurrent_searches: int = Field(default=8, ge=1)

    # Strategy selection
    strategy_relevance_gate: float = 0.3
    max_strategies: int = 3

    # Search result cache (0 disables caching)
    cache_ttl_minutes: float = Field(default=15.0, ge=0.0)
    cache_max_entries: int | None = 1024

    # Passage ranking
    ranking_weights: RankingWeights = Field(default_factory=RankingWeights)
    include_citations: bool = False
    snippet_optimization: bool = False

    # Assembly
    conflict_policy: ConflictPolicy = "prefer_authority"
    minimum_source_count: int = 3
    max_candidates: int = Field(default=3, ge=1)

    # Candidate ranking
    weighting_scheme: WeightingScheme = Field(default_factory=WeightingScheme)
    quality_floor: float = Field(default=0.3, ge=0.0, le=1.0)
    confidence_epsilon: float = Field(default=0.05, ge=0.0)

    # Answer synthesis (only used when an LLM client is configured)
    synthesis_prompt: str | None = None
    synthesis_temperature: float | None = 0.3

    # Retry configuration handed to LiteLLM (the core itself never retries)
    num_retries: int = 3

    @classmethod
    def with_profile(
        cls,
        profile: Literal["focused", "exploratory"],
        **overrides: Any,
    ) -> Settings:
        """Create Settings from a search profile.

        Args:
            profile: The search profile to use.
            **overrides: Additional settings to override profile defaults.

        Returns:
            Settings instance with profile values applied.
        """
        if profile not in SEARCH_PROFILES:
            raise ValueError(
                f"Unknown profile '{profile}'. Available profiles: {list(SEARCH_PROFILES.keys())}"
            )

        profile_settings: dict[str, Any] = SEARCH_PROFILES[profile].copy()
        profile_settings.update(overrides)
        return cls(**profile_settings)

    def performance_parameters(self, **overrides: Any) -> PerformanceParameters:
        params: dict[str, Any] = {
            "max_results": self.max_results,
            "similarity_threshold": self.similarity_threshold,
            "query_expansion": self.query_expansion,
            "result_diversification": self.result_diversification,
            "cache_duration_minutes": self.cache_ttl_minutes,
            "timeout_seconds": self.search_timeout_seconds,
        }
        params.update(overrides)
        return PerformanceParameters(**params)

    def search_strategy(self, method: str | None = None) -> SearchStrategy:
        return SearchStrategy(
            primary_method=method or self.search_method,
            ranking_weights=self.ranking_weights,
        )

    def result_enhancement(self) -> ResultEnhancement:
        return ResultEnhancement(
            include_citations=self.include_citations,
            snippet_optimization=self.snippet_optimization,
        )

    def ranking_criteria(self) -> RankingCriteria:
        return RankingCriteria(
            weighting_scheme=self.weighting_scheme,
            quality_floor=self.quality_floor,
            confidence_epsilon=self.confidence_epsilon,
        )
