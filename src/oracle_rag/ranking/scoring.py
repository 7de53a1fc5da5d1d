# src/oracle_rag/ranking/scoring.py
"""Component scorers for passage ranking."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import UTC, datetime

from oracle_rag.models import SearchResult, SemanticSearchQuery
from oracle_rag.models.taxonomy import IMPLEMENTATION_SIGNALS, framework_phrase, phase_for_stage
from oracle_rag.ranking.citations import authority_score, recency_score


def has_implementation_signal(text: str) -> bool:
    text_lower = text.lower()
    return any(signal in text_lower for signal in IMPLEMENTATION_SIGNALS)


class ScoreProvider(ABC):
    """Abstract base class for the six passage-level component scores.

    Every method returns a score in [0, 1]. Swap implementations to move
    from rules to a learned model, or to pin scores in tests.
    """

    @abstractmethod
    def semantic(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        """Embedding closeness between passage and query."""
        ...

    @abstractmethod
    def business_context(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        """Fit with the requested lifecycle stage, frameworks and complexity."""
        ...

    @abstractmethod
    def framework_alignment(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        """How many of the passage's framework tags the query names."""
        ...

    @abstractmethod
    def implementation(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        """Usefulness of the passage for putting advice into practice."""
        ...

    @abstractmethod
    def authority(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        """Trustworthiness of the passage's source."""
        ...

    @abstractmethod
    def recency(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        """Freshness of the passage."""
        ...


class RuleBasedScoreProvider(ScoreProvider):
    """Deterministic keyword and metadata rules.

    Args:
        clock: Returns "now" for recency scoring. Injectable for tests.
    """

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))

    def semantic(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        return result.similarity_score

    def business_context(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        filters = query.business_filters
        score = 0.0

        if filters.lifecycle_stages and result.business_phase:
            wanted = set(filters.lifecycle_stages)
            wanted |= {phase_for_stage(stage) for stage in filters.lifecycle_stages}
            if result.business_phase == "all" or result.business_phase in wanted:
                score += 0.3

        if filters.framework_focus and result.framework_tags:
            matches = [
                tag
                for tag in result.framework_tags
                if any(fw.lower() in tag.lower() for fw in filters.framework_focus)
            ]
            score += len(matches) / len(result.framework_tags) * 0.4

        if filters.complexity_levels and result.complexity_level:
            if result.complexity_level in filters.complexity_levels:
                score += 0.2

        return min(1.0, score)

    def framework_alignment(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        if not result.framework_tags:
            return 0.0
        query_lower = query.query_text.lower()
        score = 0.0
        for tag in result.framework_tags:
            if tag.lower() in query_lower or framework_phrase(tag) in query_lower:
                score += 0.25
        return min(1.0, score)

    def implementation(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        if not has_implementation_signal(query.query_text):
            return 0.5
        if result.complexity_level == "beginner":
            return 0.9
        if result.complexity_level == "intermediate":
            return 0.7
        return 0.5

    def authority(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        return authority_score(result)

    def recency(self, result: SearchResult, query: SemanticSearchQuery) -> float:
        return recency_score(result, now=self._clock())
