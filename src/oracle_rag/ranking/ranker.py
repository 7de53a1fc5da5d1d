# src/oracle_rag/ranking/ranker.py
"""Business-context ranker: re-scores, deduplicates and diversifies passages."""

from oracle_rag.logging_config import get_logger
from oracle_rag.models import (
    EnhancedSearchResult,
    RankingWeights,
    SearchResult,
    SemanticSearchQuery,
)
from oracle_rag.models.taxonomy import framework_display_name
from oracle_rag.ranking.citations import format_citation
from oracle_rag.ranking.scoring import RuleBasedScoreProvider, ScoreProvider
from oracle_rag.stores.base import query_terms

logger = get_logger(__name__)

DIVERSITY_OVERLAP_LIMIT = 0.7
DIVERSITY_ALWAYS_KEEP = 3
SNIPPET_LENGTH = 200


def weighted_relevance(components: dict[str, float], weights: RankingWeights) -> float:
    return (
        components["semantic_score"] * weights.semantic_similarity
        + components["business_context_score"] * weights.business_context_match
        + components["framework_alignment_score"] * weights.framework_relevance
        + components["implementation_score"] * weights.implementation_feasibility
        + components["authority_score"] * weights.authority_score
        + components["recency_score"] * weights.recency_score
    )


def diversify(results: list[EnhancedSearchResult], max_results: int) -> list[EnhancedSearchResult]:
    """Drop results whose key concepts mostly repeat earlier ones.

    A result is kept when less than 70% of its key concepts were already
    seen. The first three results are always kept. Stops at ``max_results``.
    """
    kept: list[EnhancedSearchResult] = []
    seen: set[str] = set()
    for result in results:
        if len(kept) >= max_results:
            break
        overlap = sum(1 for concept in result.key_concepts if concept in seen)
        ratio = overlap / max(1, len(result.key_concepts))
        if ratio < DIVERSITY_OVERLAP_LIMIT or len(kept) < DIVERSITY_ALWAYS_KEEP:
            kept.append(result)
            seen.update(result.key_concepts)
    return kept


def optimize_snippet(content: str, query_text: str, length: int = SNIPPET_LENGTH) -> str:
    """Preview window of ``content`` centred on the earliest query term it mentions.

    Passages that fit are returned whole. Without a matching term the
    opening of the passage is used. Cut edges are marked with "...".
    """
    if len(content) <= length:
        return content
    lowered = content.lower()
    hits = [i for i in (lowered.find(term) for term in query_terms(query_text)) if i >= 0]
    start = 0
    if hits:
        start = max(0, min(min(hits) - length // 2, len(content) - length))
    window = content[start : start + length].strip()
    prefix = "..." if start > 0 else ""
    suffix = "..." if start + length < len(content) else ""
    return f"{prefix}{window}{suffix}"


class BusinessContextRanker:
    """Re-scores raw passages against the business context of a query.

    Args:
        score_provider: Source of the six component scores. Defaults to
            the rule-based provider.
    """

    def __init__(self, score_provider: ScoreProvider | None = None) -> None:
        self.score_provider = score_provider or RuleBasedScoreProvider()

    def score(self, result: SearchResult, query: SemanticSearchQuery) -> EnhancedSearchResult:
        provider = self.score_provider
        components = {
            "semantic_score": provider.semantic(result, query),
            "business_context_score": provider.business_context(result, query),
            "framework_alignment_score": provider.framework_alignment(result, query),
            "implementation_score": provider.implementation(result, query),
            "authority_score": provider.authority(result, query),
            "recency_score": provider.recency(result, query),
        }
        final = weighted_relevance(components, query.search_strategy.ranking_weights)
        return EnhancedSearchResult(
            **result.model_dump(include=set(SearchResult.model_fields)),
            **components,
            final_relevance_score=final,
            result_explanation=self._explain(components, final, result),
            key_concepts=list(result.framework_tags),
            implementation_complexity=result.complexity_level or "intermediate",
        )

    def rank(
        self, raw_results: list[SearchResult], query: SemanticSearchQuery
    ) -> list[EnhancedSearchResult]:
        """Score, sort, deduplicate and (optionally) diversify passages.

        The output is non-increasing in ``final_relevance_score`` and holds
        at most ``max_results`` passages.
        """
        scored = [self.score(result, query) for result in raw_results]
        # sorted() is stable, so equal scores keep retrieval order
        scored = sorted(scored, key=lambda r: r.final_relevance_score, reverse=True)

        unique: list[EnhancedSearchResult] = []
        seen_keys: set[str] = set()
        for result in scored:
            if result.dedup_key in seen_keys:
                continue
            seen_keys.add(result.dedup_key)
            unique.append(result)

        params = query.performance_parameters
        if params.result_diversification:
            ranked = diversify(unique, params.max_results)
        else:
            ranked = unique[: params.max_results]

        enhancement = query.result_enhancement
        if enhancement.snippet_optimization or enhancement.include_citations:
            ranked = [self._enhance(result, query) for result in ranked]

        logger.debug(
            "passages_ranked",
            input_count=len(raw_results),
            unique_count=len(unique),
            output_count=len(ranked),
        )
        return ranked

    @staticmethod
    def _enhance(result: EnhancedSearchResult, query: SemanticSearchQuery) -> EnhancedSearchResult:
        enhancement = query.result_enhancement
        update: dict = {}
        if enhancement.snippet_optimization:
            update["content_preview"] = optimize_snippet(result.content, query.query_text)
        if enhancement.include_citations:
            update["metadata"] = {**result.metadata, "citation": format_citation(result)}
        return result.model_copy(update=update)

    @staticmethod
    def _explain(components: dict[str, float], final: float, result: SearchResult) -> str:
        reasons = []
        if components["business_context_score"] >= 0.3:
            reasons.append("matches your business stage")
        if components["framework_alignment_score"] > 0:
            names = ", ".join(framework_display_name(t) for t in result.framework_tags)
            reasons.append(f"aligned with {names}")
        if components["implementation_score"] >= 0.7:
            reasons.append("practical to implement")
        if not reasons:
            reasons.append("general business relevance")
        return f"Relevance: {final * 100:.1f}% - " + "; ".join(reasons)
