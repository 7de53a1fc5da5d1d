# src/oracle_rag/strategy/selector.py
"""Strategy selection and concurrent execution of framework search approaches."""

import asyncio
from dataclasses import dataclass, field
from typing import assert_never

from oracle_rag.exceptions import MalformedRequestError, SearchFanOutError
from oracle_rag.logging_config import get_logger
from oracle_rag.models import (
    ApproachQuery,
    FrameworkSearchStrategy,
    QueryClassification,
    SearchApproach,
    SearchResult,
    SearchStrategy,
    SemanticSearchQuery,
)
from oracle_rag.models.taxonomy import framework_phrase, phase_for_stage
from oracle_rag.search import VectorSearchEngine, merge_results
from oracle_rag.strategy.registry import STRATEGY_REGISTRY

logger = get_logger(__name__)


class QueryStrategySelector:
    """Chooses framework search strategies for a classified query.

    Args:
        registry: Strategies keyed by framework.
        relevance_gate: A framework's strategies are considered only when
            its relevance strictly exceeds this value.
        max_strategies: Maximum number of strategies returned.
    """

    def __init__(
        self,
        registry: dict[str, tuple[FrameworkSearchStrategy, ...]] | None = None,
        relevance_gate: float = 0.3,
        max_strategies: int = 3,
    ) -> None:
        self.registry = STRATEGY_REGISTRY if registry is None else registry
        self.relevance_gate = relevance_gate
        self.max_strategies = max_strategies

    def select(self, classification: QueryClassification) -> list[FrameworkSearchStrategy]:
        """Return up to ``max_strategies`` strategies, most effective first."""
        if not classification.original_query or not classification.original_query.strip():
            raise MalformedRequestError(
                "Query classification has no original query", field="original_query"
            )

        candidates: list[FrameworkSearchStrategy] = []
        for relevance in classification.relevant_frameworks(self.relevance_gate):
            for strategy in self.registry.get(relevance.framework, ()):
                score = self.effectiveness(strategy, classification, relevance.relevance_score)
                candidates.append(strategy.model_copy(update={"effectiveness_score": score}))

        candidates.sort(key=lambda s: s.effectiveness_score, reverse=True)
        selected = candidates[: self.max_strategies]
        logger.debug(
            "strategies_selected",
            considered=len(candidates),
            selected=[s.strategy_id for s in selected],
        )
        return selected

    @staticmethod
    def effectiveness(
        strategy: FrameworkSearchStrategy,
        classification: QueryClassification,
        framework_relevance: float,
    ) -> float:
        """Score how well a strategy's target profile fits the query.

        Framework relevance contributes half; stage, intent and complexity
        fit make up the rest.
        """
        context = strategy.search_context
        score = framework_relevance * 0.5

        stage = classification.primary_stage
        if stage == context.business_stage:
            score += 0.2
        elif stage is not None:
            if phase_for_stage(stage) == phase_for_stage(context.business_stage):
                score += 0.1

        if classification.primary_intent == context.primary_intent:
            score += 0.2
        elif context.primary_intent in classification.secondary_intents:
            score += 0.1

        if classification.complexity_preference == context.complexity_preference:
            score += 0.1

        return round(min(1.0, score), 4)

    def build_queries(
        self,
        strategy: FrameworkSearchStrategy,
        approach: SearchApproach,
        classification: QueryClassification,
    ) -> list[ApproachQuery]:
        """Expand one approach into concrete query strings."""
        expansion = approach.query_expansion
        base = " ".join([classification.original_query, *expansion.framework_terminology])
        framework = framework_phrase(strategy.framework)

        texts: list[str]
        match approach.kind:
            case "component_based":
                texts = [
                    " ".join([base, component, *keywords])
                    for component, keywords in expansion.component_keywords.items()
                ]
            case "scenario_driven":
                stages = [s.stage for s in classification.stage_signals] or [
                    strategy.search_context.business_stage
                ]
                texts = [f"{base} {framework} {stage.replace('_', ' ')}" for stage in stages]
            case "progression_aware":
                texts = [f"{base} {step}" for step in expansion.progression_steps]
            case "integration_focused":
                others = [
                    f.framework
                    for f in classification.relevant_frameworks(self.relevance_gate)
                    if f.framework != strategy.framework
                ]
                texts = [f"{base} {framework} {framework_phrase(o)} integration" for o in others]
            case _:
                assert_never(approach.kind)

        if not texts:
            # Nothing to fan out over: search once with the business context terms
            texts = [" ".join([base, *expansion.business_context_terms])]

        return [
            ApproachQuery(
                strategy_id=strategy.strategy_id,
                approach_name=approach.approach_name,
                query_text=text,
                filtering_criteria=approach.filtering_criteria,
                ranking_adjustments=approach.ranking_adjustments,
                weight=approach.weight,
            )
            for text in texts
        ]


@dataclass
class StrategySearchResult:
    """Merged passages from every approach of the selected strategies.

    Attributes:
        results: Deduplicated passages with approach boosts applied.
        queries: Every approach query that was issued.
        branch_errors: (label, exception) for approach queries that failed.
    """

    results: list[SearchResult]
    queries: list[ApproachQuery] = field(default_factory=list)
    branch_errors: list[tuple[str, BaseException]] = field(default_factory=list)


def boost_factor(
    result: SearchResult,
    approach_query: ApproachQuery,
    strategy: FrameworkSearchStrategy,
    approach: SearchApproach,
    classification: QueryClassification,
) -> float:
    """Multiplicative boost for a passage retrieved by an approach.

    Each boost is scaled by the approach weight, so a weight of 0 disables it.
    """
    adjustments = approach_query.ranking_adjustments
    weight = approach_query.weight
    factor = 1.0

    if any(strategy.framework in tag.lower() for tag in result.framework_tags):
        factor *= 1 + (adjustments.framework_boost - 1) * weight

    content = f"{result.title} {result.content}".lower()
    components = approach.query_expansion.component_keywords
    if any(component in content for component in components):
        factor *= 1 + (adjustments.component_boost - 1) * weight

    practical = result.complexity_level in ("beginner", "intermediate")
    implementation_terms = approach.query_expansion.implementation_terms
    if (classification.is_implementation_focused and practical) or any(
        term in content for term in implementation_terms
    ):
        factor *= 1 + (adjustments.implementation_boost - 1) * weight

    return factor


class StrategyExecutor:
    """Runs every approach query of the selected strategies concurrently.

    Failed approach queries are logged and reported; the search only fails
    when every one of them fails.
    """

    def __init__(
        self,
        engine: VectorSearchEngine,
        selector: QueryStrategySelector | None = None,
        max_concurrent: int = 8,
    ) -> None:
        self.engine = engine
        self.selector = selector or QueryStrategySelector()
        self.max_concurrent = max_concurrent

    async def aexecute(
        self,
        classification: QueryClassification,
        strategies: list[FrameworkSearchStrategy],
        base_query: SemanticSearchQuery,
    ) -> StrategySearchResult:
        planned: list[tuple[FrameworkSearchStrategy, SearchApproach, ApproachQuery]] = []
        for strategy in strategies:
            for approach in strategy.approaches:
                queries = self.selector.build_queries(strategy, approach, classification)
                planned.extend((strategy, approach, q) for q in queries)

        if not planned:
            return StrategySearchResult(results=[])

        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def run(approach_query: ApproachQuery) -> list[SearchResult]:
            criteria = approach_query.filtering_criteria
            filters = base_query.business_filters.model_copy(
                update={
                    "required_phases": list(criteria.business_phases),
                    "required_complexity": list(criteria.complexity_levels),
                    "required_categories": list(criteria.content_types),
                }
            )
            # Approach queries are already expanded; a plain semantic search suffices
            sub_query = base_query.model_copy(
                update={
                    "query_text": approach_query.query_text,
                    "business_filters": filters,
                    "search_strategy": SearchStrategy(
                        primary_method="semantic",
                        ranking_weights=base_query.search_strategy.ranking_weights,
                    ),
                    "performance_parameters": base_query.performance_parameters.model_copy(
                        update={"query_expansion": False}
                    ),
                }
            )
            async with semaphore:
                outcome = await self.engine.asearch(sub_query)
            return outcome.results

        outcomes = await asyncio.gather(
            *[run(approach_query) for _, _, approach_query in planned],
            return_exceptions=True,
        )

        boosted_sets: list[list[SearchResult]] = []
        errors: list[tuple[str, BaseException]] = []
        for i, ((strategy, approach, approach_query), outcome) in enumerate(
            zip(planned, outcomes, strict=True)
        ):
            label = f"{approach_query.strategy_id}/{approach_query.approach_name}#{i}"
            if isinstance(outcome, BaseException):
                logger.warning("approach_query_failed", branch=label, error=str(outcome))
                errors.append((label, outcome))
                continue
            boosted_sets.append(
                [
                    result.model_copy(
                        update={
                            "similarity_score": min(
                                1.0,
                                result.similarity_score
                                * boost_factor(
                                    result, approach_query, strategy, approach, classification
                                ),
                            )
                        }
                    )
                    for result in outcome
                ]
            )

        merged = merge_results(boosted_sets)
        if len(errors) == len(planned):
            raise SearchFanOutError(
                f"All {len(planned)} strategy queries failed",
                partial_results=merged,
                errors=errors,
            )

        logger.info(
            "strategy_search_completed",
            strategies=len(strategies),
            queries=len(planned),
            failed_queries=len(errors),
            count=len(merged),
        )
        return StrategySearchResult(
            results=merged,
            queries=[approach_query for _, _, approach_query in planned],
            branch_errors=errors,
        )
