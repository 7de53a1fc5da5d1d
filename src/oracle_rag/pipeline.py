# src/oracle_rag/pipeline.py
"""End-to-end advice pipeline.

classify -> select strategies -> search (primary + strategy fan-out) ->
rank passages -> assemble candidates -> rank candidates -> assess quality
-> optional LLM answer.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4

from oracle_rag.assembly import ContextAssemblyEngine, build_context, candidate_strategies
from oracle_rag.classifier import KeywordQueryClassifier, QueryClassifier
from oracle_rag.evaluation import NO_QUALIFYING_CANDIDATES, QualityAssessor, ResponseRanker
from oracle_rag.exceptions import MalformedRequestError, SearchFanOutError, UpstreamError
from oracle_rag.logging_config import bind_request_context, clear_request_context, get_logger
from oracle_rag.models import (
    AssembledResponse,
    AssemblyStrategy,
    BusinessFilters,
    CandidateResponse,
    EnhancedSearchResult,
    QualityAssessment,
    QualityRequirements,
    QueryClassification,
    RankingRequest,
    RankingResult,
    SearchResult,
    SemanticSearchQuery,
)
from oracle_rag.models.ranking import GenerationMetadata
from oracle_rag.models.strategy import FrameworkSearchStrategy
from oracle_rag.providers import LLMClient
from oracle_rag.ranking import BusinessContextRanker, format_citation
from oracle_rag.search import VectorSearchEngine, merge_results
from oracle_rag.settings import Settings
from oracle_rag.strategy import QueryStrategySelector, StrategyExecutor

logger = get_logger(__name__)

SYNTHESIS_PROMPT = """You are a business advisor. Using only the sources below, answer the question.
Cite sources as [n]. If the sources don't cover something, say so.

Sources:
{context}

Draft outline:
{outline}

Question: {query}

Answer:"""


@dataclass
class PipelineResult:
    """Everything produced for one query.

    Attributes:
        request_id: Identifier bound into every log line of the request.
        classification: The classification the pipeline ran on.
        response: The selected assembled response.
        sources: Ranked passages the response was assembled from.
        ranking: Candidate ranking, when more than one candidate was assembled.
        quality: Six-dimension quality assessment of the selected response.
        answer: LLM-synthesized answer, when an LLM client is configured.
        timings: Milliseconds spent per stage.
        warnings: Degradation warnings from search, assembly and ranking.
        search_errors: (branch_label, exception) for failed search branches.
    """

    request_id: str
    classification: QueryClassification
    response: AssembledResponse
    sources: list[EnhancedSearchResult]
    ranking: RankingResult | None = None
    quality: QualityAssessment | None = None
    answer: str | None = None
    timings: dict[str, float] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    search_errors: list[tuple[str, BaseException]] = field(default_factory=list)

    @property
    def text(self) -> str:
        """The LLM answer if there is one, otherwise the assembled summary."""
        if self.answer:
            return self.answer
        return self.response.synthesized_content.executive_summary

    def telemetry(self) -> dict[str, Any]:
        """Payload for an external analytics sink: timings, scores, citations."""
        source_ids = {s.dedup_key for s in self.sources}
        metrics = self.response.quality_metrics
        return {
            "request_id": self.request_id,
            "timings_ms": dict(self.timings),
            "quality": {
                "overall_quality_score": metrics.overall_quality_score,
                "assessment_score": self.quality.overall_score if self.quality else None,
                "confidence": self.response.confidence_assessment.overall_confidence,
            },
            "citations": [
                {
                    "evidence_id": e.evidence_id,
                    "source_id": e.source_chunk_id,
                    "citation": e.citation,
                    "traced": e.source_chunk_id in source_ids,
                }
                for e in self.response.synthesized_content.supporting_evidence
            ],
            "warnings": list(self.warnings),
        }


class AdvicePipeline:
    """Runs one query through every stage.

    Holds no per-request state, so one instance can serve concurrent
    requests. The search cache inside the engine is the only shared state.

    Args:
        engine: Vector search engine over the corpus.
        settings: Behavioral settings.
        selector: Strategy selector. Defaults to the built-in registry.
        passage_ranker: Business-context ranker for retrieved passages.
        assembler: Context assembly engine.
        response_ranker: Ranks candidate responses.
        quality_assessor: Six-dimension quality rubric.
        classifier: Used when a query is passed as plain text.
        llm_client: Optional LLM for answer synthesis.
    """

    def __init__(
        self,
        engine: VectorSearchEngine,
        settings: Settings | None = None,
        selector: QueryStrategySelector | None = None,
        passage_ranker: BusinessContextRanker | None = None,
        assembler: ContextAssemblyEngine | None = None,
        response_ranker: ResponseRanker | None = None,
        quality_assessor: QualityAssessor | None = None,
        classifier: QueryClassifier | None = None,
        llm_client: LLMClient | None = None,
    ) -> None:
        self.engine = engine
        self.settings = settings or Settings()
        self.selector = selector or QueryStrategySelector(
            relevance_gate=self.settings.strategy_relevance_gate,
            max_strategies=self.settings.max_strategies,
        )
        self.executor = StrategyExecutor(
            engine,
            selector=self.selector,
            max_concurrent=self.settings.max_concurrent_searches,
        )
        self.passage_ranker = passage_ranker or BusinessContextRanker()
        self.assembler = assembler or ContextAssemblyEngine(
            conflict_policy=self.settings.conflict_policy
        )
        self.response_ranker = response_ranker or ResponseRanker()
        self.quality_assessor = quality_assessor or QualityAssessor()
        self.classifier = classifier or KeywordQueryClassifier()
        self._llm_client = llm_client
        self.synthesis_prompt = self.settings.synthesis_prompt or SYNTHESIS_PROMPT

    def ask(
        self,
        query: str | QueryClassification,
        candidates: int | None = None,
    ) -> PipelineResult:
        """Synchronous wrapper around :meth:`aask`.

        Must not be called from a running event loop.
        """
        return asyncio.run(self.aask(query, candidates=candidates))

    async def aask(
        self,
        query: str | QueryClassification,
        candidates: int | None = None,
    ) -> PipelineResult:
        """Answer a query.

        Args:
            query: Raw text (classified with the keyword classifier) or a
                pre-built QueryClassification.
            candidates: Number of candidate responses to assemble. Defaults
                to ``settings.max_candidates``.

        Returns:
            PipelineResult. Thin inputs degrade the response and add warnings.

        Raises:
            MalformedRequestError: Before any search, if the query is empty.
            UpstreamError: If the embedder, the store or the LLM fails.
        """
        request_id = str(uuid4())
        timings: dict[str, float] = {}
        clock = time.perf_counter()

        def lap(stage: str) -> None:
            nonlocal clock
            now = time.perf_counter()
            timings[stage] = round((now - clock) * 1000, 2)
            clock = now

        classification = self._classify(query)
        bind_request_context(request_id=request_id, query=classification.original_query)
        try:
            lap("classify")

            strategies = self.selector.select(classification)
            lap("select_strategies")

            search_query = self.build_search_query(classification)
            warnings: list[str] = []
            sources, search_errors = await self._retrieve(
                classification, strategies, search_query, warnings
            )
            lap("search")

            ranked = self.passage_ranker.rank(sources, search_query)
            lap("rank_passages")

            count = candidates if candidates is not None else self.settings.max_candidates
            responses = self._assemble(classification, ranked, max(1, count))
            lap("assemble")

            response, ranking = self._select(classification, ranked, responses, warnings)
            lap("rank_candidates")

            quality = self.quality_assessor.assess(response, classification, sources=ranked)
            lap("assess_quality")

            answer = None
            if ranked and self._llm_client is not None:
                answer = await self._synthesize_answer(classification, response, ranked)
                lap("synthesize")

            warnings = list(dict.fromkeys(response.assembly_metadata.assembly_warnings + warnings))
            timings["total"] = round(sum(timings.values()), 2)
            logger.info(
                "pipeline_completed",
                sources=len(ranked),
                candidates=len(responses),
                quality=quality.overall_score,
                warnings=len(warnings),
                duration_ms=timings["total"],
            )
            return PipelineResult(
                request_id=request_id,
                classification=classification,
                response=response,
                sources=ranked,
                ranking=ranking,
                quality=quality,
                answer=answer,
                timings=timings,
                warnings=warnings,
                search_errors=search_errors,
            )
        finally:
            clear_request_context()

    def build_search_query(self, classification: QueryClassification) -> SemanticSearchQuery:
        """Primary search request derived from the classification and settings."""
        stage = classification.primary_stage
        return SemanticSearchQuery(
            query_text=classification.original_query,
            search_strategy=self.settings.search_strategy(),
            business_filters=BusinessFilters(
                lifecycle_stages=[stage] if stage else [],
                industry_verticals=list(classification.industry_hints),
                functional_areas=list(classification.functional_areas),
                framework_focus=[
                    f.framework
                    for f in classification.relevant_frameworks(
                        self.settings.strategy_relevance_gate
                    )
                ],
                business_scenarios=list(classification.scenarios),
                complexity_levels=(
                    [classification.complexity_preference]
                    if classification.complexity_preference
                    else []
                ),
            ),
            performance_parameters=self.settings.performance_parameters(),
            result_enhancement=self.settings.result_enhancement(),
        )

    def _classify(self, query: str | QueryClassification) -> QueryClassification:
        if isinstance(query, QueryClassification):
            if not query.original_query.strip():
                raise MalformedRequestError(
                    "Classification has an empty original_query", field="original_query"
                )
            return query
        return self.classifier.classify(query)

    async def _retrieve(
        self,
        classification: QueryClassification,
        strategies: list[FrameworkSearchStrategy],
        search_query: SemanticSearchQuery,
        warnings: list[str],
    ) -> tuple[list[SearchResult], list[tuple[str, BaseException]]]:
        """Primary search and strategy fan-out, concurrently.

        A primary failure propagates. A strategy fan-out in which every
        branch failed only degrades the answer.
        """
        primary, strategic = await asyncio.gather(
            self.engine.asearch(search_query),
            self.executor.aexecute(classification, strategies, search_query),
            return_exceptions=True,
        )
        if isinstance(primary, BaseException):
            raise primary

        errors = list(primary.branch_errors)
        strategy_results: list[SearchResult] = []
        if isinstance(strategic, SearchFanOutError):
            logger.warning("strategy_search_failed", failed_queries=len(strategic.errors))
            warnings.append(f"All {len(strategic.errors)} strategy searches failed")
            errors.extend(strategic.errors)
        elif isinstance(strategic, BaseException):
            raise strategic
        else:
            strategy_results = strategic.results
            errors.extend(strategic.branch_errors)
            if strategic.branch_errors:
                warnings.append(
                    f"{len(strategic.branch_errors)} of {len(strategic.queries)} "
                    "strategy searches failed"
                )
        return merge_results([primary.results, strategy_results]), errors

    def _assemble(
        self,
        classification: QueryClassification,
        ranked: list[EnhancedSearchResult],
        count: int,
    ) -> list[tuple[AssemblyStrategy, AssembledResponse]]:
        requirements = QualityRequirements(minimum_source_count=self.settings.minimum_source_count)
        return [
            (
                strategy,
                self.assembler.assemble(
                    build_context(classification, ranked, strategy, requirements)
                ),
            )
            for strategy in candidate_strategies(classification.primary_intent, count)
        ]

    def _select(
        self,
        classification: QueryClassification,
        ranked: list[EnhancedSearchResult],
        responses: list[tuple[AssemblyStrategy, AssembledResponse]],
        warnings: list[str],
    ) -> tuple[AssembledResponse, RankingResult | None]:
        if len(responses) == 1:
            return responses[0][1], None

        request = RankingRequest(
            query_context=classification,
            candidate_responses=tuple(
                CandidateResponse(
                    assembled_response=response,
                    source_results=tuple(ranked),
                    generation_metadata=GenerationMetadata(
                        processing_time_ms=response.assembly_metadata.processing_duration_ms,
                        source_count=response.assembly_metadata.source_count,
                        assembly_strategy=strategy.content_organization.kind,
                    ),
                )
                for strategy, response in responses
            ),
            ranking_criteria=self.settings.ranking_criteria(),
        )
        ranking = self.response_ranker.rank(request)
        if ranking.best is None:
            # Nothing cleared the floor; return the intent's default but say so
            warnings.append(f"{NO_QUALIFYING_CANDIDATES}: returning the default assembly")
            return responses[0][1], ranking
        return ranking.best.candidate.assembled_response, ranking

    async def _synthesize_answer(
        self,
        classification: QueryClassification,
        response: AssembledResponse,
        sources: list[EnhancedSearchResult],
    ) -> str:
        """Synthesize a prose answer from the ranked passages using an LLM."""
        if self._llm_client is None:
            return ""

        context_parts = []
        for i, source in enumerate(sources, 1):
            context_parts.append(f"[{i}] {format_citation(source)}\n{source.content}")

        content = response.synthesized_content
        bullets = [f"- {i.insight_text}" for i in content.actionable_insights]
        outline = "\n".join([content.executive_summary, *bullets])
        prompt = self.synthesis_prompt.format(
            context="\n\n".join(context_parts),
            outline=outline,
            query=classification.original_query,
        )

        try:
            answer = await self._llm_client.acomplete(
                messages=[{"role": "user", "content": prompt}],
                temperature=self.settings.synthesis_temperature,
            )
        except Exception as e:
            raise UpstreamError(f"Answer synthesis failed: {e}", stage="llm") from e
        return answer.strip()
