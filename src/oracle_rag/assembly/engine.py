# src/oracle_rag/assembly/engine.py
"""Context assembly engine: turns ranked passages into a structured answer."""

import time
from collections.abc import Callable
from datetime import UTC, datetime

from oracle_rag.assembly.conflicts import ConflictResolution, resolve_conflicts
from oracle_rag.assembly.metrics import assess_confidence, assess_quality
from oracle_rag.assembly.organizers import build_structure
from oracle_rag.assembly.roadmap import build_roadmap
from oracle_rag.assembly.sources import PreparedSource, prepare_sources
from oracle_rag.assembly.synthesis import TemplateSynthesizer
from oracle_rag.exceptions import MalformedRequestError
from oracle_rag.logging_config import get_logger
from oracle_rag.models import (
    AssembledResponse,
    AssemblyContext,
    AssemblyStrategy,
    BusinessContext,
    EnhancedSearchResult,
    QualityMetrics,
    QualityRequirements,
    QueryClassification,
)
from oracle_rag.models.assembly import (
    ORGANIZATION_KINDS,
    AssemblyMetadata,
    ConflictPolicy,
    SourceIntegration,
    SynthesizedContent,
)

logger = get_logger(__name__)

NO_SOURCES_WARNING = "Insufficient source diversity: no source passages"
LIMITED_DIVERSITY_WARNING = "Limited source diversity"
LOW_CONFIDENCE_WARNING = "Low confidence score"
PRIMARY_SOURCE_COUNT = 3

_DEFAULT_STRATEGIES: dict[str, AssemblyStrategy] = {
    "implementation": AssemblyStrategy(
        synthesis_approach="focused",
        source_integration_method="priority",
        content_organization="action_oriented",
        redundancy_handling="consolidate",
        gap_handling="research_additional",
    ),
    "learning": AssemblyStrategy(
        synthesis_approach="comprehensive",
        source_integration_method="hierarchical",
        content_organization="educational",
        redundancy_handling="highlight_variations",
        gap_handling="acknowledge",
    ),
    "troubleshooting": AssemblyStrategy(
        synthesis_approach="focused",
        source_integration_method="complementary",
        content_organization="problem_solution",
        redundancy_handling="eliminate",
        gap_handling="infer_safely",
    ),
}

_FALLBACK_STRATEGY = AssemblyStrategy(content_organization="framework_based")


def default_strategy_for(intent: str) -> AssemblyStrategy:
    """Assembly strategy suited to a user intent."""
    return _DEFAULT_STRATEGIES.get(intent, _FALLBACK_STRATEGY)


def candidate_strategies(intent: str, count: int) -> list[AssemblyStrategy]:
    """The intent's default strategy, then alternatives with other organizations."""
    primary = default_strategy_for(intent)
    strategies = [primary]
    for kind in ORGANIZATION_KINDS:
        if len(strategies) >= count:
            break
        if kind != primary.content_organization.kind:
            strategies.append(
                AssemblyStrategy(**{**primary.model_dump(), "content_organization": kind})
            )
    return strategies[:count]


def build_context(
    classification: QueryClassification,
    ranked: list[EnhancedSearchResult],
    strategy: AssemblyStrategy | None = None,
    quality_requirements: QualityRequirements | None = None,
) -> AssemblyContext:
    """Create the immutable assembly input for one attempt."""
    business_context = BusinessContext(
        business_stage=classification.primary_stage,
        primary_frameworks=tuple(
            f.framework for f in classification.relevant_frameworks()
        ),
        business_scenarios=classification.scenarios,
        implementation_focus=classification.is_implementation_focused,
        urgency_level=classification.urgency_level,
        complexity_preference=classification.complexity_preference,
    )
    return AssemblyContext(
        original_query=classification.original_query,
        user_intent=classification.primary_intent,
        business_context=business_context,
        source_chunks=tuple(ranked),
        assembly_strategy=strategy or default_strategy_for(classification.primary_intent),
        quality_requirements=quality_requirements or QualityRequirements(),
    )


class ContextAssemblyEngine:
    """Single-pass, state-free assembly of one answer.

    Thin inputs never raise: they degrade the answer and add warnings. Only
    malformed contexts raise MalformedRequestError.

    Args:
        conflict_policy: Policy used when the context's strategy doesn't set one.
        synthesizer: Produces the answer content. Defaults to templates.
        clock: Returns the assembly timestamp. Injectable for tests.
    """

    def __init__(
        self,
        conflict_policy: ConflictPolicy = "prefer_authority",
        synthesizer: TemplateSynthesizer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.conflict_policy = conflict_policy
        self.synthesizer = synthesizer or TemplateSynthesizer()
        self._clock = clock or (lambda: datetime.now(UTC))

    def assemble(self, context: AssemblyContext) -> AssembledResponse:
        self._validate(context)
        start = time.perf_counter()
        policy = context.assembly_strategy.conflict_policy or self.conflict_policy

        prepared = prepare_sources(context)
        resolution = resolve_conflicts(prepared, policy)
        sources = resolution.sources
        organization = context.assembly_strategy.content_organization
        structure = build_structure(organization, sources, context)
        content = self.synthesizer.synthesize(structure, sources, resolution, context)
        roadmap = build_roadmap(content.actionable_insights, sources, resolution)
        quality = assess_quality(content, sources, resolution, context)
        confidence = assess_confidence(content, sources, resolution)

        warnings = self._warnings(context, quality, confidence.overall_confidence, resolution)
        checks = self._quality_checks(context, content, quality)
        duration_ms = round((time.perf_counter() - start) * 1000, 3)

        logger.info(
            "context_assembled",
            context_id=context.context_id,
            organization=structure.organization_type,
            source_count=len(context.source_chunks),
            warnings=len(warnings),
            duration_ms=duration_ms,
        )
        return AssembledResponse(
            context_id=context.context_id,
            synthesized_content=content,
            quality_metrics=quality,
            source_integration=self._source_integration(sources, resolution),
            implementation_roadmap=roadmap,
            confidence_assessment=confidence,
            assembly_metadata=AssemblyMetadata(
                assembly_timestamp=self._clock(),
                processing_duration_ms=duration_ms,
                source_count=len(context.source_chunks),
                quality_checks_passed=checks,
                assembly_warnings=warnings,
            ),
        )

    @staticmethod
    def _validate(context: AssemblyContext) -> None:
        if not context.original_query or not context.original_query.strip():
            raise MalformedRequestError(
                "Assembly context has no original query", field="original_query"
            )
        if getattr(context, "assembly_strategy", None) is None:
            raise MalformedRequestError(
                "Assembly context has no assembly strategy", field="assembly_strategy"
            )

    @staticmethod
    def _warnings(
        context: AssemblyContext,
        quality: QualityMetrics,
        confidence: float,
        resolution: ConflictResolution,
    ) -> list[str]:
        n = len(context.source_chunks)
        minimum = context.quality_requirements.minimum_source_count
        warnings = []
        if n == 0:
            warnings.append(NO_SOURCES_WARNING)
        if n < 3:
            warnings.append(LIMITED_DIVERSITY_WARNING)
        if n < minimum:
            warnings.append(f"Below minimum source count ({n} < {minimum})")
        if confidence < 0.7:
            warnings.append(LOW_CONFIDENCE_WARNING)
        if quality.evidence_strength < context.quality_requirements.evidence_strength:
            warnings.append("Evidence strength below requirement")
        warnings.extend(resolution.warnings)
        return warnings

    @staticmethod
    def _quality_checks(
        context: AssemblyContext, content: SynthesizedContent, quality: QualityMetrics
    ) -> list[str]:
        requirements = context.quality_requirements
        known = context.source_ids
        passed = []

        traced = all(set(i.source_ids) <= known for i in content.actionable_insights) and all(
            e.source_chunk_id in known for e in content.supporting_evidence
        )
        if traced:
            passed.append("source_traceability")
        else:
            logger.error("untraceable_content", context_id=context.context_id)
        if len(context.source_chunks) >= requirements.minimum_source_count:
            passed.append("minimum_source_count")
        if len(content.detailed_explanation) <= requirements.maximum_response_length:
            passed.append("response_length")
        if quality.consistency_score >= requirements.consistency_threshold:
            passed.append("consistency")
        if quality.evidence_strength >= requirements.evidence_strength:
            passed.append("evidence_strength")
        return passed

    @staticmethod
    def _source_integration(
        sources: list[PreparedSource], resolution: ConflictResolution
    ) -> SourceIntegration:
        # Retained sources only; both flag_both sides stay primary or supporting
        ranked = [s.source_id for s in sources]
        return SourceIntegration(
            primary_sources=ranked[:PRIMARY_SOURCE_COUNT],
            supporting_sources=ranked[PRIMARY_SOURCE_COUNT:],
            conflicting_sources=list(resolution.conflicting_ids),
            cross_references=resolution.cross_references,
            source_types=sorted({s.chunk.source_type or "unknown" for s in sources}),
        )
