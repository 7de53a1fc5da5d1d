# src/oracle_rag/assembly/metrics.py
"""Preliminary quality and confidence metrics for an assembled answer."""

from oracle_rag.assembly.conflicts import ConflictResolution
from oracle_rag.assembly.sources import PreparedSource
from oracle_rag.models import AssemblyContext, QualityMetrics
from oracle_rag.models.assembly import ConfidenceAssessment, SynthesizedContent
from oracle_rag.models.taxonomy import BUSINESS_VOCABULARY


def _clamp(value: float) -> float:
    return round(min(1.0, max(0.0, value)), 4)


def source_diversity(sources: list[PreparedSource]) -> float:
    """Distinct source types over 3, capped at 1. Zero sources score 0."""
    types = {s.chunk.source_type or "unknown" for s in sources}
    return _clamp(len(types) / 3)


def information_completeness(content: SynthesizedContent) -> float:
    score = 0.0
    if content.executive_summary:
        score += 0.3
    if content.detailed_explanation:
        score += 0.3
    if content.actionable_insights:
        score += 0.2
    if content.supporting_evidence:
        score += 0.2
    return _clamp(score)


def consistency(sources: list[PreparedSource], resolution: ConflictResolution) -> float:
    base = 0.8 if len(sources) > 1 else 0.6
    return _clamp(max(0.2, base - 0.1 * len(resolution.warnings)))


def business_relevance(content: SynthesizedContent, context: AssemblyContext) -> float:
    text = f"{context.original_query} {content.detailed_explanation}".lower()
    matches = sum(1 for word in BUSINESS_VOCABULARY if word in text)
    return _clamp(matches / len(BUSINESS_VOCABULARY))


def assess_quality(
    content: SynthesizedContent,
    sources: list[PreparedSource],
    resolution: ConflictResolution,
    context: AssemblyContext,
) -> QualityMetrics:
    n = len(sources)
    mean_relevance = sum(s.chunk.final_relevance_score for s in sources) / n if n else 0.0
    overall = (
        min(n / 5, 1.0) * 0.4
        + (0.3 if len(content.executive_summary) > 50 else 0.1)
        + 0.3 * mean_relevance
    )
    return QualityMetrics(
        overall_quality_score=_clamp(overall),
        source_diversity_score=source_diversity(sources),
        information_completeness=information_completeness(content),
        consistency_score=consistency(sources, resolution),
        actionability_score=_clamp(len(content.actionable_insights) / 3),
        evidence_strength=_clamp(len(content.supporting_evidence) / 5),
        business_relevance=business_relevance(content, context),
    )


def assess_confidence(
    content: SynthesizedContent,
    sources: list[PreparedSource],
    resolution: ConflictResolution,
) -> ConfidenceAssessment:
    n = len(sources)
    factors = {
        "source_credibility": 0.8 if n > 2 else (0.6 if n else 0.2),
        "information_consistency": max(0.2, 0.7 - 0.1 * len(resolution.warnings)),
        "coverage_completeness": 0.8 if content.supporting_evidence else (0.5 if n else 0.2),
        "methodological_rigor": 0.6,
    }

    uncertainty = []
    if n < 2:
        uncertainty.append("Limited source verification")
    if not content.supporting_evidence:
        uncertainty.append("Insufficient supporting evidence")
    if resolution.has_conflicts:
        uncertainty.append("Sources disagree on at least one point")

    insights = content.actionable_insights
    simple = sum(1 for i in insights if i.implementation_complexity == "simple")
    consensus = (0.7 if n > 1 else 0.5) if n else 0.0
    if resolution.has_conflicts:
        consensus -= 0.2

    return ConfidenceAssessment(
        overall_confidence=_clamp(sum(factors.values()) / len(factors)),
        source_reliability=_clamp(n / 3),
        information_completeness=information_completeness(content),
        consensus_level=_clamp(consensus),
        implementation_feasibility=_clamp(simple / len(insights) if insights else 0.5),
        uncertainty_areas=uncertainty,
        confidence_factors={k: round(v, 4) for k, v in factors.items()},
    )
