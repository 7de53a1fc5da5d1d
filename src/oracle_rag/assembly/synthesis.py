# src/oracle_rag/assembly/synthesis.py
"""Template synthesis of the structured answer from organized sources."""

import re

from oracle_rag.assembly.conflicts import ConflictResolution
from oracle_rag.assembly.organizers import ContentStructure
from oracle_rag.assembly.sources import PreparedSource, first_sentence
from oracle_rag.models import ActionableInsight, AssemblyContext, Evidence
from oracle_rag.models.assembly import FrameworkIntegration, SynthesizedContent
from oracle_rag.models.taxonomy import framework_display_name, framework_phrase
from oracle_rag.ranking.citations import format_citation

LIMITED_DIVERSITY = "Limited source diversity may affect comprehensiveness"
NO_SOURCES = "No source passages were available; guidance is general and unverified"

_INSIGHT_LIMITS = {"comprehensive": 5, "layered": 5, "comparative": 5, "focused": 3}
_EVIDENCE_LIMITS = {"sparse": 2, "moderate": 5, "detailed": 10}
_COMPLEXITY = {"beginner": "simple", "intermediate": "moderate", "advanced": "complex"}
_TIMEFRAMES = {
    "critical": "this week",
    "high": "1-2 weeks",
    "medium": "1-3 months",
    "low": "3-6 months",
}
_PREREQUISITES = {
    "simple": [],
    "moderate": ["Baseline metrics for current performance"],
    "complex": ["Baseline metrics for current performance", "A dedicated owner for the initiative"],
}
FRAMEWORK_SUCCESS_METRICS: dict[str, list[str]] = {
    "grand_slam_offers": ["Offer conversion rate", "Average price per sale"],
    "value_equation": ["Perceived value in customer feedback", "Conversion rate"],
    "core_four": ["Leads per channel per week", "Cost per lead"],
    "closer_framework": ["Close rate", "Sales cycle length"],
    "ltv_cac_optimization": ["LTV to CAC ratio", "CAC payback period"],
    "lead_magnets": ["Opt-in rate", "Lead to customer conversion"],
    "pricing_psychology": ["Average order value", "Gross margin"],
    "cash_flow_management": ["Months of runway", "Cash collected up front"],
    "team_building": ["Time to hire", "Owner hours per week"],
    "operational_excellence": ["Documented processes", "Error rate"],
    "acquisition_strategy": ["Deal pipeline", "Post-acquisition revenue"],
}
DEFAULT_SUCCESS_METRICS = ["Measurable improvement in the target metric"]

_STAT_RE = re.compile(r"\d+(\.\d+)?\s?%|\$\s?\d")


def _priority(source: PreparedSource, urgency: str) -> str:
    if source.immediacy > 0.8 and urgency in ("high", "critical"):
        return "critical"
    if source.immediacy > 0.7:
        return "high"
    if source.strategic_value > 0.6:
        return "medium"
    return "low"


def _impact(source: PreparedSource) -> str:
    score = 0.5 * source.chunk.final_relevance_score + 0.5 * source.business_alignment
    if score >= 0.8:
        return "transformational"
    if score >= 0.6:
        return "significant"
    if score >= 0.4:
        return "moderate"
    return "minimal"


def _evidence_type(source: PreparedSource) -> str:
    chunk = source.chunk
    if chunk.source_type == "case_study" or chunk.authority_level == "verified_case_study":
        return "case_study"
    if _STAT_RE.search(chunk.content):
        return "statistical"
    if chunk.source_type == "framework" or source.framework_mappings:
        return "framework_principle"
    return "expert_opinion"


def _ordered_sources(structure: ContentStructure) -> list[PreparedSource]:
    """Distinct sources in section order."""
    ordered: dict[str, PreparedSource] = {}
    for section in structure.sections:
        for source in section.sources:
            ordered.setdefault(source.source_id, source)
    return list(ordered.values())


class TemplateSynthesizer:
    """Builds the answer deterministically from passage text.

    Every insight and evidence item carries the id of the passage it came
    from, so the answer never asserts anything without a source.
    """

    def synthesize(
        self,
        structure: ContentStructure,
        sources: list[PreparedSource],
        resolution: ConflictResolution,
        context: AssemblyContext,
    ) -> SynthesizedContent:
        # Sections may not cover every source (action buckets, educational levels)
        ordered = _ordered_sources(structure)
        ordered += [s for s in sources if s.source_id not in {o.source_id for o in ordered}]

        return SynthesizedContent(
            executive_summary=self.executive_summary(ordered, context),
            detailed_explanation=self.detailed_explanation(structure, ordered, context),
            framework_integration=self.framework_integration(ordered, context),
            actionable_insights=self.actionable_insights(ordered, context),
            supporting_evidence=self.supporting_evidence(ordered, context),
            potential_limitations=self.limitations(ordered, resolution, context),
        )

    def executive_summary(self, sources: list[PreparedSource], context: AssemblyContext) -> str:
        query = context.original_query.strip()
        if not sources:
            return (
                f"No source material was available to answer '{query}'. "
                "Treat the guidance below as general and verify it before acting."
            )
        frameworks = []
        for source in sources:
            for framework in source.framework_mappings:
                name = framework_display_name(framework)
                if name not in frameworks:
                    frameworks.append(name)
        lead = first_sentence(sources[0].chunk.content)
        basis = f"{len(sources)} source{'s' if len(sources) != 1 else ''}"
        if frameworks:
            basis += f" covering {', '.join(frameworks[:3])}"
        return f"Based on {basis}, the key guidance for '{query}' is: {lead}"

    def detailed_explanation(
        self,
        structure: ContentStructure,
        sources: list[PreparedSource],
        context: AssemblyContext,
    ) -> str:
        if not sources:
            return (
                "The knowledge base returned no passages for this question, so no "
                "framework-specific explanation can be given."
            )
        citation_index = {s.source_id: i for i, s in enumerate(sources, start=1)}
        paragraphs = []
        for section in structure.sections:
            if not section.sources:
                continue
            sentences = [
                f"{first_sentence(s.chunk.content)} [{citation_index[s.source_id]}]"
                for s in section.sources[:3]
            ]
            paragraphs.append(f"{section.title}: " + " ".join(sentences))
        if not paragraphs:
            paragraphs.append(
                " ".join(
                    f"{first_sentence(s.chunk.content)} [{citation_index[s.source_id]}]"
                    for s in sources[:3]
                )
            )
        text = "\n\n".join(paragraphs)
        limit = context.quality_requirements.maximum_response_length
        if len(text) > limit:
            text = text[: limit - 3].rstrip() + "..."
        return text

    def framework_integration(
        self, sources: list[PreparedSource], context: AssemblyContext
    ) -> list[FrameworkIntegration]:
        by_framework: dict[str, list[PreparedSource]] = {}
        for source in sources:
            for framework in source.framework_mappings:
                by_framework.setdefault(framework, []).append(source)

        integrations = []
        for framework, members in by_framework.items():
            others = [framework_display_name(f) for f in by_framework if f != framework]
            relevance = sum(m.chunk.final_relevance_score for m in members) / len(members)
            integrations.append(
                FrameworkIntegration(
                    framework=framework_display_name(framework),
                    relevance_to_query=round(relevance, 4),
                    integration_points=others,
                    application_guidance=(
                        f"Apply {framework_phrase(framework)} using: "
                        f"{first_sentence(members[0].chunk.content, limit=160)}"
                    ),
                    success_indicators=FRAMEWORK_SUCCESS_METRICS.get(
                        framework, DEFAULT_SUCCESS_METRICS
                    ),
                    source_ids=[m.source_id for m in members],
                )
            )
        integrations.sort(key=lambda i: i.relevance_to_query, reverse=True)
        return integrations

    def actionable_insights(
        self, sources: list[PreparedSource], context: AssemblyContext
    ) -> list[ActionableInsight]:
        strategy = context.assembly_strategy
        limit = _INSIGHT_LIMITS[strategy.synthesis_approach]
        urgency = context.business_context.urgency_level

        insights: list[ActionableInsight] = []
        by_text: dict[str, ActionableInsight] = {}
        for source in sources:
            text = first_sentence(source.chunk.content)
            if not text:
                continue
            key = text.lower()
            if key in by_text:
                match strategy.redundancy_handling:
                    case "eliminate":
                        continue
                    case "consolidate":
                        existing = by_text[key]
                        existing.source_ids.append(source.source_id)
                        continue
                    case "highlight_variations":
                        pass
            if len(insights) >= limit:
                continue

            complexity = _COMPLEXITY.get(source.chunk.implementation_complexity, "moderate")
            priority = _priority(source, urgency)
            primary = source.primary_framework
            insight = ActionableInsight(
                insight_id=f"insight_{len(insights) + 1:03d}",
                insight_text=text,
                priority_level=priority,
                implementation_complexity=complexity,
                expected_impact=_impact(source),
                prerequisites=list(_PREREQUISITES[complexity]),
                success_metrics=FRAMEWORK_SUCCESS_METRICS.get(primary, DEFAULT_SUCCESS_METRICS),
                timeframe=_TIMEFRAMES[priority],
                source_ids=[source.source_id],
            )
            by_text.setdefault(key, insight)
            insights.append(insight)
        return insights

    def supporting_evidence(
        self, sources: list[PreparedSource], context: AssemblyContext
    ) -> list[Evidence]:
        limit = _EVIDENCE_LIMITS[context.quality_requirements.citation_density]
        evidence = []
        for i, source in enumerate(sources[:limit], start=1):
            chunk = source.chunk
            evidence.append(
                Evidence(
                    evidence_id=f"evidence_{i:03d}",
                    evidence_text=chunk.preview,
                    source_chunk_id=source.source_id,
                    evidence_type=_evidence_type(source),
                    strength_level=round(
                        (source.quality.authority + source.quality.accuracy) / 2, 4
                    ),
                    relevance_score=round(chunk.final_relevance_score, 4),
                    citation=format_citation(chunk),
                )
            )
        return evidence

    def limitations(
        self,
        sources: list[PreparedSource],
        resolution: ConflictResolution,
        context: AssemblyContext,
    ) -> list[str]:
        limitations = []
        if not sources:
            limitations.append(NO_SOURCES)
        if len(sources) < 3:
            limitations.append(LIMITED_DIVERSITY)
        if resolution.has_conflicts:
            limitations.append(
                f"{len(resolution.warnings)} contradiction(s) between sources were detected"
            )
        if context.assembly_strategy.gap_handling == "acknowledge":
            covered = {f for s in sources for f in s.framework_mappings}
            for framework in context.business_context.primary_frameworks:
                if framework not in covered:
                    limitations.append(
                        f"No sources covered {framework_display_name(framework)}"
                    )
        return limitations
