# src/oracle_rag/assembly/organizers.py
"""Content organizers: group prepared sources into answer sections."""

from dataclasses import dataclass, field
from itertools import combinations
from typing import assert_never

from oracle_rag.assembly.sources import PreparedSource
from oracle_rag.models import AssemblyContext
from oracle_rag.models.assembly import (
    ActionOriented,
    ContentOrganization,
    Educational,
    FrameworkBased,
    ProblemSolution,
)
from oracle_rag.models.taxonomy import framework_display_name, framework_phrase

PROBLEM_TERMS = ("problem", "issue", "mistake", "fail", "wrong", "struggle", "why")

IMMEDIACY_THRESHOLD = 0.7
STRATEGIC_THRESHOLD = 0.6
LONG_TERM_THRESHOLD = 0.5


@dataclass
class ContentSection:
    section_id: str
    title: str
    sources: list[PreparedSource]
    content_type: str
    priority: int


@dataclass
class ContentStructure:
    organization_type: str
    sections: list[ContentSection]
    integration_points: list[tuple[str, str]] = field(default_factory=list)

    @property
    def source_count(self) -> int:
        return len({s.source_id for section in self.sections for s in section.sources})


def framework_priority(framework: str, query: str) -> int:
    if framework == "general":
        return 1
    query_lower = query.lower()
    if framework in query_lower or framework_phrase(framework) in query_lower:
        return 10
    return 5


def build_framework_based(
    sources: list[PreparedSource], context: AssemblyContext
) -> ContentStructure:
    """One section per framework, query-named frameworks first."""
    groups: dict[str, list[PreparedSource]] = {}
    for source in sources:
        groups.setdefault(source.primary_framework, []).append(source)

    sections = [
        ContentSection(
            section_id=f"framework_{framework}",
            title=framework_display_name(framework),
            sources=group,
            content_type="framework_explanation",
            priority=framework_priority(framework, context.original_query),
        )
        for framework, group in groups.items()
    ]
    # Stable: equal priorities keep presence order
    sections.sort(key=lambda s: s.priority, reverse=True)
    return ContentStructure(
        organization_type="framework_based",
        sections=sections,
        integration_points=list(combinations(groups.keys(), 2)),
    )


def build_action_oriented(
    sources: list[PreparedSource], context: AssemblyContext
) -> ContentStructure:
    """Three fixed buckets by urgency. A source may land in several."""
    return ContentStructure(
        organization_type="action_oriented",
        sections=[
            ContentSection(
                section_id="immediate_actions",
                title="Immediate Actions",
                sources=[s for s in sources if s.immediacy > IMMEDIACY_THRESHOLD],
                content_type="actionable_steps",
                priority=1,
            ),
            ContentSection(
                section_id="strategic_actions",
                title="Strategic Implementation",
                sources=[s for s in sources if s.strategic_value > STRATEGIC_THRESHOLD],
                content_type="strategic_guidance",
                priority=2,
            ),
            ContentSection(
                section_id="long_term_optimization",
                title="Long-term Optimization",
                sources=[s for s in sources if s.long_term_value > LONG_TERM_THRESHOLD],
                content_type="optimization_guidance",
                priority=3,
            ),
        ],
    )


def build_problem_solution(
    sources: list[PreparedSource], context: AssemblyContext
) -> ContentStructure:
    diagnosis = [s for s in sources if any(t in s.chunk.content.lower() for t in PROBLEM_TERMS)]
    solutions = sorted(sources, key=lambda s: s.chunk.implementation_score, reverse=True)
    return ContentStructure(
        organization_type="problem_solution",
        sections=[
            ContentSection("diagnosis", "Diagnosing the Problem", diagnosis, "problem_analysis", 1),
            ContentSection("solutions", "Recommended Solutions", solutions, "solution_steps", 2),
        ],
    )


def build_educational(
    sources: list[PreparedSource], context: AssemblyContext
) -> ContentStructure:
    """Fundamentals first, then core concepts, then advanced application."""
    levels = (
        ("beginner", "fundamentals", "Fundamentals"),
        ("intermediate", "core_concepts", "Core Concepts"),
        ("advanced", "advanced_application", "Advanced Application"),
    )
    sections = []
    for priority, (level, section_id, title) in enumerate(levels, start=1):
        members = [s for s in sources if s.chunk.implementation_complexity == level]
        if members:
            sections.append(
                ContentSection(section_id, title, members, "concept_explanation", priority)
            )
    return ContentStructure(organization_type="educational", sections=sections)


def build_structure(
    organization: ContentOrganization,
    sources: list[PreparedSource],
    context: AssemblyContext,
) -> ContentStructure:
    match organization:
        case FrameworkBased():
            return build_framework_based(sources, context)
        case ActionOriented():
            return build_action_oriented(sources, context)
        case ProblemSolution():
            return build_problem_solution(sources, context)
        case Educational():
            return build_educational(sources, context)
        case _:
            assert_never(organization)
