# src/oracle_rag/assembly/roadmap.py
"""Implementation roadmap built from actionable insights."""

from oracle_rag.assembly.conflicts import ConflictResolution
from oracle_rag.assembly.sources import PreparedSource
from oracle_rag.models import ActionableInsight, ImplementationRoadmap
from oracle_rag.models.assembly import RoadmapAction
from oracle_rag.models.taxonomy import framework_display_name

_EFFORT = {"simple": "1-3 days", "moderate": "1-2 weeks", "complex": "1-3 months"}
_BUCKETS = {
    "critical": "immediate",
    "high": "immediate",
    "medium": "short_term",
    "low": "long_term",
}


def build_roadmap(
    insights: list[ActionableInsight],
    sources: list[PreparedSource],
    resolution: ConflictResolution,
) -> ImplementationRoadmap:
    """Bucket insights into immediate, short-term and long-term actions.

    Short-term actions depend on every immediate action; long-term actions
    depend on the short-term ones.
    """
    frameworks_by_source = {s.source_id: s.framework_mappings for s in sources}
    buckets: dict[str, list[RoadmapAction]] = {"immediate": [], "short_term": [], "long_term": []}

    for i, insight in enumerate(insights, start=1):
        frameworks: list[str] = []
        for source_id in insight.source_ids:
            for framework in frameworks_by_source.get(source_id, []):
                name = framework_display_name(framework)
                if name not in frameworks:
                    frameworks.append(name)
        bucket = _BUCKETS[insight.priority_level]
        buckets[bucket].append(
            RoadmapAction(
                action_id=f"action_{i:03d}",
                description=insight.insight_text,
                priority=insight.priority_level,
                estimated_effort=_EFFORT[insight.implementation_complexity],
                success_criteria=list(insight.success_metrics),
                frameworks_applied=frameworks,
            )
        )

    immediate_ids = [a.action_id for a in buckets["immediate"]]
    short_ids = [a.action_id for a in buckets["short_term"]]
    for action in buckets["short_term"]:
        action.dependencies = list(immediate_ids)
    for action in buckets["long_term"]:
        action.dependencies = list(short_ids or immediate_ids)

    milestones = []
    if buckets["immediate"]:
        count = len(buckets["immediate"])
        milestones.append(f"Complete {count} immediate action(s) within 2 weeks")
    if buckets["short_term"]:
        count = len(buckets["short_term"])
        milestones.append(f"Finish {count} short-term action(s) within 3 months")
    if buckets["long_term"]:
        milestones.append("Review results and long-term optimizations after 6 months")

    risks = ["Record baseline metrics before changing anything"]
    if resolution.has_conflicts:
        risks.append("Validate conflicting guidance with a small test before a full rollout")
    if len(sources) < 3:
        risks.append("Confirm recommendations against additional sources")
    if any(i.implementation_complexity == "complex" for i in insights):
        risks.append("Pilot complex changes with one team or offer before scaling")

    return ImplementationRoadmap(
        immediate_actions=buckets["immediate"],
        short_term_actions=buckets["short_term"],
        long_term_actions=buckets["long_term"],
        success_milestones=milestones,
        risk_mitigation=risks,
    )
