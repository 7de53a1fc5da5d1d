# src/oracle_rag/assembly/conflicts.py
"""Detection and resolution of contradictory sources."""

from dataclasses import dataclass, field
from itertools import combinations

from oracle_rag.assembly.sources import PreparedSource
from oracle_rag.logging_config import get_logger
from oracle_rag.models.assembly import ConflictPolicy, CrossReference
from oracle_rag.models.taxonomy import framework_display_name

logger = get_logger(__name__)


@dataclass
class ConflictResolution:
    """Outcome of conflict resolution.

    Attributes:
        sources: Sources retained for synthesis, in their original order.
        conflicting_ids: Ids of the sources set aside by ``prefer_authority``,
            or of both sides of a contradiction flagged by ``flag_both``.
        warnings: One warning per contradiction. No side is ever dropped
            without a matching warning here.
        cross_references: Pairwise relationships between sources that share
            a framework.
    """

    sources: list[PreparedSource]
    conflicting_ids: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cross_references: list[CrossReference] = field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicting_ids)


def group_by_framework(sources: list[PreparedSource]) -> dict[str, list[PreparedSource]]:
    groups: dict[str, list[PreparedSource]] = {}
    for source in sources:
        for framework in source.framework_mappings:
            groups.setdefault(framework, []).append(source)
    return groups


def sources_conflict(a: PreparedSource, b: PreparedSource) -> bool:
    """Two sources on the same framework disagree.

    Either one is marked as conflicting, or both declare a ``stance`` in
    their metadata and the stances differ.
    """
    if "conflicting" in (a.chunk.verification_status, b.chunk.verification_status):
        return True
    stance_a = a.chunk.metadata.get("stance")
    stance_b = b.chunk.metadata.get("stance")
    return stance_a is not None and stance_b is not None and stance_a != stance_b


def _label(source: PreparedSource) -> str:
    return f"'{source.title}'"


def resolve_conflicts(sources: list[PreparedSource], policy: ConflictPolicy) -> ConflictResolution:
    """Apply ``policy`` to every contradicting pair of sources.

    ``prefer_authority`` keeps the higher-authority source (the earlier one on
    a tie) and moves the other to ``conflicting_ids``. ``flag_both`` keeps
    both and flags both.
    """
    dropped: set[str] = set()
    conflicting: list[str] = []
    warnings: list[str] = []
    cross_refs: list[CrossReference] = []
    seen_pairs: set[tuple[str, str]] = set()

    for framework, group in group_by_framework(sources).items():
        for a, b in combinations(group, 2):
            pair = (a.source_id, b.source_id)
            if pair in seen_pairs or a.source_id == b.source_id:
                continue
            seen_pairs.add(pair)

            shared = sorted(set(a.framework_mappings) & set(b.framework_mappings))
            if not sources_conflict(a, b):
                same_focus = a.primary_framework == b.primary_framework
                cross_refs.append(
                    CrossReference(
                        source_a=a.source_id,
                        source_b=b.source_id,
                        relationship="supporting" if same_focus else "complementary",
                        shared_concepts=shared,
                    )
                )
                continue

            cross_refs.append(
                CrossReference(
                    source_a=a.source_id,
                    source_b=b.source_id,
                    relationship="conflicting",
                    shared_concepts=shared,
                )
            )
            if a.source_id in dropped or b.source_id in dropped:
                continue

            topic = framework_display_name(framework)
            if policy == "prefer_authority":
                winner, loser = (a, b) if a.quality.authority >= b.quality.authority else (b, a)
                dropped.add(loser.source_id)
                flagged = [loser.source_id]
                warnings.append(
                    f"Conflicting sources on {topic}: kept {_label(winner)} over "
                    f"{_label(loser)} (higher authority)"
                )
            else:
                warnings.append(
                    f"Contradiction on {topic}: {_label(a)} and {_label(b)} disagree; "
                    "both retained"
                )
                flagged = list(pair)
            conflicting.extend(sid for sid in flagged if sid not in conflicting)

    if conflicting:
        logger.info(
            "source_conflicts_resolved",
            policy=policy,
            conflicts=len(warnings),
            dropped=len(dropped),
        )

    return ConflictResolution(
        sources=[s for s in sources if s.source_id not in dropped],
        conflicting_ids=conflicting,
        warnings=warnings,
        cross_references=cross_refs,
    )
