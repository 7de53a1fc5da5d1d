# src/oracle_rag/assembly/sources.py
"""Source preparation: per-passage content analysis before synthesis."""

import re
from dataclasses import dataclass, field

from oracle_rag.models import AssemblyContext, EnhancedSearchResult
from oracle_rag.models.taxonomy import FRAMEWORKS
from oracle_rag.ranking.citations import VERIFICATION_MULTIPLIERS

ACTION_TERMS = ("step", "start", "today", "first", "immediately", "launch", "call", "test")
STRATEGIC_TERMS = ("strategy", "positioning", "system", "scale", "framework", "model", "leverage")

_IMMEDIACY_BY_COMPLEXITY = {"beginner": 0.9, "intermediate": 0.75, "advanced": 0.5}
_LONG_TERM_BY_PHASE = {"startup": 0.4, "scaling": 0.7, "optimization": 0.7, "all": 0.6}

_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


def first_sentence(text: str, limit: int = 240) -> str:
    text = " ".join(text.split())
    sentence = _SENTENCE_END.split(text, maxsplit=1)[0] if text else ""
    if len(sentence) > limit:
        sentence = sentence[: limit - 3].rstrip() + "..."
    return sentence


def normalize_framework(tag: str) -> str | None:
    """Map a free-form framework tag to a known framework name."""
    candidate = tag.strip().lower().replace(" ", "_").replace("-", "_")
    if candidate.startswith("framework:"):
        candidate = candidate.split(":", 1)[1]
    if candidate in FRAMEWORKS:
        return candidate
    for framework in FRAMEWORKS:
        if framework in candidate:
            return framework
    return None


@dataclass(frozen=True)
class QualityIndicators:
    authority: float
    recency: float
    accuracy: float


@dataclass
class PreparedSource:
    """A passage annotated with the signals assembly decisions rely on."""

    source_id: str
    chunk: EnhancedSearchResult
    immediacy: float
    strategic_value: float
    long_term_value: float
    business_alignment: float
    framework_mappings: list[str] = field(default_factory=list)
    quality: QualityIndicators = QualityIndicators(0.8, 0.7, 0.9)
    integration_potential: float = 0.0

    @property
    def primary_framework(self) -> str:
        return self.framework_mappings[0] if self.framework_mappings else "general"

    @property
    def title(self) -> str:
        return self.chunk.title or first_sentence(self.chunk.content, limit=60)


def _count_terms(text: str, terms: tuple[str, ...]) -> int:
    return sum(1 for term in terms if term in text)


def prepare_source(chunk: EnhancedSearchResult, context: AssemblyContext) -> PreparedSource:
    content = chunk.content.lower()

    immediacy = _IMMEDIACY_BY_COMPLEXITY.get(chunk.implementation_complexity, 0.75)
    if _count_terms(content, ACTION_TERMS):
        immediacy += 0.1

    strategic = 0.4 + 0.3 * chunk.business_context_score
    strategic += 0.1 * min(3, _count_terms(content, STRATEGIC_TERMS))

    long_term = _LONG_TERM_BY_PHASE.get(chunk.business_phase or "", 0.5)
    if chunk.implementation_complexity == "advanced":
        long_term += 0.1

    mappings: list[str] = []
    for tag in chunk.framework_tags:
        framework = normalize_framework(tag)
        if framework and framework not in mappings:
            mappings.append(framework)
    # Frameworks the asker cares about lead
    requested = context.business_context.primary_frameworks
    mappings.sort(key=lambda f: 0 if f in requested else 1)

    requested_overlap = 1.0 if any(f in requested for f in mappings) else 0.0
    alignment = (
        0.5 * chunk.business_context_score
        + 0.3 * (requested_overlap if requested else chunk.framework_alignment_score)
        + 0.2 * chunk.implementation_score
    )

    quality = QualityIndicators(
        authority=chunk.authority_score,
        recency=chunk.recency_score,
        accuracy=VERIFICATION_MULTIPLIERS.get(chunk.verification_status or "", 0.9),
    )
    potential = 0.4 * chunk.final_relevance_score + 0.3 * alignment + 0.3 * quality.authority

    return PreparedSource(
        source_id=chunk.dedup_key,
        chunk=chunk,
        immediacy=round(min(1.0, immediacy), 4),
        strategic_value=round(min(1.0, strategic), 4),
        long_term_value=round(min(1.0, long_term), 4),
        business_alignment=round(min(1.0, alignment), 4),
        framework_mappings=mappings,
        quality=quality,
        integration_potential=round(potential, 4),
    )


def prepare_sources(context: AssemblyContext) -> list[PreparedSource]:
    """Analyze every passage and order by integration potential, highest first."""
    prepared = [prepare_source(chunk, context) for chunk in context.source_chunks]
    return sorted(prepared, key=lambda s: s.integration_potential, reverse=True)
