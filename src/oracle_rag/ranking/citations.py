# src/oracle_rag/ranking/citations.py
"""Source authority and freshness scoring from passage provenance."""

import math
from dataclasses import dataclass
from datetime import UTC, datetime

from oracle_rag.models import SearchResult

DEFAULT_AUTHORITY = 0.8
DEFAULT_RECENCY = 0.7
DAYS_PER_MONTH = 30.44


@dataclass(frozen=True)
class SourceTypeProfile:
    authority_weight: float
    # Per-month exponential decay of publication recency
    freshness_decay_rate: float


SOURCE_TYPE_PROFILES: dict[str, SourceTypeProfile] = {
    "book": SourceTypeProfile(1.0, 0.05),
    "video": SourceTypeProfile(0.9, 0.1),
    "podcast": SourceTypeProfile(0.8, 0.12),
    "interview": SourceTypeProfile(0.8, 0.1),
    "case_study": SourceTypeProfile(0.95, 0.15),
    "framework": SourceTypeProfile(0.95, 0.03),
    "social_media": SourceTypeProfile(0.4, 0.3),
    "webinar": SourceTypeProfile(0.7, 0.15),
    "course": SourceTypeProfile(0.85, 0.08),
}

VERIFICATION_MULTIPLIERS: dict[str, float] = {
    "verified": 1.0,
    "pending": 0.8,
    "conflicting": 0.5,
    "outdated": 0.6,
    "unverified": 0.4,
}

PRIMARY_AUTHORITY_BOOST = 1.2

# Used for recency when the source type is unknown
DEFAULT_DECAY_RATE = 0.1


def authority_score(passage: SearchResult) -> float:
    """Score how trustworthy a passage's source is, in [0, 1].

    Passages without provenance metadata score DEFAULT_AUTHORITY.
    """
    profile = SOURCE_TYPE_PROFILES.get(passage.source_type or "")
    score = profile.authority_weight if profile else DEFAULT_AUTHORITY

    if passage.verification_status:
        score *= VERIFICATION_MULTIPLIERS[passage.verification_status]
    if passage.authority_level == "primary_hormozi":
        score = min(1.0, score * PRIMARY_AUTHORITY_BOOST)

    return round(score, 2)


def months_since(published_at: datetime, now: datetime | None = None) -> float:
    now = now or datetime.now(UTC)
    if published_at.tzinfo is None:
        published_at = published_at.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return (now - published_at).total_seconds() / 86400 / DAYS_PER_MONTH


def recency_score(passage: SearchResult, now: datetime | None = None) -> float:
    """Exponential freshness decay by source type; DEFAULT_RECENCY when undated."""
    if passage.published_at is None:
        return DEFAULT_RECENCY
    profile = SOURCE_TYPE_PROFILES.get(passage.source_type or "")
    decay = profile.freshness_decay_rate if profile else DEFAULT_DECAY_RATE
    months = max(0.0, months_since(passage.published_at, now))
    return round(min(1.0, max(0.0, math.exp(-decay * months))), 2)


def format_citation(passage: SearchResult) -> str:
    """Short human-readable citation for a passage."""
    parts = [passage.title or "Untitled source"]
    if passage.source_type:
        parts.append(passage.source_type.replace("_", " "))
    if passage.published_at:
        parts.append(str(passage.published_at.year))
    citation = ", ".join(parts)
    if passage.source_url:
        citation = f"{citation} <{passage.source_url}>"
    return citation
