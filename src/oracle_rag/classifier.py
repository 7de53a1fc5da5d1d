# src/oracle_rag/classifier.py
"""Rule-based query classification.

The pipeline treats classification as an external input; this keyword
classifier is the default used when a caller passes plain text.
"""

from abc import ABC, abstractmethod

from oracle_rag.exceptions import MalformedRequestError
from oracle_rag.logging_config import get_logger
from oracle_rag.models import FrameworkRelevance, QueryClassification, StageSignal
from oracle_rag.models.taxonomy import (
    FRAMEWORK_PATTERNS,
    FUNCTIONAL_AREA_KEYWORDS,
    INDUSTRY_KEYWORDS,
    INTENT_PATTERNS,
    SCENARIO_KEYWORDS,
    STAGE_KEYWORDS,
    URGENCY_KEYWORDS,
)

logger = get_logger(__name__)

COMPLEXITY_KEYWORDS: dict[str, list[str]] = {
    "beginner": ["beginner", "basics", "simple", "new to", "first time", "step by step"],
    "advanced": ["advanced", "sophisticated", "expert", "deep dive", "at scale"],
}


def _matches(text: str, keywords: list[str]) -> int:
    return sum(1 for kw in keywords if kw in text)


class QueryClassifier(ABC):
    """Turns raw query text into a QueryClassification."""

    @abstractmethod
    def classify(self, text: str) -> QueryClassification:
        """Classify a query.

        Raises:
            MalformedRequestError: If the text is empty.
        """
        ...


class KeywordQueryClassifier(QueryClassifier):
    """Classifies queries by counting taxonomy keyword matches."""

    def classify(self, text: str) -> QueryClassification:
        if not text or not text.strip():
            raise MalformedRequestError("Query text is empty", field="original_query")
        lowered = text.lower()

        intent_counts = {
            intent: _matches(lowered, patterns) for intent, patterns in INTENT_PATTERNS.items()
        }
        ranked_intents = sorted(
            (i for i, n in intent_counts.items() if n > 0),
            key=lambda i: intent_counts[i],
            reverse=True,
        )
        primary = ranked_intents[0] if ranked_intents else "learning"
        top = intent_counts.get(primary, 0)

        frameworks = []
        for framework, patterns in FRAMEWORK_PATTERNS.items():
            n = _matches(lowered, patterns)
            if n:
                relevance = min(1.0, 0.5 + 0.25 * n)
                frameworks.append(
                    FrameworkRelevance(framework=framework, relevance_score=relevance)
                )
        frameworks.sort(key=lambda f: f.relevance_score, reverse=True)

        stages = []
        for stage, keywords in STAGE_KEYWORDS.items():
            n = _matches(lowered, keywords)
            if n:
                stages.append(StageSignal(stage=stage, confidence=round(n / len(keywords), 4)))
        stages.sort(key=lambda s: s.confidence, reverse=True)

        classification = QueryClassification(
            original_query=text.strip(),
            primary_intent=primary,
            secondary_intents=tuple(ranked_intents[1:3]),
            confidence=round(min(1.0, 0.5 + 0.15 * top), 4) if top else 0.4,
            frameworks=tuple(frameworks),
            stage_signals=tuple(stages),
            scenarios=tuple(s for s, kws in SCENARIO_KEYWORDS.items() if _matches(lowered, kws)),
            industry_hints=tuple(
                i for i, kws in INDUSTRY_KEYWORDS.items() if _matches(lowered, kws)
            ),
            functional_areas=tuple(
                a for a, kws in FUNCTIONAL_AREA_KEYWORDS.items() if _matches(lowered, kws)
            ),
            urgency_level=self._urgency(lowered),
            complexity_preference=self._complexity(lowered),
        )
        logger.debug(
            "query_classified",
            intent=classification.primary_intent,
            frameworks=classification.framework_names,
            stage=classification.primary_stage,
        )
        return classification

    @staticmethod
    def _urgency(text: str) -> str:
        for level in ("critical", "high", "medium"):
            if _matches(text, URGENCY_KEYWORDS[level]):
                return level
        return "low"

    @staticmethod
    def _complexity(text: str) -> str | None:
        for level, keywords in COMPLEXITY_KEYWORDS.items():
            if _matches(text, keywords):
                return level
        return None
