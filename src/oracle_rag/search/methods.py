# src/oracle_rag/search/methods.py
"""Runtime selection for the adaptive search method."""

from oracle_rag.models.search import HybridMethod, MultiVectorMethod, SemanticMethod
from oracle_rag.models.taxonomy import IMPLEMENTATION_SIGNALS

# Framework names specific enough to warrant per-framework sub-queries
SPECIFIC_FRAMEWORK_TERMS = ("grand slam", "core four", "closer")
BUSINESS_JARGON = ("ltv", "cac", "roi")
URGENCY_TERMS = ("urgent", "quickly", "asap")
TROUBLESHOOTING_TERMS = ("problem", "issue", "fix")

ConcreteMethod = SemanticMethod | HybridMethod | MultiVectorMethod


def query_characteristics(query: str) -> dict[str, bool]:
    query_lower = query.lower()
    return {
        "is_implementation_focused": any(s in query_lower for s in IMPLEMENTATION_SIGNALS),
        "is_specific": len(query.split()) > 5,
        "has_specific_frameworks": any(t in query_lower for t in SPECIFIC_FRAMEWORK_TERMS),
        "has_business_terminology": any(t in query_lower for t in BUSINESS_JARGON),
        "has_urgency_signals": any(t in query_lower for t in URGENCY_TERMS),
        "is_troubleshooting": any(t in query_lower for t in TROUBLESHOOTING_TERMS),
    }


def select_adaptive_method(query: str) -> ConcreteMethod:
    """Pick semantic, hybrid or multi-vector search from the query text.

    Framework-specific implementation questions fan out per framework;
    specific questions using business jargon benefit from keyword matching.
    Everything else is a plain semantic search.
    """
    traits = query_characteristics(query)
    if traits["has_specific_frameworks"] and traits["is_implementation_focused"]:
        return MultiVectorMethod()
    if traits["has_business_terminology"] and traits["is_specific"]:
        return HybridMethod()
    return SemanticMethod()
