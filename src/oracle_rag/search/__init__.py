# src/oracle_rag/search/__init__.py
"""Vector search over the passage corpus."""

from oracle_rag.search.engine import SearchOutcome, VectorSearchEngine, merge_results
from oracle_rag.search.expansion import expand_query
from oracle_rag.search.methods import select_adaptive_method

__all__ = [
    "VectorSearchEngine",
    "SearchOutcome",
    "merge_results",
    "expand_query",
    "select_adaptive_method",
]
