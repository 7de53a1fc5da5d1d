# src/oracle_rag/ranking/__init__.py
"""Business-context ranking of retrieved passages."""

from oracle_rag.ranking.citations import authority_score, format_citation, recency_score
from oracle_rag.ranking.ranker import BusinessContextRanker, diversify, optimize_snippet
from oracle_rag.ranking.scoring import RuleBasedScoreProvider, ScoreProvider

__all__ = [
    "BusinessContextRanker",
    "optimize_snippet",
    "ScoreProvider",
    "RuleBasedScoreProvider",
    "diversify",
    "authority_score",
    "recency_score",
    "format_citation",
]
