# src/oracle_rag/evaluation/__init__.py
"""Candidate response ranking and quality assessment."""

from oracle_rag.evaluation.components import ComponentScorer
from oracle_rag.evaluation.quality import BENCHMARKS, DIMENSION_WEIGHTS, QualityAssessor
from oracle_rag.evaluation.ranker import NO_QUALIFYING_CANDIDATES, ResponseRanker

__all__ = [
    "ComponentScorer",
    "ResponseRanker",
    "NO_QUALIFYING_CANDIDATES",
    "QualityAssessor",
    "DIMENSION_WEIGHTS",
    "BENCHMARKS",
]
