# src/oracle_rag/assembly/__init__.py
"""Context assembly: ranked passages in, structured answer out."""

from oracle_rag.assembly.conflicts import ConflictResolution, resolve_conflicts
from oracle_rag.assembly.engine import (
    ContextAssemblyEngine,
    build_context,
    candidate_strategies,
    default_strategy_for,
)
from oracle_rag.assembly.sources import PreparedSource, prepare_sources
from oracle_rag.assembly.synthesis import TemplateSynthesizer

__all__ = [
    "ContextAssemblyEngine",
    "build_context",
    "candidate_strategies",
    "default_strategy_for",
    "PreparedSource",
    "prepare_sources",
    "ConflictResolution",
    "resolve_conflicts",
    "TemplateSynthesizer",
]
