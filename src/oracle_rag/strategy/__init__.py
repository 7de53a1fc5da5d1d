# src/oracle_rag/strategy/__init__.py
"""Framework-aware search strategy selection."""

from oracle_rag.strategy.registry import STRATEGY_REGISTRY
from oracle_rag.strategy.selector import (
    QueryStrategySelector,
    StrategyExecutor,
    StrategySearchResult,
)

__all__ = [
    "STRATEGY_REGISTRY",
    "QueryStrategySelector",
    "StrategyExecutor",
    "StrategySearchResult",
]
