# src/oracle_rag/commands/__init__.py
"""UI-agnostic command layer for Oracle.

Commands return data structures, allowing UIs to render results appropriately.

Usage:
    from oracle_rag.commands import ask, search

    result = ask.ask("How should I price my first offer?")
    result = search.search("lead magnet ideas", k=5)
"""

from oracle_rag.commands import ask, assemble, classify, config_cmd, rank, search
from oracle_rag.commands.base import (
    AskResult,
    AssembleResult,
    ClassifyResult,
    CommandResult,
    ConfigResult,
    PassageInfo,
    RankCommandResult,
    RankedCandidateInfo,
    SearchCommandResult,
    SettingInfo,
)

__all__ = [
    # Base types
    "CommandResult",
    # Result types
    "AskResult",
    "SearchCommandResult",
    "PassageInfo",
    "RankCommandResult",
    "RankedCandidateInfo",
    "AssembleResult",
    "ClassifyResult",
    "ConfigResult",
    "SettingInfo",
    # Command modules
    "ask",
    "search",
    "rank",
    "assemble",
    "classify",
    "config_cmd",
]
