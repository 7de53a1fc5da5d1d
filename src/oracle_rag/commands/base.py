# src/oracle_rag/commands/base.py
"""Base types for the commands layer.

Every command returns one of these dataclasses instead of raising, so the
CLI (or any other UI) decides how to render successes and failures.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CommandResult:
    """Base result type for commands."""

    success: bool
    error: str | None = None


@dataclass
class PassageInfo:
    """A ranked passage, flattened for display."""

    source_id: str
    title: str
    content: str
    score: float
    framework_tags: list[str] = field(default_factory=list)
    business_phase: str | None = None
    explanation: str = ""


@dataclass
class AskResult(CommandResult):
    """Result of the ask command.

    Attributes:
        query: The original query
        answer: LLM answer (None when synthesis is off)
        summary: Executive summary of the selected response
        insights: Actionable insight texts, in order
        passages: Passages the response was assembled from
        quality_score: Overall score of the quality assessment
        warnings: Degradation warnings
        payload: Full JSON-ready pipeline output (for --json)
    """

    query: str = ""
    answer: str | None = None
    summary: str = ""
    insights: list[str] = field(default_factory=list)
    passages: list[PassageInfo] = field(default_factory=list)
    quality_score: float | None = None
    warnings: list[str] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class SearchCommandResult(CommandResult):
    """Result of the search command."""

    query: str = ""
    method: str = ""
    passages: list[PassageInfo] = field(default_factory=list)


@dataclass
class RankedCandidateInfo:
    """One ranked candidate, flattened for display."""

    rank: int
    candidate_id: str
    score: float
    lower_bound: float
    upper_bound: float
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)


@dataclass
class RankCommandResult(CommandResult):
    """Result of the rank command."""

    request_id: str = ""
    candidates: list[RankedCandidateInfo] = field(default_factory=list)
    excluded: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class AssembleResult(CommandResult):
    """Result of the assemble command."""

    context_id: str = ""
    organization: str = ""
    summary: str = ""
    overall_quality: float = 0.0
    warnings: list[str] = field(default_factory=list)
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class ClassifyResult(CommandResult):
    """Result of the classify command."""

    query: str = ""
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass
class SettingInfo:
    """Information about a single setting."""

    name: str
    value: str
    source: str  # "env var", "yaml", "profile", "default"


@dataclass
class ConfigResult(CommandResult):
    """Result of the config command.

    Attributes:
        provider: Provider type (litellm, custom)
        llm_model: LLM model name
        embedding_model: Embedding model name
        storage: Storage backend (local, memory)
        data_dir: Data directory path
        settings: Behavioral settings with their sources
        config_path: Path to config file (if found)
        warnings: Unknown keys or values found in the config file
    """

    provider: str = "litellm"
    llm_model: str | None = None
    embedding_model: str | None = None
    storage: str = "local"
    data_dir: str = ""
    settings: list[SettingInfo] = field(default_factory=list)
    config_path: str | None = None
    warnings: list[str] = field(default_factory=list)
