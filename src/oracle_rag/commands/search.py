# src/oracle_rag/commands/search.py
"""Search command - retrieve and rank passages without assembling an answer."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from oracle_rag.commands.base import PassageInfo, SearchCommandResult
from oracle_rag.config import (
    ConfigError,
    create_oracle,
    get_oracle_config,
)

if TYPE_CHECKING:
    from oracle_rag import Oracle
    from oracle_rag.models import EnhancedSearchResult


def passage_info(result: EnhancedSearchResult) -> PassageInfo:
    return PassageInfo(
        source_id=result.dedup_key,
        title=result.title,
        content=result.content,
        score=result.final_relevance_score,
        framework_tags=list(result.framework_tags),
        business_phase=result.business_phase,
        explanation=result.result_explanation,
    )


def load_oracle(
    data_dir: str | None = None,
    config_path: str | Path | None = None,
) -> Oracle | str:
    """Create an Oracle from config, or return an error message."""
    oracle_config = get_oracle_config(data_dir, config_path)
    if isinstance(oracle_config, ConfigError):
        return f"{oracle_config.message}. {oracle_config.suggestion}"

    if oracle_config.storage == "local" and not os.path.exists(oracle_config.data_dir):
        return f"Data directory not found: {oracle_config.data_dir}"

    try:
        return create_oracle(oracle_config)
    except Exception as e:
        return f"Failed to create Oracle: {e}"


def search(
    query: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    k: int | None = None,
    method: str | None = None,
) -> SearchCommandResult:
    """Search the corpus and rank passages by business context.

    Args:
        query: Query text
        data_dir: Override data directory
        config_path: Override config file path
        k: Maximum number of passages (None for settings default)
        method: Search method override (semantic, hybrid, multi_vector, adaptive)

    Returns:
        SearchCommandResult with ranked passages
    """
    oracle = load_oracle(data_dir, config_path)
    if isinstance(oracle, str):
        return SearchCommandResult(success=False, query=query, error=oracle)

    try:
        return search_with_oracle(oracle, query, k=k, method=method)
    finally:
        oracle.close()


def search_with_oracle(
    oracle: Oracle,
    query: str,
    k: int | None = None,
    method: str | None = None,
) -> SearchCommandResult:
    """Search using an existing Oracle instance."""
    try:
        classification = oracle.classifier.classify(query)
        pipeline = oracle.pipeline()
        base = pipeline.build_search_query(classification)
        overrides = {} if k is None else {"max_results": k}
        search_query = base.model_copy(
            update={
                "search_strategy": oracle.settings.search_strategy(method),
                "performance_parameters": oracle.settings.performance_parameters(**overrides),
            }
        )
        raw = oracle.engine.search(search_query)
        ranked = oracle.passage_ranker.rank(raw, search_query)
    except Exception as e:
        return SearchCommandResult(success=False, query=query, error=f"Search failed: {e}")

    return SearchCommandResult(
        success=True,
        query=query,
        method=search_query.search_strategy.primary_method.kind,
        passages=[passage_info(r) for r in ranked],
    )
