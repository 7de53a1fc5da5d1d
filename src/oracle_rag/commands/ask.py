# src/oracle_rag/commands/ask.py
"""Ask command - run the full advice pipeline for one question.

This is the core logic the CLI calls; it never raises to the UI.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from oracle_rag.commands.base import AskResult
from oracle_rag.commands.search import load_oracle, passage_info

if TYPE_CHECKING:
    from oracle_rag import Oracle
    from oracle_rag.pipeline import PipelineResult


def ask(
    question: str,
    data_dir: str | None = None,
    config_path: str | Path | None = None,
    candidates: int | None = None,
    synthesize: bool = False,
) -> AskResult:
    """Answer a business question from the indexed corpus.

    Args:
        question: The question to ask
        data_dir: Override data directory
        config_path: Override config file path
        candidates: Number of candidate responses to assemble and rank
        synthesize: If True, have the LLM write a prose answer

    Returns:
        AskResult with the selected response and its sources
    """
    oracle = load_oracle(data_dir, config_path)
    if isinstance(oracle, str):
        return AskResult(success=False, query=question, error=oracle)

    try:
        return ask_with_oracle(oracle, question, candidates=candidates, synthesize=synthesize)
    finally:
        oracle.close()


def ask_with_oracle(
    oracle: Oracle,
    question: str,
    candidates: int | None = None,
    synthesize: bool = False,
) -> AskResult:
    """Ask using an existing Oracle instance."""
    pipeline = oracle.pipeline(synthesize=synthesize)
    try:
        result = pipeline.ask(question, candidates=candidates)
    except Exception as e:
        return AskResult(success=False, query=question, error=f"Ask failed: {e}")

    content = result.response.synthesized_content
    return AskResult(
        success=True,
        query=question,
        answer=result.answer,
        summary=content.executive_summary,
        insights=[i.insight_text for i in content.actionable_insights],
        passages=[passage_info(s) for s in result.sources],
        quality_score=result.quality.overall_score if result.quality else None,
        warnings=list(result.warnings),
        payload=pipeline_payload(result),
    )


def pipeline_payload(result: PipelineResult) -> dict[str, Any]:
    """JSON-ready view of a pipeline result."""
    return {
        "request_id": result.request_id,
        "query": result.classification.original_query,
        "answer": result.answer,
        "classification": result.classification.model_dump(mode="json"),
        "response": result.response.model_dump(mode="json"),
        "sources": [s.model_dump(mode="json") for s in result.sources],
        "ranking": result.ranking.model_dump(mode="json") if result.ranking else None,
        "quality": result.quality.model_dump(mode="json") if result.quality else None,
        "telemetry": result.telemetry(),
        "search_errors": [[label, str(err)] for label, err in result.search_errors],
    }
