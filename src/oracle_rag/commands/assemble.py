# src/oracle_rag/commands/assemble.py
"""Assemble command - build a response from an AssemblyContext JSON file."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from oracle_rag.assembly import ContextAssemblyEngine
from oracle_rag.commands.base import AssembleResult
from oracle_rag.config import build_settings, load_config
from oracle_rag.exceptions import OracleError
from oracle_rag.models import AssemblyContext


def assemble(
    context_path: str | Path,
    config_path: str | Path | None = None,
) -> AssembleResult:
    """Assemble one response from a serialized AssemblyContext.

    The conflict policy comes from settings unless the context's strategy
    sets its own.
    """
    try:
        settings = build_settings(load_config(config_path))
    except (OracleError, ValidationError, ValueError) as e:
        return AssembleResult(success=False, error=f"Invalid configuration: {e}")

    try:
        context = AssemblyContext.model_validate_json(Path(context_path).read_text())
    except OSError as e:
        return AssembleResult(success=False, error=f"Cannot read {context_path}: {e}")
    except ValidationError as e:
        return AssembleResult(success=False, error=f"Invalid assembly context: {e}")

    engine = ContextAssemblyEngine(conflict_policy=settings.conflict_policy)
    try:
        response = engine.assemble(context)
    except OracleError as e:
        return AssembleResult(success=False, context_id=context.context_id, error=str(e))

    return AssembleResult(
        success=True,
        context_id=context.context_id,
        organization=context.assembly_strategy.content_organization.kind,
        summary=response.synthesized_content.executive_summary,
        overall_quality=response.quality_metrics.overall_quality_score,
        warnings=list(response.assembly_metadata.assembly_warnings),
        payload=response.model_dump(mode="json"),
    )
