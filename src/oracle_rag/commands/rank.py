# src/oracle_rag/commands/rank.py
"""Rank command - rank candidate responses from a RankingRequest JSON file."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from oracle_rag.commands.base import RankCommandResult, RankedCandidateInfo
from oracle_rag.evaluation import ResponseRanker
from oracle_rag.models import RankingRequest


def rank(request_path: str | Path) -> RankCommandResult:
    """Rank the candidates in a serialized RankingRequest.

    Ranking is pure: no store, embedder or config is needed.
    """
    try:
        request = RankingRequest.model_validate_json(Path(request_path).read_text())
    except OSError as e:
        return RankCommandResult(success=False, error=f"Cannot read {request_path}: {e}")
    except ValidationError as e:
        return RankCommandResult(success=False, error=f"Invalid ranking request: {e}")

    result = ResponseRanker().rank(request)

    return RankCommandResult(
        success=True,
        request_id=result.request_id,
        candidates=[
            RankedCandidateInfo(
                rank=r.rank,
                candidate_id=r.candidate.candidate_id,
                score=r.final_weighted_score,
                lower_bound=r.confidence_interval.lower_bound,
                upper_bound=r.confidence_interval.upper_bound,
                strengths=list(r.ranking_explanation.primary_strengths),
                weaknesses=list(r.ranking_explanation.key_weaknesses),
            )
            for r in result.ranked_responses
        ],
        excluded=list(result.ranking_metadata.excluded_candidate_ids),
        recommendations=[r.recommendation_text for r in result.recommendations],
        payload=result.model_dump(mode="json"),
    )
