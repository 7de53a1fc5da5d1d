# src/oracle_rag/commands/classify.py
"""Classify command - show how a query would be classified."""

from __future__ import annotations

from oracle_rag.classifier import KeywordQueryClassifier
from oracle_rag.commands.base import ClassifyResult
from oracle_rag.exceptions import MalformedRequestError


def classify(query: str) -> ClassifyResult:
    try:
        classification = KeywordQueryClassifier().classify(query)
    except MalformedRequestError as e:
        return ClassifyResult(success=False, query=query, error=str(e))
    return ClassifyResult(
        success=True,
        query=query,
        payload=classification.model_dump(mode="json"),
    )
