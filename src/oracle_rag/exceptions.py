# src/oracle_rag/exceptions.py
"""Exceptions raised by the Oracle pipeline.

Thin inputs (few or no sources) and low-quality candidates are not errors:
they degrade the response and surface as warnings instead.
"""

from typing import Any


class OracleError(Exception):
    """Base class for all Oracle errors."""


class MalformedRequestError(OracleError, ValueError):
    """A request is missing required classification or context fields.

    Raised before any search is attempted.

    Attributes:
        field: Name of the missing or invalid field, if known.
    """

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class UpstreamError(OracleError):
    """An embedding or vector-store call failed.

    Propagated immediately; the core never retries.

    Attributes:
        stage: Which collaborator failed ("embedding", "vector_store", "llm").
    """

    def __init__(self, message: str, stage: str) -> None:
        super().__init__(message)
        self.stage = stage


class SearchFanOutError(UpstreamError):
    """Every branch of a concurrent search fan-out failed.

    Attributes:
        partial_results: Results gathered before the failures (usually empty).
        errors: List of (branch_label, exception) tuples.
    """

    def __init__(
        self,
        message: str,
        partial_results: list[Any],
        errors: list[tuple[str, BaseException]],
    ) -> None:
        super().__init__(message, stage="vector_store")
        self.partial_results = partial_results
        self.errors = errors


class ConfigurationError(OracleError):
    """Configuration could not be turned into working components."""
