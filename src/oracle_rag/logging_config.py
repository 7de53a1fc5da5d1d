# src/oracle_rag/logging_config.py
"""Structured logging setup for Oracle.

Library modules only call ``structlog.get_logger(__name__)``. Applications
(and the CLI) call :func:`configure_logging` once at startup to choose a
renderer and bridge stdlib logging through the same processor chain.

Environment:
    ORACLE_LOG_LEVEL: Log level name (default: WARNING).
    ORACLE_LOG_PRETTY: "1"/"true" for the console renderer, JSON otherwise.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import structlog

__all__ = [
    "configure_logging",
    "bind_request_context",
    "clear_request_context",
    "get_logger",
]

_configured = False


def configure_logging(
    level: str | None = None,
    pretty: bool | None = None,
    force: bool = False,
) -> None:
    """Configure structlog and the stdlib bridge exactly once.

    Args:
        level: Log level override. Falls back to ORACLE_LOG_LEVEL.
        pretty: Renderer override. Falls back to ORACLE_LOG_PRETTY.
        force: Reconfigure even if already configured (tests, scripts).
    """
    global _configured
    if _configured and not force:
        return

    log_level = (level or os.getenv("ORACLE_LOG_LEVEL", "WARNING")).upper()
    if pretty is None:
        pretty = os.getenv("ORACLE_LOG_PRETTY", "0").lower() in {"1", "true", "yes"}

    renderer: Any
    if pretty:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    # Stdlib records (litellm, chromadb) go through the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[structlog.contextvars.merge_contextvars],
        processors=[
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            renderer,
        ],
    )

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level, logging.WARNING))

    structlog.configure(
        processors=shared_processors + [renderer],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    _configured = True


def bind_request_context(
    request_id: str | None = None,
    query: str | None = None,
) -> None:
    """Bind per-request identifiers into contextvars for subsequent log lines."""
    payload: dict[str, str] = {}
    if request_id:
        payload["request_id"] = request_id
    if query:
        payload["query"] = query[:120]
    if payload:
        structlog.contextvars.bind_contextvars(**payload)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, configuring logging first if needed."""
    configure_logging()
    return structlog.get_logger(name) if name else structlog.get_logger()
