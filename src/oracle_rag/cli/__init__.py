"""CLI package for Oracle.

The CLI is a thin Typer wrapper around the commands layer.
"""

from oracle_rag.cli.app import app, console

__all__ = ["app", "console"]
