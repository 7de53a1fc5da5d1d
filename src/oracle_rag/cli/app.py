# src/oracle_rag/cli/app.py
"""Command-line interface for Oracle.

A thin Typer wrapper around the commands layer. Each command:
1. Parses args (via Typer)
2. Calls a commands module function
3. Renders the result with Rich (or as JSON with --json)
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from oracle_rag import __version__
from oracle_rag.commands import assemble, ask, classify, config_cmd, rank, search
from oracle_rag.commands.base import CommandResult, PassageInfo
from oracle_rag.config import load_env_file
from oracle_rag.logging_config import configure_logging

app = typer.Typer(
    name="oracle",
    help="Oracle - business advice from a curated corpus, ranked and assembled.",
    no_args_is_help=True,
)
console = Console()

DataDirOption = typer.Option(None, "--data-dir", "-d", help="Data directory (default: from config)")
ConfigOption = typer.Option(None, "--config", "-c", help="Path to config file")
PlainOption = typer.Option(False, "--plain", help="Plain output (no colors/formatting)")
JsonOption = typer.Option(False, "--json", help="Print the full result as JSON")


def version_callback(value: bool) -> None:
    if value:
        console.print(f"oracle {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log pipeline events to stderr."),
) -> None:
    """Oracle - business advice pipeline."""
    load_env_file()
    configure_logging(level="DEBUG" if verbose else None)


def _fail(result: CommandResult) -> None:
    if not result.success:
        console.print(f"[red]Error: {result.error}[/red]")
        raise typer.Exit(1)


def _print_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _render_passages(passages: list[PassageInfo], plain: bool) -> None:
    if plain:
        console.print("Sources:")
        for i, p in enumerate(passages, 1):
            console.print(f"  [{i}] {p.title or p.source_id} (score: {p.score:.3f})")
            console.print(f"      {p.content[:100]}...")
        return

    console.print("[bold]Sources:[/bold]")
    for i, p in enumerate(passages, 1):
        tags = f" [magenta]{', '.join(p.framework_tags)}[/magenta]" if p.framework_tags else ""
        console.print(
            f"  [{i}] [cyan]{p.title or p.source_id}[/cyan] [dim](score: {p.score:.3f})[/dim]{tags}"
        )
        preview = p.content[:100].replace("\n", " ")
        if len(p.content) > 100:
            preview += "..."
        console.print(f"      [dim]{preview}[/dim]")


def _render_warnings(warnings: list[str], plain: bool) -> None:
    for warning in warnings:
        if plain:
            console.print(f"Warning: {warning}")
        else:
            console.print(f"[yellow]Warning:[/yellow] {warning}")


@app.command(name="ask")
def ask_cmd(
    question: str = typer.Argument(..., help="Business question to answer"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    candidates: int = typer.Option(
        None,
        "--candidates",
        "-n",
        help="Number of candidate responses to assemble and rank",
    ),
    synthesize: bool = typer.Option(
        False,
        "--synthesize",
        "-s",
        help="Have the LLM write a prose answer from the assembled response",
    ),
    plain: bool = PlainOption,
    as_json: bool = JsonOption,
) -> None:
    """Answer a business question."""
    result = ask.ask(
        question=question,
        data_dir=data_dir,
        config_path=config_file,
        candidates=candidates,
        synthesize=synthesize,
    )
    _fail(result)

    if as_json:
        _print_json(result.payload)
        return

    if plain:
        if result.answer:
            console.print(f"Answer: {result.answer}")
            console.print()
        console.print(f"Summary: {result.summary}")
        for i, insight in enumerate(result.insights, 1):
            console.print(f"  {i}. {insight}")
    else:
        body = result.answer or result.summary
        console.print(Panel(Markdown(body), title="Answer", border_style="green"))
        if result.insights:
            console.print("[bold]Next actions:[/bold]")
            for i, insight in enumerate(result.insights, 1):
                console.print(f"  {i}. {insight}")
    console.print()

    if result.passages:
        _render_passages(result.passages, plain)
    if result.quality_score is not None:
        console.print(f"\nQuality: {result.quality_score:.2f}")
    _render_warnings(result.warnings, plain)


@app.command(name="search")
def search_cmd(
    query: str = typer.Argument(..., help="Query text"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    k: int = typer.Option(None, "--k", "-k", help="Maximum number of passages"),
    method: str = typer.Option(
        None,
        "--method",
        "-m",
        help="Search method: semantic, hybrid, multi_vector or adaptive",
    ),
    plain: bool = PlainOption,
    as_json: bool = JsonOption,
) -> None:
    """Retrieve and rank passages without assembling an answer."""
    result = search.search(
        query=query,
        data_dir=data_dir,
        config_path=config_file,
        k=k,
        method=method,
    )
    _fail(result)

    if as_json:
        _print_json(
            {
                "query": result.query,
                "method": result.method,
                "passages": [vars(p) for p in result.passages],
            }
        )
        return

    if not result.passages:
        if plain:
            console.print("No results found.")
        else:
            console.print("[yellow]No results found.[/yellow]")
        raise typer.Exit(0)

    if plain:
        _render_passages(result.passages, plain=True)
        return

    table = Table(title=f"Passages ({result.method})")
    table.add_column("#", style="dim", width=3)
    table.add_column("Passage", style="cyan")
    table.add_column("Phase")
    table.add_column("Score", justify="right", style="green")
    for i, p in enumerate(result.passages, 1):
        table.add_row(str(i), p.title or p.source_id, p.business_phase or "-", f"{p.score:.3f}")
    console.print(table)


@app.command(name="rank")
def rank_cmd(
    request_file: str = typer.Argument(..., help="RankingRequest JSON file"),
    plain: bool = PlainOption,
    as_json: bool = JsonOption,
) -> None:
    """Rank candidate responses from a JSON ranking request."""
    result = rank.rank(request_file)
    _fail(result)

    if as_json:
        _print_json(result.payload)
        return

    if plain:
        for c in result.candidates:
            console.print(
                f"{c.rank}. {c.candidate_id} {c.score:.4f} "
                f"[{c.lower_bound:.4f}, {c.upper_bound:.4f}]"
            )
    elif result.candidates:
        table = Table(title="Ranked Candidates")
        table.add_column("Rank", style="dim", width=4)
        table.add_column("Candidate", style="cyan")
        table.add_column("Score", justify="right", style="green")
        table.add_column("Interval", justify="right", style="dim")
        table.add_column("Strengths")
        for c in result.candidates:
            table.add_row(
                str(c.rank),
                c.candidate_id,
                f"{c.score:.4f}",
                f"{c.lower_bound:.3f} - {c.upper_bound:.3f}",
                ", ".join(c.strengths) or "-",
            )
        console.print(table)

    if result.excluded:
        console.print(f"Excluded below quality floor: {', '.join(result.excluded)}")
    for text in result.recommendations:
        console.print(f"- {text}" if plain else f"[dim]- {text}[/dim]")


@app.command(name="assemble")
def assemble_cmd(
    context_file: str = typer.Argument(..., help="AssemblyContext JSON file"),
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
    as_json: bool = JsonOption,
) -> None:
    """Assemble a response from a JSON assembly context."""
    result = assemble.assemble(context_file, config_path=config_file)
    _fail(result)

    if as_json:
        _print_json(result.payload)
        return

    if plain:
        console.print(f"Summary: {result.summary}")
    else:
        console.print(
            Panel(
                Markdown(result.summary),
                title=f"Assembled ({result.organization})",
                border_style="green",
            )
        )
    console.print(f"Overall quality: {result.overall_quality:.2f}")
    _render_warnings(result.warnings, plain)


@app.command(name="classify")
def classify_cmd(
    query: str = typer.Argument(..., help="Query text"),
) -> None:
    """Show how a query is classified (intent, frameworks, stage)."""
    result = classify.classify(query)
    _fail(result)
    _print_json(result.payload)


@app.command(name="config")
def config_cmd_handler(
    config_file: str = ConfigOption,
) -> None:
    """Show current configuration settings."""
    result = config_cmd.config(config_path=config_file)
    _fail(result)

    table = Table(title="Oracle Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Source", style="dim")

    origin = "yaml" if result.config_path else "default"
    table.add_row("provider", result.provider, origin)
    if result.provider == "litellm":
        table.add_row("llm_model", result.llm_model or "(not set)", "")
        table.add_row("embedding_model", result.embedding_model or "(not set)", "")
    table.add_row("storage", result.storage, origin)
    table.add_row("data_dir", result.data_dir, origin)

    table.add_row("", "", "")

    for setting in result.settings:
        table.add_row(setting.name, setting.value, setting.source)

    console.print(table)

    if result.config_path:
        console.print(f"\n[dim]Config file: {result.config_path}[/dim]")
    else:
        console.print("\n[dim]No config file found. Using env vars / defaults.[/dim]")
    _render_warnings(result.warnings, plain=False)

    console.print("\n[dim]Precedence: env var > yaml settings > profile > default[/dim]")
