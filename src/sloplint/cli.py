from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated

import click
import typer
from rich.console import Console
from rich.table import Table

from sloplint import __version__
from sloplint.config import ConfigError, ScanSettings, settings_from_options
from sloplint.engine.tree_sitter import initialize
from sloplint.engine.types import FileScanResult, ScanSummary
from sloplint.logging_utils import configure_logging
from sloplint.reporters.json_reporter import render_json
from sloplint.reporters.terminal import render_terminal

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="sloplint — flag low-quality, machine-generated comments and error handling.",
)
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Verbose logs (printed to stderr)."),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Only print diagnostics and errors."),
    ] = False,
) -> None:
    """sloplint CLI."""

    if verbose and quiet:
        raise typer.BadParameter("Choose at most one: --verbose or --quiet.")
    configure_logging(verbose=verbose, quiet=quiet)
    ctx.obj = {"verbose": verbose, "quiet": quiet}


def _cli_settings() -> dict[str, bool]:
    ctx = click.get_current_context(silent=True)
    if ctx is None or not isinstance(ctx.obj, dict):
        return {"verbose": False, "quiet": False}
    return {"verbose": bool(ctx.obj.get("verbose", False)), "quiet": bool(ctx.obj.get("quiet", False))}


def _scan_with_optional_progress(paths: list[Path], settings: ScanSettings, *, show_progress: bool) -> ScanSummary:
    from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn, TimeElapsedColumn

    from sloplint.scanner import run_scan

    if not show_progress:
        return run_scan(paths, settings)

    progress = Progress(
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=err_console,
        transient=True,
    )
    task = progress.add_task("Scan", total=None)

    def _on_discovered(total: int) -> None:
        progress.update(task, total=total, completed=0)

    def _on_file_done(_result: FileScanResult) -> None:
        progress.advance(task, 1)

    with progress:
        return run_scan(paths, settings, on_files_discovered=_on_discovered, on_file_done=_on_file_done)


@app.command()
def scan(
    paths: Annotated[
        list[Path],
        typer.Argument(help="Files or directories to scan."),
    ],
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
    languages: Annotated[
        list[str] | None,
        typer.Option("--language", "-l", help="Only scan these languages (repeatable or comma-separated)."),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", min=1, help="Files scanned in parallel (default: $SLOPLINT_WORKERS or auto)."),
    ] = None,
    color: Annotated[
        bool | None,
        typer.Option("--color/--no-color", help="Colorize terminal output (default: on unless $NO_COLOR).", show_default=False),
    ] = None,
    notes: Annotated[
        bool,
        typer.Option("--notes", help="Show the rationale of each rule under its diagnostics."),
    ] = False,
    progress: Annotated[
        bool,
        typer.Option("--progress/--no-progress", help="Show a progress bar on an interactive terminal.", show_default=True),
    ] = True,
) -> None:
    """
    Scan files and directories; exit 1 when anything is flagged.
    """

    cli = _cli_settings()
    try:
        settings = settings_from_options(
            languages=languages,
            workers=workers,
            output_format=output_format,
            color=color,
        )
    except ConfigError as exc:
        raise typer.BadParameter(str(exc)) from exc

    loaded = initialize()
    missing = [lang for lang in settings.languages if lang not in loaded]
    if missing:
        logger.warning("grammar unavailable for: %s", ", ".join(missing))

    show_progress = progress and not cli["quiet"] and settings.output_format == "terminal" and err_console.is_terminal
    summary = _scan_with_optional_progress(paths, settings, show_progress=show_progress)

    if settings.output_format == "json":
        typer.echo(render_json(summary))
    else:
        console = Console(no_color=not settings.color, highlight=False)
        render_terminal(summary, console=console, show_notes=notes)
        if not summary.diagnostics:
            logger.info("no problems found in %d file(s)", summary.files_scanned)

    if summary.has_diagnostics:
        raise typer.Exit(code=1)


@app.command()
def rules(
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
) -> None:
    """
    List every rule with the languages it applies to.
    """

    from sloplint.rules.registry import builtin_rules

    rows = []
    for rule in builtin_rules():
        meta = rule.meta
        rows.append(
            {
                "rule_id": meta.rule_id,
                "category": meta.category,
                "title": meta.title,
                "message": meta.message,
                "note": meta.note,
                "languages": sorted(meta.languages) if meta.languages is not None else None,
            }
        )

    normalized = output_format.strip().lower()
    if normalized == "json":
        typer.echo(json.dumps(rows, indent=2, ensure_ascii=False))
        return
    if normalized != "terminal":
        raise typer.BadParameter("Unsupported format. Use: terminal, json.")

    table = Table(title="sloplint rules")
    table.add_column("ID", style="bold")
    table.add_column("Kind")
    table.add_column("Languages")
    table.add_column("Title")
    for row in rows:
        langs = row["languages"]
        table.add_row(
            str(row["rule_id"]),
            str(row["category"]),
            ", ".join(langs) if isinstance(langs, list) else "all",
            str(row["title"]),
        )
    Console().print(table)


@app.command()
def languages(
    output_format: Annotated[
        str,
        typer.Option("--format", help="Output format: terminal, json.", show_default=True),
    ] = "terminal",
) -> None:
    """
    List supported languages, their extensions and the node kinds inspected.
    """

    from sloplint.languages.registry import LANGUAGES
    from sloplint.rules.error_handling import structural_node_kinds

    rows = [
        {
            "id": lang.id,
            "grammar": lang.grammar,
            "extensions": list(lang.extensions),
            "comment_kinds": list(lang.comment_kinds),
            "handler_kinds": sorted(structural_node_kinds(lang.id)),
            "tool_directives": lang.tool_directives.pattern,
        }
        for lang in LANGUAGES
    ]

    normalized = output_format.strip().lower()
    if normalized == "json":
        typer.echo(json.dumps(rows, indent=2))
        return
    if normalized != "terminal":
        raise typer.BadParameter("Unsupported format. Use: terminal, json.")

    table = Table(title="sloplint languages")
    table.add_column("ID", style="bold")
    table.add_column("Extensions")
    table.add_column("Comment kinds")
    table.add_column("Handler kinds")
    for row in rows:
        table.add_row(
            str(row["id"]),
            " ".join(row["extensions"]),
            ", ".join(row["comment_kinds"]),
            ", ".join(row["handler_kinds"]) or "-",
        )
    Console().print(table)
