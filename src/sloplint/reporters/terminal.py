from __future__ import annotations

from collections.abc import Iterable
from itertools import groupby

from rich.console import Console
from rich.text import Text

from sloplint.engine.types import Diagnostic, ScanSummary


def render_terminal(summary: ScanSummary, *, console: Console, show_notes: bool = False) -> None:
    """
    Print diagnostics grouped by file, in the order they were produced.

    Files appear in discovery order and diagnostics keep the engine order
    (comment findings before error-handler findings); nothing is re-sorted.
    """

    if not summary.diagnostics:
        return

    for file, diags in _group_by_file(summary.diagnostics):
        console.print()
        console.print(Text(file, style="bold"))
        for d in diags:
            _print_diagnostic(console, d, show_note=show_notes)

    console.print()
    count = len(summary.diagnostics)
    console.print(Text(f"⚠ {count} problem{'' if count == 1 else 's'}", style="bold yellow"))


def _group_by_file(diagnostics: Iterable[Diagnostic]) -> list[tuple[str, list[Diagnostic]]]:
    # Diagnostics of one file are contiguous; keep first-seen order.
    grouped: dict[str, list[Diagnostic]] = {}
    for file, items in groupby(diagnostics, key=lambda d: d.file):
        grouped.setdefault(file, []).extend(items)
    return list(grouped.items())


def _print_diagnostic(console: Console, d: Diagnostic, *, show_note: bool) -> None:
    line = Text("  ")
    line.append(f"{d.line}:{d.column}", style="bright_black")
    line.append("  ")
    line.append("warning", style="yellow")
    line.append(f"  {d.message}  ")
    line.append(d.rule_id, style="cyan")
    console.print(line)

    if d.text:
        console.print(Text(f"  > {d.text}", style="bright_black"))
    if show_note and d.note:
        console.print(Text(f"    → {d.note}", style="dim"))
