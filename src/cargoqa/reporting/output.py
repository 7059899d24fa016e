# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich rendering of diagnostics and workspace summaries."""

from __future__ import annotations

import json
from collections.abc import Iterable, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..config import OutputConfig
from ..core.logging import section
from ..core.models import Diagnostic, PackageStatus, WorkspaceRun
from ..core.severity import Severity
from ..runtime.console.manager import get_console

_SEVERITY_STYLES = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFORMATION: "cyan",
}
_STATUS_STYLES = {
    PackageStatus.COMPLETED: "green",
    PackageStatus.FAILED: "red",
    PackageStatus.SKIPPED: "yellow",
}


def group_by_tool(diagnostics: Iterable[Diagnostic]) -> dict[str, list[Diagnostic]]:
    """Route diagnostics into per-tool channels preserving first-seen order."""

    channels: dict[str, list[Diagnostic]] = {}
    for diagnostic in diagnostics:
        channels.setdefault(diagnostic.origin_tool, []).append(diagnostic)
    return channels


def group_by_file(diagnostics: Iterable[Diagnostic]) -> dict[str, list[Diagnostic]]:
    """Group diagnostics by reported file path preserving first-seen order."""

    files: dict[str, list[Diagnostic]] = {}
    for diagnostic in diagnostics:
        files.setdefault(diagnostic.file_path, []).append(diagnostic)
    return files


def format_location(diagnostic: Diagnostic) -> str:
    """Return the one-based ``Line L, Column C`` label shown to users."""

    return f"Line {diagnostic.line + 1}, Column {diagnostic.column + 1}"


def render_diagnostics(diagnostics: Sequence[Diagnostic], cfg: OutputConfig) -> None:
    """Print diagnostics grouped by tool channel, then by file.

    Args:
        diagnostics: Diagnostics to display.
        cfg: Output configuration describing formatting preferences.
    """

    console = get_console(color=cfg.color, emoji=cfg.emoji)
    for tool, entries in group_by_tool(diagnostics).items():
        section(tool, use_color=cfg.color)
        for file_path, file_entries in group_by_file(entries).items():
            console.print(Text(f"Diagnostics for {file_path}:", style="bold" if cfg.color else ""))
            for diagnostic in file_entries:
                _print_diagnostic(console, diagnostic, cfg)


def _print_diagnostic(console: Console, diagnostic: Diagnostic, cfg: OutputConfig) -> None:
    line = Text(f"  {format_location(diagnostic)}: ")
    style = _SEVERITY_STYLES.get(diagnostic.severity, "") if cfg.color else ""
    line.append(diagnostic.severity.value, style=style)
    line.append(f": {diagnostic.message}")
    console.print(line)


def build_summary_table(run: WorkspaceRun, cfg: OutputConfig) -> Table:
    """Return a table listing every package with its status and diagnostic count.

    Args:
        run: Completed workspace run.
        cfg: Output configuration describing formatting preferences.

    Returns:
        Table: Rich table with one row per processed root.
    """

    table = Table(box=box.SIMPLE_HEAVY if cfg.color else box.SIMPLE)
    table.add_column("Package", overflow="fold")
    table.add_column("Status")
    table.add_column("Diagnostics", justify="right")
    table.add_column("Notes", overflow="fold")
    for entry in run.packages:
        style = _STATUS_STYLES.get(entry.status, "") if cfg.color else ""
        table.add_row(
            entry.package,
            Text(entry.status.value, style=style),
            str(len(entry.diagnostics)),
            entry.reason or "-",
        )
    return table


def _bucket_panel(title: str, diagnostics: Sequence[Diagnostic], border: str, cfg: OutputConfig) -> Panel:
    body = Text()
    for index, diagnostic in enumerate(diagnostics):
        if index:
            body.append("\n")
        first_line = diagnostic.message.split("\n", 1)[0]
        body.append(f"{diagnostic.file_path}:{diagnostic.line + 1}:{diagnostic.column + 1} {first_line}")
    return Panel(body, title=title, border_style=border if cfg.color else "none", padding=(0, 1))


def render_workspace_run(run: WorkspaceRun, cfg: OutputConfig) -> None:
    """Render a finished workspace run: diagnostics, buckets and the summary.

    Args:
        run: Completed workspace run.
        cfg: Output configuration describing formatting preferences.
    """

    console = get_console(color=cfg.color, emoji=cfg.emoji)
    render_diagnostics(run.diagnostics, cfg)
    if run.performance:
        console.print(_bucket_panel("Performance Suggestions", run.performance, "cyan", cfg))
    if run.pitfalls:
        console.print(_bucket_panel("Common Pitfalls", run.pitfalls, "magenta", cfg))
    section("Summary", use_color=cfg.color)
    console.print(build_summary_table(run, cfg))
    console.print(
        f"{run.diagnostic_count()} diagnostic(s), "
        f"{len(run.performance)} performance suggestion(s), "
        f"{len(run.pitfalls)} common pitfall(s), "
        f"{len(run.skipped())} skipped, {len(run.failed())} failed",
    )


def workspace_run_to_json(run: WorkspaceRun) -> str:
    """Return ``run`` serialised as indented JSON for machine consumers."""

    return json.dumps(run.model_dump(mode="json"), indent=2)


__all__ = [
    "build_summary_table",
    "format_location",
    "group_by_file",
    "group_by_tool",
    "render_diagnostics",
    "render_workspace_run",
    "workspace_run_to_json",
]
