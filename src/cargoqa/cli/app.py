# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared services."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path

import typer

from ..config import Config
from ..core.models import Diagnostic, OutputChunk, PackageRun, RunStatus
from ..core.severity import Severity
from ..errors import PackageResolutionError, WorkspaceRequestError
from ..orchestration import OrchestratorDeps, OrchestratorHooks, PackageSelector, WorkspaceOrchestrator
from ..parsers import MessageFormat, decode_output
from ..reporting import render_diagnostics, render_workspace_run, workspace_run_to_json
from ..tools import TOOLS, ToolRun, ToolRunner
from ..workspace import CargoManifest, find_manifest_dir
from .shared import EXIT_FAILURE, EXIT_USAGE, CLIError, CLILogger, build_cli_logger, load_cli_config

app = typer.Typer(name="cargo-qa", help="Cargo toolchain driver and diagnostics aggregator.", no_args_is_help=True)


@app.callback()
def _main(
    debug: bool = typer.Option(False, "--debug", help="Emit debug logging on stderr."),
) -> None:
    """Cargo toolchain driver and diagnostics aggregator."""

    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _has_errors(diagnostics: list[Diagnostic]) -> bool:
    return any(diagnostic.severity is Severity.ERROR for diagnostic in diagnostics)


def _chunk_sink(config: Config, logger: CLILogger) -> Callable[[OutputChunk], None] | None:
    return logger.chunk if config.output.show_chunks else None


def _report_tool_run(run: ToolRun, config: Config, logger: CLILogger, *, as_json: bool) -> None:
    """Render the outcome of a single tool run and exit on failure.

    Raises:
        CLIError: When the tool could not start, exited non-zero or reported errors.
    """

    result = run.result
    if result.status is RunStatus.START_ERROR:
        raise CLIError(result.error or f"{run.tool} failed to start", exit_code=EXIT_FAILURE)
    if as_json:
        logger.echo(json.dumps(run.model_dump(mode="json"), indent=2))
    elif run.diagnostics:
        render_diagnostics(run.diagnostics, config.output)
    for error in run.decode_errors:
        logger.warn(error)
    if not result.ok:
        raise CLIError(f"{run.tool} exited with status {result.returncode}", exit_code=EXIT_FAILURE)
    if _has_errors(run.diagnostics):
        raise CLIError(f"{run.tool} reported errors", exit_code=EXIT_FAILURE)
    if not as_json:
        logger.ok(f"{run.tool} finished in {result.duration:.1f}s")


def _execute_tool(
    name: str,
    start: Path,
    *,
    file: Path | None,
    config_file: Path | None,
    no_color: bool,
    no_emoji: bool,
    as_json: bool,
) -> None:
    logger = build_cli_logger(emoji=not no_emoji, no_color=no_color, stderr=as_json)
    try:
        config_root = find_manifest_dir(start) or (start if start.is_dir() else start.parent)
        config = load_cli_config(config_root, config_file, no_color=no_color, no_emoji=no_emoji)
        runner = ToolRunner(config)
        try:
            run = runner.run(name, start, file=file, on_output=None if as_json else _chunk_sink(config, logger))
        except PackageResolutionError as exc:
            raise CLIError(str(exc), exit_code=EXIT_USAGE) from exc
        _report_tool_run(run, config, logger, as_json=as_json)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc


def _register_package_tool(name: str) -> None:
    spec = TOOLS[name]

    def command(
        path: Path | None = typer.Option(None, "--path", "-p", help="File or directory inside the package."),
        config_file: Path | None = typer.Option(None, "--config", "-c", help="Explicit configuration file."),
        as_json: bool = typer.Option(False, "--json", help="Print the run as JSON."),
        no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colour output."),
        no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji output."),
    ) -> None:
        _execute_tool(
            name,
            (path or Path.cwd()).resolve(),
            file=None,
            config_file=config_file,
            no_color=no_color,
            no_emoji=no_emoji,
            as_json=as_json,
        )

    command.__doc__ = spec.description
    app.command(name=name, help=spec.description)(command)


def _register_file_tool(name: str) -> None:
    spec = TOOLS[name]

    def command(
        file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Source file to process."),
        config_file: Path | None = typer.Option(None, "--config", "-c", help="Explicit configuration file."),
        as_json: bool = typer.Option(False, "--json", help="Print the run as JSON."),
        no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colour output."),
        no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji output."),
    ) -> None:
        target = file.resolve()
        _execute_tool(
            name,
            target,
            file=target,
            config_file=config_file,
            no_color=no_color,
            no_emoji=no_emoji,
            as_json=as_json,
        )

    command.__doc__ = spec.description
    app.command(name=name, help=spec.description)(command)


for _name, _spec in TOOLS.items():
    if _spec.file_scoped:
        _register_file_tool(_name)
    else:
        _register_package_tool(_name)


def prompt_selector(logger: CLILogger) -> PackageSelector:
    """Return a selector asking the user which member of a workspace to analyse."""

    def _select(root: Path, manifest: CargoManifest) -> str | None:
        logger.info(f"{root} declares several packages:")
        for index, member in enumerate(manifest.members, start=1):
            logger.line(f"  {index}. {member.name}")
        answer = typer.prompt(
            "Package to analyse (blank to skip)",
            default="",
            show_default=False,
            err=logger.console.stderr,
        ).strip()
        if not answer:
            return None
        if answer.isdigit() and 1 <= int(answer) <= len(manifest.members):
            return manifest.members[int(answer) - 1].name
        return answer

    return _select


@app.command("diagnostics")
def diagnostics_command(
    roots: list[Path] | None = typer.Argument(None, help="Workspace roots; defaults to the configured roots."),
    root: Path | None = typer.Option(None, "--root", "-r", help="Directory holding the configuration."),
    config_file: Path | None = typer.Option(None, "--config", "-c", help="Explicit configuration file."),
    as_json: bool = typer.Option(False, "--json", help="Print the workspace run as JSON."),
    no_input: bool = typer.Option(False, "--no-input", help="Skip multi-package roots instead of prompting."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colour output."),
    no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji output."),
) -> None:
    """Run the diagnostics command across every workspace root."""

    logger = build_cli_logger(emoji=not no_emoji, no_color=no_color, stderr=as_json)
    project_root = (root or Path.cwd()).resolve()
    try:
        config = load_cli_config(project_root, config_file, no_color=no_color, no_emoji=no_emoji)
        hooks = OrchestratorHooks()
        if config.output.show_chunks:
            # stdout carries the JSON message stream; only stderr is relayed live.
            def _relay(package: str, chunk: OutputChunk) -> None:
                if chunk.stream == "stderr":
                    logger.chunk(chunk)

            hooks.on_output = _relay
        if not as_json:
            hooks.after_package = lambda entry: _announce_package(entry, logger)
        selector = None if no_input else prompt_selector(logger)
        orchestrator = WorkspaceOrchestrator(config, OrchestratorDeps(selector=selector, hooks=hooks))
        targets = [path.resolve() for path in roots] if roots else None
        try:
            run = orchestrator.run(targets)
        except WorkspaceRequestError as exc:
            raise CLIError(str(exc), exit_code=EXIT_USAGE) from exc
        if as_json:
            logger.echo(workspace_run_to_json(run))
        else:
            render_workspace_run(run, config.output)
        if run.failed() or run.has_errors():
            raise CLIError("Diagnostics run reported failures", exit_code=EXIT_FAILURE)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc


def _announce_package(entry: PackageRun, logger: CLILogger) -> None:
    if entry.reason is None:
        logger.ok(f"{entry.package}: {len(entry.diagnostics)} diagnostic(s)")
    else:
        logger.warn(f"{entry.package}: {entry.status.value} ({entry.reason})")


@app.command("decode")
def decode_command(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Captured tool output to decode."),
    output_format: MessageFormat = typer.Option(
        MessageFormat.JSON,
        "--format",
        "-f",
        case_sensitive=False,
        help="Format of the captured output.",
    ),
    tool: str = typer.Option("clippy", "--tool", "-t", help="Tool name recorded on each diagnostic."),
    as_json: bool = typer.Option(False, "--json", help="Print diagnostics as JSON."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable ANSI colour output."),
    no_emoji: bool = typer.Option(False, "--no-emoji", help="Disable emoji output."),
) -> None:
    """Decode previously captured compiler or linter output."""

    logger = build_cli_logger(emoji=not no_emoji, no_color=no_color, stderr=as_json)
    try:
        text = file.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        logger.fail(f"Cannot read {file}: {exc}")
        raise typer.Exit(code=EXIT_USAGE) from exc
    report = decode_output(text, tool=tool, fmt=output_format)
    if as_json:
        logger.echo(json.dumps([diagnostic.model_dump(mode="json") for diagnostic in report.diagnostics], indent=2))
    else:
        config = Config()
        config.output.color = not no_color
        config.output.emoji = not no_emoji
        render_diagnostics(report.diagnostics, config.output)
        logger.info(f"{len(report.diagnostics)} diagnostic(s) decoded")
    for error in report.errors:
        logger.warn(str(error))


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main", "prompt_selector"]
