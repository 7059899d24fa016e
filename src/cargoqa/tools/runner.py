# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Run a single catalog tool against the package that owns a path."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..config import Config
from ..core.models import Diagnostic, RunResult
from ..core.runtime.process import CommandOptions, OutputSink, ProcessSupervisor
from ..diagnostics.classify import classify_diagnostics
from ..errors import PackageResolutionError
from ..parsers import MessageFormat, decode_output, message_format_for
from ..workspace.manifest import MANIFEST_NAME, find_manifest_dir
from .catalog import ToolSpec, get_tool


class ToolRun(BaseModel):
    """Outcome of one single-package tool invocation."""

    model_config = ConfigDict(validate_assignment=True)

    tool: str
    package_dir: Path
    result: RunResult
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    decode_errors: list[str] = Field(default_factory=list)


def build_arguments(spec: ToolSpec, config: Config, *, file: Path | None = None) -> list[str]:
    """Return the arguments passed to the cargo executable for ``spec``.

    Args:
        spec: Catalog entry to invoke.
        config: Configuration supplying extra per-tool arguments.
        file: Target file for file-scoped tools.

    Returns:
        list[str]: Argument vector excluding the executable itself.

    Raises:
        ValueError: If a file-scoped tool is invoked without ``file``.
    """

    args = list(spec.subcommand)
    if spec.args_key is not None:
        args.extend(getattr(config, spec.args_key))
    if spec.file_scoped:
        if file is None:
            raise ValueError(f"Tool '{spec.name}' requires a target file")
        args.append(str(file.resolve()))
    return args


class ToolRunner:
    """Run catalog tools one package at a time, outside the workspace lock."""

    def __init__(self, config: Config, *, supervisor: ProcessSupervisor | None = None) -> None:
        """Create a runner bound to ``config``.

        Args:
            config: Configuration providing the cargo executable and extra args.
            supervisor: Process supervisor used to spawn commands.
        """

        self._config = config
        self._supervisor = supervisor or ProcessSupervisor()

    def run(
        self,
        name: str,
        start: Path,
        *,
        file: Path | None = None,
        on_output: OutputSink | None = None,
    ) -> ToolRun:
        """Run the tool called ``name`` in the package that contains ``start``.

        Args:
            name: Catalog tool name (``"clippy"``, ``"fmt-file"``...).
            start: File or directory used to locate the owning ``Cargo.toml``.
            file: Target file for file-scoped tools.
            on_output: Callback receiving live output chunks.

        Returns:
            ToolRun: Run result plus decoded, classified diagnostics.

        Raises:
            PackageResolutionError: If no manifest encloses ``start``.
            ValueError: If ``name`` is unknown or a file-scoped tool lacks ``file``.
        """

        spec = get_tool(name)
        package_dir = find_manifest_dir(start)
        if package_dir is None:
            raise PackageResolutionError(start, f"{MANIFEST_NAME} not found in the project")
        args = build_arguments(spec, self._config, file=file)
        result = self._supervisor.run(
            self._config.cargo,
            args,
            package_dir,
            options=CommandOptions(env=self._config.env or None),
            on_output=on_output,
        )
        run = ToolRun(tool=spec.name, package_dir=package_dir, result=result)
        if spec.decodes:
            fmt = message_format_for(args)
            text = result.stdout if fmt is MessageFormat.JSON else result.combined_output
            report = decode_output(text, tool=spec.name, fmt=fmt)
            run.diagnostics = classify_diagnostics(report.diagnostics)
            run.decode_errors = [str(error) for error in report.errors]
        return run


__all__ = ["ToolRun", "ToolRunner", "build_arguments"]
