# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, config loading)."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console
from rich.text import Text

from ..config import Config, load_config
from ..core.logging import fail as core_fail
from ..core.logging import info as core_info
from ..core.logging import ok as core_ok
from ..core.logging import warn as core_warn
from ..core.models import OutputChunk
from ..errors import ConfigError

EXIT_FAILURE = 1
EXIT_USAGE = 2


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = EXIT_FAILURE) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji and colour settings."""

    console: Console
    use_emoji: bool
    use_color: bool

    def fail(self, message: str) -> None:
        """Log a failure message."""

        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def warn(self, message: str) -> None:
        """Log a warning message."""

        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def ok(self, message: str) -> None:
        """Log a success message."""

        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def info(self, message: str) -> None:
        """Log an informational message."""

        core_info(message, use_emoji=self.use_emoji, use_color=self.use_color, console=self.console)

    def line(self, message: str) -> None:
        """Print an undecorated line on the logger's console."""

        self.console.print(Text(message))

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message)

    def chunk(self, chunk: OutputChunk) -> None:
        """Relay a live output chunk from a running tool."""

        typer.echo(chunk.text, nl=False, err=chunk.stream == "stderr")


def build_cli_logger(*, emoji: bool, no_color: bool = False, stderr: bool = False) -> CLILogger:
    """Return a ``CLILogger`` configured for the provided presentation flags.

    Args:
        emoji: Whether log output may include emoji glyphs.
        no_color: Whether terminal colour output should be disabled.
        stderr: Write log lines to stderr, keeping stdout for machine-readable output.

    Returns:
        CLILogger: Logger instance bound to a dedicated Rich console.
    """

    console = Console(no_color=no_color, highlight=False, soft_wrap=True, stderr=stderr)
    return CLILogger(console=console, use_emoji=emoji, use_color=not no_color)


def load_cli_config(root: Path, config_file: Path | None, *, no_color: bool, no_emoji: bool) -> Config:
    """Load configuration for a command, applying presentation overrides.

    Args:
        root: Project directory used to locate configuration files.
        config_file: Explicit configuration file supplied on the command line.
        no_color: Disable colour output regardless of configuration.
        no_emoji: Disable emoji output regardless of configuration.

    Returns:
        Config: Effective configuration.

    Raises:
        CLIError: If the configuration cannot be loaded.
    """

    try:
        config = load_config(root, config_file=config_file)
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=EXIT_USAGE) from exc
    if no_color:
        config.output.color = False
    if no_emoji:
        config.output.emoji = False
    return config


__all__ = [
    "CLIError",
    "CLILogger",
    "EXIT_FAILURE",
    "EXIT_USAGE",
    "build_cli_logger",
    "load_cli_config",
]
