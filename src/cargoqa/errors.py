# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the supervisor, decoders and orchestrator."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class CargoQAError(Exception):
    """Base class for errors raised by cargo-qa."""


class ProcessStartError(CargoQAError):
    """Raised when an external command cannot be spawned at all."""

    def __init__(self, command: Sequence[str], reason: str) -> None:
        """Initialise the error with the attempted command and the OS error text.

        Args:
            command: Argument vector that failed to start.
            reason: Operating system error text describing the failure.
        """

        head = command[0] if command else "<empty>"
        super().__init__(f"Failed to start process '{head}': {reason}")
        self.command = tuple(command)
        self.reason = reason


class ToolExitFailure(CargoQAError):
    """Raised when a caller insists on a zero exit status and the tool disagrees."""

    def __init__(self, command: Sequence[str], returncode: int, stderr: str | None) -> None:
        """Initialise the error with captured subprocess metadata.

        Args:
            command: Argument vector that was executed.
            returncode: Exit status reported by the subprocess.
            stderr: Captured standard error stream.
        """

        head = command[0] if command else "<empty>"
        super().__init__(f"Command '{head}' exited with status {returncode}. stderr: {stderr or '<none>'}")
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr


class DecodeParseError(CargoQAError):
    """Describe one malformed line encountered while decoding tool output."""

    def __init__(self, line_number: int, reason: str, text: str = "") -> None:
        """Initialise the error with the offending line.

        Args:
            line_number: One-based line number within the decoded text.
            reason: Parser error text.
            text: Raw line content, truncated for display.
        """

        super().__init__(f"line {line_number}: {reason}")
        self.line_number = line_number
        self.reason = reason
        self.text = text[:200]


class PackageResolutionError(CargoQAError):
    """Raised when a workspace root cannot be resolved to exactly one package."""

    def __init__(self, root: Path, reason: str) -> None:
        """Initialise the error with the root that failed to resolve.

        Args:
            root: Workspace root being resolved.
            reason: Human readable explanation.
        """

        super().__init__(f"{root}: {reason}")
        self.root = root
        self.reason = reason


class ConfigError(CargoQAError):
    """Raised when configuration input is invalid."""


class WorkspaceRequestError(CargoQAError):
    """Raised when a workspace diagnostics request is unusable as a whole."""


class WorkspaceBusyError(WorkspaceRequestError):
    """Raised when a second workspace run starts while one is still in flight."""


__all__ = [
    "CargoQAError",
    "ConfigError",
    "DecodeParseError",
    "PackageResolutionError",
    "ProcessStartError",
    "ToolExitFailure",
    "WorkspaceBusyError",
    "WorkspaceRequestError",
]
