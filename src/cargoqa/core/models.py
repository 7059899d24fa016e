# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the cargoqa package."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cargoqa.core.severity import Severity

StreamName = Literal["stdout", "stderr"]


class DiagnosticCategory(str, Enum):
    """Intent assigned to a diagnostic by the classifier."""

    PERFORMANCE = "performance"
    PITFALL = "pitfall"
    PLAIN = "plain"


class Diagnostic(BaseModel):
    """Standardize diagnostics reported by cargo tools into a common schema."""

    model_config = ConfigDict(validate_assignment=True)

    file_path: str
    line: int = 0
    column: int = 0
    severity: Severity
    message: str
    origin_tool: str
    code: str | None = None
    category: DiagnosticCategory | None = None

    @field_validator("line", "column")
    @classmethod
    def _non_negative(cls, value: int) -> int:
        """Clamp positions to zero so malformed tool output never yields negatives.

        Args:
            value: Zero-based position candidate.

        Returns:
            int: ``value`` or ``0`` when negative.
        """

        return max(value, 0)


class OutputChunk(BaseModel):
    """Incremental piece of output read from a running process."""

    model_config = ConfigDict(frozen=True)

    stream: StreamName
    text: str


class RunStatus(str, Enum):
    """Outcome of a single supervised process invocation."""

    SUCCESS = "success"
    FAILED = "failed"
    START_ERROR = "start_error"


class RunResult(BaseModel):
    """Capture the immutable outcome of one Process Supervisor invocation.

    A non-zero exit is reported as :attr:`RunStatus.FAILED` with the captured
    text intact, since cargo tools exit non-zero whenever they find errors.
    :attr:`RunStatus.START_ERROR` is reserved for processes that never ran.
    """

    model_config = ConfigDict(frozen=True)

    command: tuple[str, ...]
    cwd: Path
    status: RunStatus
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""
    started_at: float
    duration: float = 0.0
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Return ``True`` when the process exited with status ``0``."""

        return self.status is RunStatus.SUCCESS

    @property
    def combined_output(self) -> str:
        """Return stdout followed by stderr, never fusing their boundary lines."""

        if self.stdout and self.stderr and not self.stdout.endswith("\n"):
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout + self.stderr


class PackageStatus(str, Enum):
    """Per-package state recorded in a workspace run."""

    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class PackageRun(BaseModel):
    """Result bundle for one resolved (or skipped) workspace root."""

    model_config = ConfigDict(validate_assignment=True)

    package: str
    root: Path
    manifest_dir: Path | None = None
    status: PackageStatus
    result: RunResult | None = None
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    decode_errors: list[str] = Field(default_factory=list)
    reason: str | None = None


class WorkspacePhase(str, Enum):
    """States visited by the workspace orchestrator."""

    INIT = "init"
    ENUMERATING_ROOTS = "enumerating_roots"
    RESOLVING_PACKAGE = "resolving_package"
    RUNNING_TOOL = "running_tool"
    DECODING = "decoding"
    MERGING = "merging"
    COMPLETE = "complete"


class WorkspaceRun(BaseModel):
    """Aggregate of one "run diagnostics over the whole workspace" request."""

    model_config = ConfigDict(validate_assignment=True)

    packages: list[PackageRun] = Field(default_factory=list)
    diagnostics: list[Diagnostic] = Field(default_factory=list)
    performance: list[Diagnostic] = Field(default_factory=list)
    pitfalls: list[Diagnostic] = Field(default_factory=list)
    phase: WorkspacePhase = WorkspacePhase.INIT

    @property
    def complete(self) -> bool:
        """Return ``True`` once every root has been processed or skipped."""

        return self.phase is WorkspacePhase.COMPLETE

    def append(self, package_run: PackageRun) -> None:
        """Record ``package_run`` and extend the derived buckets in order.

        Args:
            package_run: Finished per-package result, including skipped roots.
        """

        self.packages.append(package_run)
        for diagnostic in package_run.diagnostics:
            self.diagnostics.append(diagnostic)
            if diagnostic.category is DiagnosticCategory.PERFORMANCE:
                self.performance.append(diagnostic)
            elif diagnostic.category is DiagnosticCategory.PITFALL:
                self.pitfalls.append(diagnostic)

    def skipped(self) -> list[PackageRun]:
        """Return the packages skipped during resolution."""

        return [entry for entry in self.packages if entry.status is PackageStatus.SKIPPED]

    def failed(self) -> list[PackageRun]:
        """Return the packages whose tool could not run or exited non-zero."""

        return [
            entry
            for entry in self.packages
            if entry.status is PackageStatus.FAILED
            or (entry.result is not None and entry.result.status is not RunStatus.SUCCESS)
        ]

    def diagnostic_count(self) -> int:
        """Return the total number of diagnostics across all packages."""

        return len(self.diagnostics)

    def has_errors(self) -> bool:
        """Return ``True`` when any merged diagnostic is an error."""

        return any(diagnostic.severity is Severity.ERROR for diagnostic in self.diagnostics)


__all__ = [
    "Diagnostic",
    "DiagnosticCategory",
    "OutputChunk",
    "PackageRun",
    "PackageStatus",
    "RunResult",
    "RunStatus",
    "StreamName",
    "WorkspacePhase",
    "WorkspaceRun",
]
