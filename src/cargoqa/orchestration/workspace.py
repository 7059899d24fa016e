# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Sequential diagnostics runs across every root of a cargo workspace."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from ..config import Config
from ..core.models import OutputChunk, PackageRun, PackageStatus, RunStatus, WorkspacePhase, WorkspaceRun
from ..core.runtime.process import CommandOptions, ProcessSupervisor
from ..diagnostics.classify import classify_diagnostics
from ..errors import PackageResolutionError, WorkspaceBusyError, WorkspaceRequestError
from ..parsers import MessageFormat, decode_output
from ..workspace.manifest import MANIFEST_NAME, CargoManifest, PackageMember, find_manifest_dir, load_manifest

logger = logging.getLogger(__name__)

ManifestLocator = Callable[[Path], Path | None]
ManifestLoader = Callable[[Path], CargoManifest]


class PackageSelector(Protocol):
    """Pick one member package for a multi-member workspace root."""

    def __call__(self, root: Path, manifest: CargoManifest) -> str | None:
        """Return the chosen member name, or ``None`` when nothing was selected."""


@dataclass
class OrchestratorHooks:
    """Optional hooks to observe a workspace run."""

    on_output: Callable[[str, OutputChunk], None] | None = None
    on_phase: Callable[[WorkspacePhase, Path | None], None] | None = None
    after_package: Callable[[PackageRun], None] | None = None
    after_run: Callable[[WorkspaceRun], None] | None = None


@dataclass(frozen=True)
class OrchestratorDeps:
    """Collaborators required to construct a :class:`WorkspaceOrchestrator`."""

    supervisor: ProcessSupervisor | None = None
    selector: PackageSelector | None = None
    hooks: OrchestratorHooks | None = None
    locate_manifest: ManifestLocator | None = None
    load_manifest: ManifestLoader | None = None


class WorkspaceOrchestrator:
    """Run the diagnostics command once per workspace root, strictly in order.

    Package-level problems (no manifest, no selection, spawn failures, non-zero
    exits, malformed output lines) are recorded on the run and never abort it.
    Only a request without roots, or a request made while another run is in
    flight, raises.
    """

    def __init__(self, config: Config, deps: OrchestratorDeps | None = None) -> None:
        """Create an orchestrator bound to ``config``.

        Args:
            config: Configuration describing the diagnostics command and roots.
            deps: Optional collaborators replacing the defaults.
        """

        resolved = deps or OrchestratorDeps()
        self._config = config
        self._supervisor = resolved.supervisor or ProcessSupervisor()
        self._selector = resolved.selector
        self._hooks = resolved.hooks or OrchestratorHooks()
        self._locate: ManifestLocator = resolved.locate_manifest or find_manifest_dir
        self._load: ManifestLoader = resolved.load_manifest or load_manifest
        self._lock = threading.Lock()

    def run(self, roots: Sequence[Path] | None = None) -> WorkspaceRun:
        """Produce a complete :class:`WorkspaceRun` for ``roots``.

        Args:
            roots: Workspace roots in enumeration order; defaults to the configured roots.

        Returns:
            WorkspaceRun: Aggregate holding one entry per root, in root order.

        Raises:
            WorkspaceRequestError: If no roots were supplied or configured.
            WorkspaceBusyError: If another run on this orchestrator is in flight.
        """

        targets = list(roots) if roots is not None else list(self._config.workspace.roots)
        if not targets:
            raise WorkspaceRequestError("No workspace roots to analyse")
        if not self._lock.acquire(blocking=False):
            raise WorkspaceBusyError("A workspace diagnostics run is already in progress")
        try:
            run = WorkspaceRun()
            self._enter(run, WorkspacePhase.ENUMERATING_ROOTS, None)
            for root in targets:
                package_run = self._process_root(run, Path(root))
                run.append(package_run)
                if self._hooks.after_package:
                    self._hooks.after_package(package_run)
            self._enter(run, WorkspacePhase.COMPLETE, None)
            if self._hooks.after_run:
                self._hooks.after_run(run)
            return run
        finally:
            self._lock.release()

    def _enter(self, run: WorkspaceRun, phase: WorkspacePhase, root: Path | None) -> None:
        run.phase = phase
        if self._hooks.on_phase:
            self._hooks.on_phase(phase, root)

    def _process_root(self, run: WorkspaceRun, root: Path) -> PackageRun:
        """Resolve, run and decode a single root.

        Args:
            run: Aggregate whose phase is advanced as the root progresses.
            root: Workspace root being processed.

        Returns:
            PackageRun: Entry describing the root, including skips and failures.
        """

        self._enter(run, WorkspacePhase.RESOLVING_PACKAGE, root)
        try:
            manifest_dir, member = self._resolve_package(root)
        except PackageResolutionError as exc:
            logger.info("skipping root %s: %s", root, exc.reason)
            return PackageRun(package=root.name, root=root, status=PackageStatus.SKIPPED, reason=exc.reason)

        self._enter(run, WorkspacePhase.RUNNING_TOOL, root)
        settings = self._config.diagnostics
        tool = settings.subcommand
        on_output = self._hooks.on_output

        def _forward(chunk: OutputChunk) -> None:
            if on_output is not None:
                on_output(member.name, chunk)

        result = self._supervisor.run(
            self._config.cargo,
            [tool, *settings.args],
            member.directory,
            options=CommandOptions(env=self._config.env or None, timeout=settings.timeout),
            on_output=_forward,
        )
        if result.status is RunStatus.START_ERROR:
            logger.info("package %s failed to start: %s", member.name, result.error)
            return PackageRun(
                package=member.name,
                root=root,
                manifest_dir=manifest_dir,
                status=PackageStatus.FAILED,
                result=result,
                reason=result.error,
            )

        self._enter(run, WorkspacePhase.DECODING, root)
        fmt = settings.message_format
        text = result.stdout if fmt is MessageFormat.JSON else result.combined_output
        report = decode_output(text, tool=tool, fmt=fmt)

        self._enter(run, WorkspacePhase.MERGING, root)
        reason = None if result.ok else f"{tool} exited with status {result.returncode}"
        return PackageRun(
            package=member.name,
            root=root,
            manifest_dir=manifest_dir,
            status=PackageStatus.COMPLETED,
            result=result,
            diagnostics=classify_diagnostics(report.diagnostics),
            decode_errors=[str(error) for error in report.errors],
            reason=reason,
        )

    def _resolve_package(self, root: Path) -> tuple[Path, PackageMember]:
        """Resolve ``root`` to exactly one member package.

        Args:
            root: Workspace root to resolve.

        Returns:
            tuple[Path, PackageMember]: Manifest directory and the chosen member.

        Raises:
            PackageResolutionError: When no manifest exists, the manifest declares
                no packages, or a multi-member root has no (valid) selection.
        """

        manifest_dir = self._locate(root)
        if manifest_dir is None:
            raise PackageResolutionError(root, f"{MANIFEST_NAME} not found")
        manifest = self._load(manifest_dir)
        if not manifest.members:
            raise PackageResolutionError(root, "manifest declares no packages")
        if len(manifest.members) == 1:
            return manifest_dir, manifest.members[0]

        preselected = self._config.workspace.packages
        choice = preselected.get(str(root)) or preselected.get(root.name)
        if choice is None and self._selector is not None:
            choice = self._selector(root, manifest)
        if choice is None:
            raise PackageResolutionError(root, "no package selected")
        member = manifest.member(choice)
        if member is None:
            raise PackageResolutionError(root, f"unknown package '{choice}'")
        return manifest_dir, member


__all__ = [
    "ManifestLoader",
    "ManifestLocator",
    "OrchestratorDeps",
    "OrchestratorHooks",
    "PackageSelector",
    "WorkspaceOrchestrator",
]
