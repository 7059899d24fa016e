# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shell-free process supervision with live output streaming."""

from __future__ import annotations

import logging
import os
import queue
import shutil

# Bandit: subprocess usage is intentional; commands come from the tool catalog
# and are passed as argument lists without ``shell=True``.
import subprocess  # nosec B404
import threading
import time
from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Final

from ...errors import ProcessStartError, ToolExitFailure
from ..models import OutputChunk, RunResult, RunStatus, StreamName

logger = logging.getLogger(__name__)

TIMEOUT_RETURNCODE: Final[int] = 124
_POLL_INTERVAL: Final[float] = 0.1

OutputSink = Callable[[OutputChunk], None]
PopenFactory = Callable[..., "subprocess.Popen[str]"]
WhichFn = Callable[[str], str | None]
SupervisorEvent = OutputChunk | RunResult


@dataclass(slots=True)
class CommandOptions:
    """Execution knobs applied to a supervised command."""

    env: Mapping[str, str] | None = None
    timeout: float | None = None

    def __post_init__(self) -> None:
        """Validate the timeout value.

        Raises:
            ValueError: When ``timeout`` is negative.
        """

        if self.timeout is not None and self.timeout < 0:
            raise ValueError("timeout must be non-negative")

    def merged_env(self) -> dict[str, str] | None:
        """Return ``os.environ`` overlaid with :attr:`env`, or ``None`` when unset."""

        if not self.env:
            return None
        merged = dict(os.environ)
        merged.update({str(key): str(value) for key, value in self.env.items()})
        return merged


def _pump(pipe: IO[str], stream: StreamName, sink: queue.Queue[tuple[StreamName, str | None]]) -> None:
    """Forward lines from ``pipe`` into ``sink`` and signal EOF with ``None``.

    Args:
        pipe: Text pipe attached to the child process.
        stream: Stream label forwarded with each line.
        sink: Queue consumed by the supervising thread.
    """

    try:
        for line in iter(pipe.readline, ""):
            sink.put((stream, line))
    finally:
        pipe.close()
        sink.put((stream, None))


class ProcessSupervisor:
    """Spawn one external command at a time and stream its output.

    Each invocation owns its own pipes, reader threads and queue, so several
    supervisors (or several calls on one supervisor from different threads) never
    share state. Ordering across packages is the caller's responsibility.
    """

    def __init__(
        self,
        *,
        popen_factory: PopenFactory | None = None,
        which: WhichFn | None = None,
    ) -> None:
        """Create a supervisor with optional process-spawning collaborators.

        Args:
            popen_factory: Replacement for :class:`subprocess.Popen`.
            which: Replacement for :func:`shutil.which` used to resolve executables.
        """

        self._popen: PopenFactory = popen_factory or subprocess.Popen
        self._which: WhichFn = which or shutil.which

    def stream(
        self,
        executable: str,
        args: Sequence[str],
        cwd: Path,
        *,
        options: CommandOptions | None = None,
    ) -> Iterator[SupervisorEvent]:
        """Yield output chunks as they arrive, followed by exactly one :class:`RunResult`.

        Args:
            executable: Program name looked up on ``PATH`` (or an absolute path).
            args: Arguments passed after the executable.
            cwd: Absolute working directory for the process.
            options: Optional environment and timeout settings.

        Yields:
            OutputChunk | RunResult: Incremental chunks, then the final result.

        Raises:
            ValueError: If ``cwd`` is relative or not an existing directory.
        """

        working_dir = _validate_cwd(cwd)
        resolved_options = options or CommandOptions()
        started_at = time.monotonic()
        requested = (executable, *args)

        try:
            argv = [self._resolve_executable(executable), *args]
        except ProcessStartError as exc:
            yield _start_failure(requested, working_dir, started_at, exc.reason)
            return

        logger.debug("spawning command=%s cwd=%s", " ".join(argv), working_dir)
        try:
            # Bandit: argument vectors are assembled from the tool catalog.
            process = self._popen(  # nosec B603
                argv,
                cwd=str(working_dir),
                env=resolved_options.merged_env(),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as exc:
            yield _start_failure(tuple(argv), working_dir, started_at, exc.strerror or str(exc))
            return

        events: queue.Queue[tuple[StreamName, str | None]] = queue.Queue()
        readers = [
            threading.Thread(target=_pump, args=(process.stdout, "stdout", events), daemon=True),
            threading.Thread(target=_pump, args=(process.stderr, "stderr", events), daemon=True),
        ]
        for reader in readers:
            reader.start()

        captured: dict[StreamName, list[str]] = {"stdout": [], "stderr": []}
        deadline = started_at + resolved_options.timeout if resolved_options.timeout is not None else None
        timed_out = False
        open_streams = len(readers)
        try:
            while open_streams:
                if deadline is not None and not timed_out and time.monotonic() >= deadline:
                    timed_out = True
                    process.kill()
                try:
                    stream_name, text = events.get(timeout=_POLL_INTERVAL)
                except queue.Empty:
                    continue
                if text is None:
                    open_streams -= 1
                    continue
                captured[stream_name].append(text)
                yield OutputChunk(stream=stream_name, text=text)
            returncode = process.wait()
        finally:
            if process.poll() is None:
                process.kill()
                process.wait()
            for reader in readers:
                reader.join(timeout=1.0)

        stderr_text = "".join(captured["stderr"])
        if timed_out:
            returncode = TIMEOUT_RETURNCODE
            note = f"Command timed out after {resolved_options.timeout:.1f}s"
            stderr_text = f"{stderr_text}\n{note}" if stderr_text else note
        yield RunResult(
            command=tuple(argv),
            cwd=working_dir,
            status=RunStatus.SUCCESS if returncode == 0 else RunStatus.FAILED,
            returncode=returncode,
            stdout="".join(captured["stdout"]),
            stderr=stderr_text,
            started_at=started_at,
            duration=time.monotonic() - started_at,
        )

    def run(
        self,
        executable: str,
        args: Sequence[str],
        cwd: Path,
        *,
        options: CommandOptions | None = None,
        on_output: OutputSink | None = None,
    ) -> RunResult:
        """Run a command to completion, forwarding chunks to ``on_output``.

        Args:
            executable: Program name looked up on ``PATH`` (or an absolute path).
            args: Arguments passed after the executable.
            cwd: Absolute working directory for the process.
            options: Optional environment and timeout settings.
            on_output: Callback receiving each chunk as it arrives.

        Returns:
            RunResult: Final outcome of the invocation.
        """

        result: RunResult | None = None
        for event in self.stream(executable, args, cwd, options=options):
            if isinstance(event, RunResult):
                result = event
            elif on_output is not None:
                on_output(event)
        if result is None:  # pragma: no cover - stream always ends with a result
            raise RuntimeError("process stream ended without a result")
        return result

    def _resolve_executable(self, executable: str) -> str:
        """Return an absolute path for ``executable``.

        Args:
            executable: Program name or path.

        Returns:
            str: Absolute path to the program.

        Raises:
            ProcessStartError: If the program cannot be found on ``PATH``.
        """

        if not executable:
            raise ProcessStartError((executable,), "empty executable name")
        candidate = Path(executable)
        if candidate.is_absolute():
            return str(candidate)
        resolved = self._which(executable)
        if resolved is None:
            raise ProcessStartError((executable,), f"Executable '{executable}' was not found on PATH")
        return resolved


def _validate_cwd(cwd: Path) -> Path:
    """Return ``cwd`` after checking it is an absolute existing directory.

    Args:
        cwd: Candidate working directory.

    Returns:
        Path: The validated directory.

    Raises:
        ValueError: If ``cwd`` is missing, relative or not a directory.
    """

    if cwd is None:
        raise ValueError("working directory is required")
    path = Path(cwd)
    if not path.is_absolute():
        raise ValueError(f"working directory must be absolute: {path}")
    if not path.is_dir():
        raise ValueError(f"working directory does not exist: {path}")
    return path


def _start_failure(command: Sequence[str], cwd: Path, started_at: float, reason: str) -> RunResult:
    logger.debug("failed to start command=%s reason=%s", " ".join(command), reason)
    return RunResult(
        command=tuple(command),
        cwd=cwd,
        status=RunStatus.START_ERROR,
        returncode=None,
        started_at=started_at,
        duration=time.monotonic() - started_at,
        error=reason,
    )


def raise_for_status(result: RunResult) -> RunResult:
    """Raise when ``result`` did not succeed; return it unchanged otherwise.

    Args:
        result: Outcome returned by :meth:`ProcessSupervisor.run`.

    Returns:
        RunResult: ``result`` when the command exited with status ``0``.

    Raises:
        ProcessStartError: If the process never started.
        ToolExitFailure: If the process exited with a non-zero status.
    """

    if result.status is RunStatus.START_ERROR:
        raise ProcessStartError(result.command, result.error or "unknown error")
    if result.status is RunStatus.FAILED:
        raise ToolExitFailure(result.command, result.returncode or 1, result.stderr)
    return result


__all__ = [
    "CommandOptions",
    "OutputSink",
    "ProcessSupervisor",
    "SupervisorEvent",
    "TIMEOUT_RETURNCODE",
    "raise_for_status",
]
