# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the process supervisor."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from cargoqa.core.models import OutputChunk, RunResult, RunStatus
from cargoqa.core.runtime import CommandOptions, ProcessSupervisor, raise_for_status
from cargoqa.core.runtime.process import TIMEOUT_RETURNCODE
from cargoqa.errors import ProcessStartError, ToolExitFailure


def _python(code: str) -> list[str]:
    return ["-c", code]


def test_run_captures_both_streams(tmp_path: Path) -> None:
    supervisor = ProcessSupervisor()
    code = "import sys; print('out'); print('err', file=sys.stderr)"

    result = supervisor.run(sys.executable, _python(code), tmp_path)

    assert result.status is RunStatus.SUCCESS
    assert result.ok
    assert result.returncode == 0
    assert result.stdout == "out\n"
    assert result.stderr == "err\n"
    assert result.cwd == tmp_path
    assert result.duration >= 0


def test_run_reports_non_zero_exit_with_output(tmp_path: Path) -> None:
    code = "import sys; print('partial'); sys.exit(3)"

    result = ProcessSupervisor().run(sys.executable, _python(code), tmp_path)

    assert result.status is RunStatus.FAILED
    assert result.returncode == 3
    assert result.stdout == "partial\n"


def test_missing_executable_is_a_start_error(tmp_path: Path) -> None:
    result = ProcessSupervisor().run("cargo-qa-definitely-missing", ["clippy"], tmp_path)

    assert result.status is RunStatus.START_ERROR
    assert result.returncode is None
    assert "was not found on PATH" in (result.error or "")
    assert result.command == ("cargo-qa-definitely-missing", "clippy")


def test_popen_failure_is_a_start_error(tmp_path: Path) -> None:
    def _refuse(*_args, **_kwargs):
        raise PermissionError(13, "Permission denied")

    supervisor = ProcessSupervisor(popen_factory=_refuse, which=lambda name: f"/usr/bin/{name}")

    result = supervisor.run("cargo", ["fmt"], tmp_path)

    assert result.status is RunStatus.START_ERROR
    assert result.error == "Permission denied"


def test_stream_yields_chunks_then_one_result(tmp_path: Path) -> None:
    code = "import sys\nfor i in range(3):\n    print(i, flush=True)\nprint('warn', file=sys.stderr)"

    events = list(ProcessSupervisor().stream(sys.executable, _python(code), tmp_path))

    assert isinstance(events[-1], RunResult)
    chunks = [event for event in events[:-1] if isinstance(event, OutputChunk)]
    assert len(chunks) == len(events) - 1
    assert "".join(chunk.text for chunk in chunks if chunk.stream == "stdout") == "0\n1\n2\n"
    assert [chunk.text for chunk in chunks if chunk.stream == "stderr"] == ["warn\n"]


def test_on_output_receives_every_chunk(tmp_path: Path) -> None:
    seen: list[OutputChunk] = []

    result = ProcessSupervisor().run(sys.executable, _python("print('a'); print('b')"), tmp_path, on_output=seen.append)

    assert "".join(chunk.text for chunk in seen) == result.stdout


def test_env_overrides_are_visible_to_the_child(tmp_path: Path) -> None:
    code = "import os; print(os.environ['CARGO_QA_PROBE'])"

    result = ProcessSupervisor().run(
        sys.executable,
        _python(code),
        tmp_path,
        options=CommandOptions(env={"CARGO_QA_PROBE": "yes"}),
    )

    assert result.stdout.strip() == "yes"


def test_timeout_kills_the_process(tmp_path: Path) -> None:
    code = "import time; print('started', flush=True); time.sleep(30)"

    result = ProcessSupervisor().run(sys.executable, _python(code), tmp_path, options=CommandOptions(timeout=0.5))

    assert result.status is RunStatus.FAILED
    assert result.returncode == TIMEOUT_RETURNCODE
    assert "timed out" in result.stderr
    assert result.stdout == "started\n"
    assert result.duration < 30


def test_timeout_kills_a_continuously_printing_process(tmp_path: Path) -> None:
    code = "import time\nwhile True:\n    print('x', flush=True)\n    time.sleep(0.005)"

    result = ProcessSupervisor().run(sys.executable, _python(code), tmp_path, options=CommandOptions(timeout=0.5))

    assert result.status is RunStatus.FAILED
    assert result.returncode == TIMEOUT_RETURNCODE
    assert result.stdout.startswith("x\n")
    assert result.duration < 10


def test_relative_or_missing_cwd_is_rejected(tmp_path: Path) -> None:
    supervisor = ProcessSupervisor()

    with pytest.raises(ValueError):
        supervisor.run(sys.executable, _python("pass"), Path("relative/dir"))
    with pytest.raises(ValueError):
        supervisor.run(sys.executable, _python("pass"), tmp_path / "missing")


def test_negative_timeout_is_rejected() -> None:
    with pytest.raises(ValueError):
        CommandOptions(timeout=-1)


def test_raise_for_status(tmp_path: Path) -> None:
    supervisor = ProcessSupervisor()
    ok = supervisor.run(sys.executable, _python("pass"), tmp_path)
    failed = supervisor.run(sys.executable, _python("import sys; sys.exit(2)"), tmp_path)
    missing = supervisor.run("cargo-qa-definitely-missing", [], tmp_path)

    assert raise_for_status(ok) is ok
    with pytest.raises(ToolExitFailure) as exit_info:
        raise_for_status(failed)
    assert exit_info.value.returncode == 2
    with pytest.raises(ProcessStartError):
        raise_for_status(missing)
