# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI tests driving a fake cargo executable."""

from __future__ import annotations

import json
import stat
import sys
from pathlib import Path

import pytest
from typer.testing import CliRunner

from cargoqa.cli.app import app

FAKE_CARGO = """#!{python}
import json
import sys

args = sys.argv[1:]
if "--message-format=json" in args:
    print(json.dumps({{
        "reason": "compiler-message",
        "message": {{
            "level": "{level}",
            "message": "consider using `copied`",
            "rendered": None,
            "spans": [{{"file_name": "src/lib.rs", "line_start": 3, "column_start": 5, "is_primary": True}}],
        }},
    }}))
    print(json.dumps({{"reason": "build-finished", "success": True}}))
sys.exit({exit_code})
"""


@pytest.fixture
def fake_cargo(tmp_path: Path):
    """Return a factory writing an executable stand-in for cargo."""

    def _build(*, level: str = "warning", exit_code: int = 0) -> Path:
        script = tmp_path / f"fake-cargo-{level}-{exit_code}"
        script.write_text(FAKE_CARGO.format(python=sys.executable, level=level, exit_code=exit_code), encoding="utf-8")
        script.chmod(script.stat().st_mode | stat.S_IXUSR)
        return script

    return _build


def _configure(directory: Path, cargo: Path, *extra: str) -> None:
    lines = [
        f'cargo = "{cargo}"',
        'lint_args = ["--message-format=json"]',
        *extra,
        "[output]",
        "color = false",
        "emoji = false",
    ]
    (directory / "cargo-qa.toml").write_text("\n".join(lines) + "\n", encoding="utf-8")


def test_decode_human_output(tmp_path: Path) -> None:
    captured = tmp_path / "build.log"
    captured.write_text("a.rs:3:5: error: foo\n  = note: bar\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["decode", str(captured), "--format", "human", "--no-color", "--no-emoji"])

    assert result.exit_code == 0, result.output
    assert "Diagnostics for a.rs:" in result.stdout
    assert "Line 3, Column 5: error: foo" in result.stdout
    assert "1 diagnostic(s) decoded" in result.stdout


def test_decode_json_output(tmp_path: Path) -> None:
    record = {
        "reason": "compiler-message",
        "message": {
            "level": "warning",
            "message": "unused import",
            "spans": [{"file_name": "src/main.rs", "line_start": 1, "column_start": 5, "is_primary": True}],
        },
    }
    captured = tmp_path / "clippy.jsonl"
    captured.write_text(json.dumps(record) + "\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["decode", str(captured), "--json", "--tool", "clippy"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload[0]["file_path"] == "src/main.rs"
    assert payload[0]["line"] == 0
    assert payload[0]["column"] == 4
    assert payload[0]["origin_tool"] == "clippy"


def test_clippy_command_reports_warnings(single_crate: Path, fake_cargo) -> None:
    _configure(single_crate, fake_cargo())

    result = CliRunner().invoke(app, ["clippy", "--path", str(single_crate), "--no-color", "--no-emoji"])

    assert result.exit_code == 0, result.output
    assert "Diagnostics for src/lib.rs:" in result.stdout
    assert "Line 3, Column 5: warning: consider using `copied`" in result.stdout
    assert "clippy finished" in result.stdout


def test_clippy_command_fails_on_error_diagnostics(single_crate: Path, fake_cargo) -> None:
    _configure(single_crate, fake_cargo(level="error", exit_code=101))

    result = CliRunner().invoke(app, ["clippy", "--path", str(single_crate), "--no-color", "--no-emoji"])

    assert result.exit_code == 1
    assert "clippy exited with status 101" in result.stdout


def test_tool_command_outside_a_crate_is_a_usage_error(tmp_path: Path, fake_cargo) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()
    _configure(empty, fake_cargo())

    result = CliRunner().invoke(app, ["fmt", "--path", str(empty), "--no-color", "--no-emoji"])

    assert result.exit_code == 2
    assert "Cargo.toml not found" in result.stdout


def test_missing_cargo_executable_fails(single_crate: Path) -> None:
    (single_crate / "cargo-qa.toml").write_text('cargo = "cargo-qa-definitely-missing"\n', encoding="utf-8")

    result = CliRunner().invoke(app, ["test", "--path", str(single_crate), "--no-color", "--no-emoji"])

    assert result.exit_code == 1
    assert "was not found on PATH" in result.stdout


def test_fmt_file_passes_the_file(single_crate: Path, fake_cargo) -> None:
    _configure(single_crate, fake_cargo())

    result = CliRunner().invoke(
        app,
        ["fmt-file", str(single_crate / "src" / "lib.rs"), "--json"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["tool"] == "fmt-file"
    assert payload["result"]["command"][1:] == ["fmt", "--", str((single_crate / "src" / "lib.rs").resolve())]


def test_diagnostics_command_emits_json(tmp_path: Path, single_crate: Path, fake_cargo) -> None:
    _configure(tmp_path, fake_cargo())

    result = CliRunner().invoke(app, ["diagnostics", str(single_crate), "--root", str(tmp_path), "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["phase"] == "complete"
    assert payload["packages"][0]["package"] == "demo"
    assert payload["performance"][0]["file_path"] == "src/lib.rs"


def test_diagnostics_command_prompts_for_a_member(tmp_path: Path, multi_workspace: Path, fake_cargo) -> None:
    _configure(tmp_path, fake_cargo())

    result = CliRunner().invoke(
        app,
        ["diagnostics", str(multi_workspace), "--root", str(tmp_path), "--no-color", "--no-emoji"],
        input="2\n",
    )

    assert result.exit_code == 0, result.output
    assert "1. alpha" in result.stdout
    assert "2. beta-crate" in result.stdout
    assert "beta-crate: 1 diagnostic(s)" in result.stdout
    assert "Performance Suggestions" in result.stdout


def test_diagnostics_command_without_roots_is_a_usage_error(tmp_path: Path, fake_cargo) -> None:
    _configure(tmp_path, fake_cargo())

    result = CliRunner().invoke(app, ["diagnostics", "--root", str(tmp_path), "--no-color", "--no-emoji"])

    assert result.exit_code == 2
    assert "No workspace roots" in result.stdout


def test_diagnostics_command_uses_configured_roots(tmp_path: Path, multi_workspace: Path, fake_cargo) -> None:
    _configure(tmp_path, fake_cargo(), "[workspace]", f'roots = ["{multi_workspace}"]')

    result = CliRunner().invoke(app, ["diagnostics", "--root", str(tmp_path), "--no-input", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["packages"][0]["status"] == "skipped"
    assert payload["packages"][0]["reason"] == "no package selected"


def test_decode_json_stays_parseable_with_decode_errors(tmp_path: Path) -> None:
    captured = tmp_path / "broken.jsonl"
    captured.write_text("{bad\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["decode", str(captured), "--json", "--no-emoji"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == []
    assert "line 1" in result.stderr


def test_diagnostics_json_stays_parseable_on_failure(tmp_path: Path, single_crate: Path, fake_cargo) -> None:
    _configure(tmp_path, fake_cargo(level="error", exit_code=101))

    result = CliRunner().invoke(app, ["diagnostics", str(single_crate), "--root", str(tmp_path), "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["packages"][0]["reason"] == "clippy exited with status 101"
    assert "Diagnostics run reported failures" in result.stderr


def test_tool_json_stays_parseable_on_failure(single_crate: Path, fake_cargo) -> None:
    _configure(single_crate, fake_cargo(level="error", exit_code=101))

    result = CliRunner().invoke(app, ["clippy", "--path", str(single_crate), "--json"])

    assert result.exit_code == 1
    payload = json.loads(result.stdout)
    assert payload["diagnostics"][0]["severity"] == "error"
    assert "clippy exited with status 101" in result.stderr
