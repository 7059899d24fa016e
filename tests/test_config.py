# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from cargoqa.config import CONFIG_FILENAME, Config, load_config
from cargoqa.errors import ConfigError
from cargoqa.parsers import MessageFormat


def test_defaults_without_any_files(tmp_path: Path) -> None:
    config = load_config(tmp_path, env={})

    assert config == Config()
    assert config.cargo == "cargo"
    assert config.diagnostics.subcommand == "clippy"
    assert config.diagnostics.message_format is MessageFormat.JSON
    assert config.workspace.roots == []


def test_manifest_metadata_is_overridden_by_config_file(tmp_path: Path) -> None:
    (tmp_path / "Cargo.toml").write_text(
        """
[workspace]
members = []

[workspace.metadata.cargo-qa]
lint_args = ["--all-targets"]

[workspace.metadata.cargo-qa.diagnostics]
subcommand = "check"
timeout = 60
""".strip(),
        encoding="utf-8",
    )
    (tmp_path / CONFIG_FILENAME).write_text(
        """
[diagnostics]
subcommand = "clippy"
args = []

[output]
color = false
""".strip(),
        encoding="utf-8",
    )

    config = load_config(tmp_path, env={})

    assert config.lint_args == ["--all-targets"]
    assert config.diagnostics.subcommand == "clippy"
    assert config.diagnostics.timeout == 60
    assert config.diagnostics.message_format is MessageFormat.HUMAN
    assert config.output.color is False


def test_env_expansion_and_relative_roots(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text(
        """
cargo = "${CARGO_HOME}/bin/cargo"

[env]
RUSTFLAGS = "-D $LEVEL"

[workspace]
roots = ["crates/a", "/abs/b"]

[workspace.packages]
a = "alpha"
""".strip(),
        encoding="utf-8",
    )

    config = load_config(tmp_path, env={"CARGO_HOME": "/opt/cargo", "LEVEL": "warnings"})

    assert config.cargo == "/opt/cargo/bin/cargo"
    assert config.env == {"RUSTFLAGS": "-D warnings"}
    assert config.workspace.roots == [(tmp_path / "crates" / "a").resolve(), Path("/abs/b")]
    assert config.workspace.packages == {"a": "alpha"}


def test_unknown_variables_are_left_untouched(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text('cargo = "$NOPE/cargo"\n', encoding="utf-8")

    assert load_config(tmp_path, env={}).cargo == "$NOPE/cargo"


def test_invalid_values_raise_config_error(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("unknown_key = 1\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, env={})


def test_negative_timeout_is_invalid(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("[diagnostics]\ntimeout = -1\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, env={})


def test_unparsable_toml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / CONFIG_FILENAME).write_text("[output\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path, env={})


def test_explicit_config_file(tmp_path: Path) -> None:
    custom = tmp_path / "custom.toml"
    custom.write_text('format_args = ["--check"]\n', encoding="utf-8")

    assert load_config(tmp_path, config_file=custom, env={}).format_args == ["--check"]
    with pytest.raises(ConfigError):
        load_config(tmp_path, config_file=tmp_path / "absent.toml", env={})
