# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models and loaders for cargo-qa."""

from __future__ import annotations

import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .parsers import JSON_MESSAGE_FORMAT_FLAG, MessageFormat, message_format_for
from .workspace.manifest import MANIFEST_NAME

CONFIG_FILENAME: Final[str] = "cargo-qa.toml"
METADATA_KEY: Final[str] = "cargo-qa"

_ENV_VAR_PATTERN = re.compile(r"\$(\w+)|\$\{([^}]+)\}")


class OutputConfig(BaseModel):
    """Console presentation preferences."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    color: bool = True
    emoji: bool = True
    show_chunks: bool = True


class DiagnosticsConfig(BaseModel):
    """Command used by the workspace diagnostics run."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    subcommand: str = "clippy"
    args: list[str] = Field(default_factory=lambda: [JSON_MESSAGE_FORMAT_FLAG])
    timeout: float | None = Field(default=None, ge=0)

    @property
    def message_format(self) -> MessageFormat:
        """Return the output format implied by :attr:`args`."""

        return message_format_for(self.args)


class WorkspaceConfig(BaseModel):
    """Workspace roots and pre-selected member packages."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    roots: list[Path] = Field(default_factory=list)
    packages: dict[str, str] = Field(default_factory=dict)


class Config(BaseModel):
    """Top-level configuration consumed by the CLI, runner and orchestrator."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    cargo: str = "cargo"
    format_args: list[str] = Field(default_factory=list)
    lint_args: list[str] = Field(default_factory=list)
    env: dict[str, str] = Field(default_factory=dict)
    diagnostics: DiagnosticsConfig = Field(default_factory=DiagnosticsConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly snapshot of the configuration."""

        return self.model_dump(mode="json")


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):
        return _expand_env_string(value, env)
    if isinstance(value, Mapping):
        return {key: _expand_env_value(entry, env) for key, entry in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(entry, env) for entry in value]
    return value


def _expand_env_string(value: str, env: Mapping[str, str]) -> str:
    def _replace(match: re.Match[str]) -> str:
        key = match.group(1) or match.group(2)
        return env.get(key, match.group(0))

    return _ENV_VAR_PATTERN.sub(_replace, value)


def _load_toml(path: Path) -> dict[str, Any]:
    """Return the TOML document at ``path`` or an empty mapping when absent.

    Raises:
        ConfigError: If the file exists but cannot be parsed.
    """

    if not path.is_file():
        return {}
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to read configuration at {path}: {exc}") from exc


def _manifest_fragment(root: Path) -> dict[str, Any]:
    """Return ``[workspace|package].metadata.cargo-qa`` from the root manifest."""

    data = _load_toml(root / MANIFEST_NAME)
    for section in ("workspace", "package"):
        table = data.get(section)
        if not isinstance(table, Mapping):
            continue
        metadata = table.get("metadata")
        if isinstance(metadata, Mapping) and isinstance(metadata.get(METADATA_KEY), Mapping):
            return dict(metadata[METADATA_KEY])
    return {}


def load_config(
    root: Path,
    *,
    config_file: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> Config:
    """Load configuration for ``root``.

    Sources are merged in order: built-in defaults, the ``cargo-qa`` metadata
    table of the root ``Cargo.toml``, then ``cargo-qa.toml`` (or
    ``config_file`` when given). ``$VAR`` and ``${VAR}`` references in string
    values are expanded from ``env``. Relative workspace roots resolve against
    ``root``.

    Args:
        root: Project directory holding the configuration files.
        config_file: Explicit configuration file replacing ``cargo-qa.toml``.
        env: Environment used for variable expansion (defaults to ``os.environ``).

    Returns:
        Config: Validated configuration.

    Raises:
        ConfigError: If a source cannot be parsed or fails validation.
    """

    if config_file is not None and not config_file.is_file():
        raise ConfigError(f"Configuration file not found: {config_file}")
    merged: dict[str, Any] = {}
    merged = _deep_merge(merged, _manifest_fragment(root))
    merged = _deep_merge(merged, _load_toml(config_file or root / CONFIG_FILENAME))
    expanded = _expand_env_value(merged, env if env is not None else os.environ)
    try:
        config = Config.model_validate(expanded)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    config.workspace.roots = [path if path.is_absolute() else (root / path).resolve() for path in config.workspace.roots]
    return config


__all__ = [
    "CONFIG_FILENAME",
    "Config",
    "ConfigError",
    "DiagnosticsConfig",
    "OutputConfig",
    "WorkspaceConfig",
    "load_config",
]
