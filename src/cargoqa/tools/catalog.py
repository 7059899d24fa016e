# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Catalog of the cargo subcommands cargo-qa knows how to drive."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, Literal

ArgsKey = Literal["format_args", "lint_args"]


@dataclass(frozen=True, slots=True)
class ToolSpec:
    """Describe one cargo subcommand invocation."""

    name: str
    subcommand: tuple[str, ...]
    description: str
    args_key: ArgsKey | None = None
    file_scoped: bool = False
    decodes: bool = False


_SPECS: Final[tuple[ToolSpec, ...]] = (
    ToolSpec("fmt", ("fmt",), "Format Rust code", args_key="format_args"),
    ToolSpec("clippy", ("clippy",), "Lint Rust code", args_key="lint_args", decodes=True),
    ToolSpec("test", ("test",), "Run Rust tests"),
    ToolSpec("check", ("check",), "Check Rust code", decodes=True),
    ToolSpec("build", ("build",), "Build Rust code", decodes=True),
    ToolSpec("fix", ("fix",), "Fix Rust code", decodes=True),
    ToolSpec("fmt-file", ("fmt", "--"), "Format a single Rust file", file_scoped=True),
    ToolSpec("clippy-file", ("clippy", "--"), "Lint a single Rust file", file_scoped=True, decodes=True),
)

TOOLS: Final[MappingProxyType[str, ToolSpec]] = MappingProxyType({spec.name: spec for spec in _SPECS})


def get_tool(name: str) -> ToolSpec:
    """Return the catalog entry called ``name``.

    Raises:
        ValueError: If ``name`` is not a known tool.
    """

    try:
        return TOOLS[name]
    except KeyError as exc:
        known = ", ".join(sorted(TOOLS))
        raise ValueError(f"Unknown tool '{name}' (expected one of: {known})") from exc


__all__ = ["ArgsKey", "TOOLS", "ToolSpec", "get_tool"]
