# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared decoder infrastructure and helper utilities."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Final

from ..core.models import Diagnostic
from ..errors import DecodeParseError

type JsonScalar = str | int | float | bool | None
type JsonValue = JsonScalar | list[JsonValue] | dict[str, JsonValue]

_ANSI_ESCAPE_RE: Final[re.Pattern[str]] = re.compile(r"\x1b\[[0-9;]*[A-Za-z]")


@dataclass(slots=True)
class DecodeReport:
    """Diagnostics produced by one decode pass plus the lines it had to skip."""

    diagnostics: list[Diagnostic] = field(default_factory=list)
    errors: list[DecodeParseError] = field(default_factory=list)

    def extend(self, other: DecodeReport) -> None:
        """Append ``other`` to this report preserving order.

        Args:
            other: Report produced by a later decode pass.
        """

        self.diagnostics.extend(other.diagnostics)
        self.errors.extend(other.errors)


def strip_ansi(text: str) -> str:
    """Remove ANSI colour escapes emitted when cargo forces coloured output."""

    return _ANSI_ESCAPE_RE.sub("", text)


def split_output_lines(text: str) -> list[str]:
    """Split captured output on ``\\n`` only, dropping a trailing ``\\r`` per line.

    ``str.splitlines`` also breaks on U+2028, U+2029 and other separators that
    serde_json leaves unescaped inside JSON strings.

    Args:
        text: Captured tool output.

    Returns:
        list[str]: Lines in input order, without a trailing empty entry.
    """

    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def coerce_optional_int(value: JsonValue | None) -> int | None:
    """Return an optional integer parsed from ``value`` when feasible."""

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def coerce_optional_str(value: JsonValue | None) -> str | None:
    """Return a string representation of ``value`` or ``None`` when unset."""

    if value is None:
        return None
    return str(value)


def first_mapping(value: JsonValue | None) -> Mapping[str, JsonValue]:
    """Return ``value`` when it is a mapping, otherwise an empty mapping."""

    if isinstance(value, Mapping):
        return value
    return {}


def mapping_sequence(value: JsonValue | None) -> list[Mapping[str, JsonValue]]:
    """Return the mapping entries contained in a JSON array.

    Args:
        value: JSON value expected to be a list of objects.

    Returns:
        list[Mapping[str, JsonValue]]: Object entries, skipping anything else.
    """

    if not isinstance(value, Sequence) or isinstance(value, (str, bytes, bytearray)):
        return []
    return [item for item in value if isinstance(item, Mapping)]


def to_zero_based(value: int | None) -> int:
    """Convert a one-based tool position to zero-based, clamping at ``0``."""

    if value is None:
        return 0
    return max(value - 1, 0)


__all__ = [
    "DecodeReport",
    "JsonValue",
    "coerce_optional_int",
    "coerce_optional_str",
    "first_mapping",
    "mapping_sequence",
    "split_output_lines",
    "strip_ansi",
    "to_zero_based",
]
