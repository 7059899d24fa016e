# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels normalising the rustc/cargo vocabulary."""

    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"


DEFAULT_SEVERITY_MAP: Final[dict[str, Severity]] = {
    "error": Severity.ERROR,
    "error: internal compiler error": Severity.ERROR,
    "ice": Severity.ERROR,
    "warning": Severity.WARNING,
    "note": Severity.INFORMATION,
    "help": Severity.INFORMATION,
}


def map_severity(level: object, default: Severity = Severity.INFORMATION) -> Severity:
    """Return the :class:`Severity` matching a tool-reported level word.

    Args:
        level: Level label emitted by the tool (``"error"``, ``"note"``...).
        default: Severity used for unrecognised or missing labels.

    Returns:
        Severity: Normalised severity.
    """

    if not isinstance(level, str):
        return default
    return DEFAULT_SEVERITY_MAP.get(level.strip().lower(), default)


__all__ = ["DEFAULT_SEVERITY_MAP", "Severity", "map_severity"]
