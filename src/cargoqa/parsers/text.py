# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decoder for human readable ``path:line:col: severity: message`` output."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

from ..core.models import Diagnostic
from ..core.severity import map_severity
from .base import DecodeReport, split_output_lines, strip_ansi, to_zero_based

DIAGNOSTIC_LINE_RE: Final[re.Pattern[str]] = re.compile(
    r"^(?P<file>.*):(?P<line>\d+):(?P<column>\d+):\s*(?P<level>\w+):\s*(?P<message>.*)$",
)


@dataclass(slots=True)
class _OpenDiagnostic:
    """Diagnostic header awaiting its continuation lines."""

    file: str
    line: int
    column: int
    level: str
    lines: list[str] = field(default_factory=list)

    def close(self, tool: str) -> Diagnostic:
        return Diagnostic(
            file_path=self.file,
            line=to_zero_based(self.line),
            column=to_zero_based(self.column),
            severity=map_severity(self.level),
            message="\n".join(self.lines),
            origin_tool=tool,
        )


def decode_text_diagnostics(text: str, *, tool: str) -> DecodeReport:
    """Decode line-oriented tool output into diagnostics.

    A line matching :data:`DIAGNOSTIC_LINE_RE` opens a diagnostic. Every later
    non-matching, non-blank line is appended verbatim to the open diagnostic's
    message (``note:`` lines and indented context included) until the next
    matching line or the end of input closes it. Text before the first match is
    ignored.

    Args:
        text: Captured tool output.
        tool: Origin tool recorded on every diagnostic.

    Returns:
        DecodeReport: Diagnostics in input order; this decoder never records errors.
    """

    report = DecodeReport()
    current: _OpenDiagnostic | None = None
    for raw_line in split_output_lines(strip_ansi(text)):
        match = DIAGNOSTIC_LINE_RE.match(raw_line)
        if match:
            if current is not None:
                report.diagnostics.append(current.close(tool))
            current = _OpenDiagnostic(
                file=match.group("file"),
                line=int(match.group("line")),
                column=int(match.group("column")),
                level=match.group("level"),
                lines=[match.group("message")],
            )
            continue
        if current is not None and raw_line.strip():
            current.lines.append(raw_line)
    if current is not None:
        report.diagnostics.append(current.close(tool))
    return report


__all__ = ["DIAGNOSTIC_LINE_RE", "decode_text_diagnostics"]
