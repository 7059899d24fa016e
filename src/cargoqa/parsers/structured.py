# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Decoder for cargo's ``--message-format=json`` newline-delimited records."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Final, cast

from ..core.models import Diagnostic
from ..core.severity import map_severity
from ..errors import DecodeParseError
from .base import (
    DecodeReport,
    JsonValue,
    coerce_optional_int,
    coerce_optional_str,
    first_mapping,
    mapping_sequence,
    split_output_lines,
    to_zero_based,
)

logger = logging.getLogger(__name__)

COMPILER_MESSAGE_REASON: Final[str] = "compiler-message"


def decode_compiler_messages(text: str, *, tool: str) -> DecodeReport:
    """Decode cargo JSON output into diagnostics, one line at a time.

    Each non-blank line is parsed on its own, so a malformed line is recorded in
    :attr:`DecodeReport.errors` and decoding carries on with the next one. Only
    ``compiler-message`` records with a primary span produce a diagnostic.

    Args:
        text: Captured stdout of a cargo invocation.
        tool: Origin tool recorded on every diagnostic.

    Returns:
        DecodeReport: Diagnostics in input order plus skipped-line errors.
    """

    report = DecodeReport()
    for line_number, raw_line in enumerate(split_output_lines(text), start=1):
        line = raw_line.strip()
        if not line:
            continue
        try:
            record = cast(JsonValue, json.loads(line))
        except json.JSONDecodeError as exc:
            error = DecodeParseError(line_number, exc.msg, line)
            logger.debug("skipping malformed record: %s", error)
            report.errors.append(error)
            continue
        if not isinstance(record, Mapping):
            continue
        diagnostic = build_compiler_diagnostic(record, tool=tool)
        if diagnostic is not None:
            report.diagnostics.append(diagnostic)
    return report


def build_compiler_diagnostic(record: Mapping[str, JsonValue], *, tool: str) -> Diagnostic | None:
    """Return the diagnostic described by one cargo JSON record.

    Args:
        record: Parsed JSON object from a single output line.
        tool: Origin tool recorded on the diagnostic.

    Returns:
        Diagnostic | None: Diagnostic for compiler messages with a primary span,
        otherwise ``None``.
    """

    if record.get("reason") != COMPILER_MESSAGE_REASON:
        return None
    message = first_mapping(record.get("message"))
    primary = next(
        (span for span in mapping_sequence(message.get("spans")) if span.get("is_primary") is True),
        None,
    )
    if primary is None:
        return None
    text = coerce_optional_str(message.get("rendered")) or coerce_optional_str(message.get("message")) or ""
    code = coerce_optional_str(first_mapping(message.get("code")).get("code"))
    return Diagnostic(
        file_path=coerce_optional_str(primary.get("file_name")) or "",
        line=to_zero_based(coerce_optional_int(primary.get("line_start"))),
        column=to_zero_based(coerce_optional_int(primary.get("column_start"))),
        severity=map_severity(message.get("level")),
        message=text.rstrip("\n"),
        origin_tool=tool,
        code=code,
    )


__all__ = ["COMPILER_MESSAGE_REASON", "build_compiler_diagnostic", "decode_compiler_messages"]
