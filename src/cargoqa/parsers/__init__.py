# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Public decoder exports for converting tool output into diagnostics."""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import Final

from .base import DecodeReport
from .structured import decode_compiler_messages
from .text import decode_text_diagnostics

JSON_MESSAGE_FORMAT_FLAG: Final[str] = "--message-format=json"


class MessageFormat(str, Enum):
    """Output formats understood by the decoders."""

    JSON = "json"
    HUMAN = "human"


def message_format_for(args: Sequence[str]) -> MessageFormat:
    """Return the output format a cargo argument vector asks for."""

    if any(arg.startswith(JSON_MESSAGE_FORMAT_FLAG) for arg in args):
        return MessageFormat.JSON
    return MessageFormat.HUMAN


def decode_output(text: str, *, tool: str, fmt: MessageFormat) -> DecodeReport:
    """Decode ``text`` with the decoder matching ``fmt``.

    Args:
        text: Captured tool output.
        tool: Origin tool recorded on every diagnostic.
        fmt: Format the tool was asked to emit.

    Returns:
        DecodeReport: Decoded diagnostics and skipped-line errors.
    """

    if fmt is MessageFormat.JSON:
        return decode_compiler_messages(text, tool=tool)
    return decode_text_diagnostics(text, tool=tool)


__all__ = [
    "JSON_MESSAGE_FORMAT_FLAG",
    "DecodeReport",
    "MessageFormat",
    "decode_compiler_messages",
    "decode_output",
    "decode_text_diagnostics",
    "message_format_for",
]
