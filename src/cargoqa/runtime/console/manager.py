# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared Rich consoles for user-facing output."""

from __future__ import annotations

import sys
from functools import cache

from rich.console import Console


def detect_tty() -> bool:
    """Return ``True`` when stdout appears to be backed by a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@cache
def _console_for(color: bool, emoji: bool, tty: bool) -> Console:
    colored = color and tty
    return Console(
        color_system="auto" if colored else None,
        force_terminal=tty,
        no_color=not colored,
        emoji=emoji,
        soft_wrap=True,
        highlight=False,
    )


def get_console(*, color: bool, emoji: bool) -> Console:
    """Return the stdout console matching the presentation flags.

    Consoles are cached per ``(color, emoji, tty)`` so every caller in the
    process shares one instance per combination.

    Args:
        color: ``True`` when ANSI colour output should be enabled.
        emoji: ``True`` when Rich should render emoji glyphs.

    Returns:
        Console: Console writing to the current ``sys.stdout``.
    """

    return _console_for(color, emoji, detect_tty())


__all__ = ["detect_tty", "get_console"]
