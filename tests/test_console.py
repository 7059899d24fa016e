# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for console selection and CLI logging streams."""

from __future__ import annotations

from cargoqa.cli.shared import build_cli_logger
from cargoqa.runtime.console import get_console


def test_get_console_is_shared_per_flag_combination() -> None:
    plain = get_console(color=False, emoji=False)

    assert get_console(color=False, emoji=False) is plain
    assert get_console(color=True, emoji=False) is not plain


def test_cli_logger_writes_to_its_own_console(capsys) -> None:
    logger = build_cli_logger(emoji=False, no_color=True, stderr=True)

    logger.warn("careful")
    logger.fail("broken")
    logger.line("  1. alpha")
    logger.echo("{}")

    captured = capsys.readouterr()
    assert captured.out == "{}\n"
    assert "careful" in captured.err
    assert "broken" in captured.err
    assert "1. alpha" in captured.err


def test_cli_logger_defaults_to_stdout(capsys) -> None:
    build_cli_logger(emoji=False, no_color=True).ok("done")

    assert capsys.readouterr().out == "done\n"
