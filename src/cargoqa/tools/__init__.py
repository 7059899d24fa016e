# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Cargo tool catalog and single-package runner."""

from .catalog import TOOLS, ToolSpec, get_tool
from .runner import ToolRun, ToolRunner, build_arguments

__all__ = ["TOOLS", "ToolRun", "ToolRunner", "ToolSpec", "build_arguments", "get_tool"]
