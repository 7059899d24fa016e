# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Result sink: console and JSON rendering of diagnostics."""

from .output import render_diagnostics, render_workspace_run, workspace_run_to_json

__all__ = ["render_diagnostics", "render_workspace_run", "workspace_run_to_json"]
