# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Workspace-level orchestration of cargo diagnostics runs."""

from .workspace import OrchestratorDeps, OrchestratorHooks, PackageSelector, WorkspaceOrchestrator

__all__ = ["OrchestratorDeps", "OrchestratorHooks", "PackageSelector", "WorkspaceOrchestrator"]
