# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Runtime helpers for supervising external tool processes."""

from .process import CommandOptions, OutputSink, ProcessSupervisor, raise_for_status

__all__ = [
    "CommandOptions",
    "OutputSink",
    "ProcessSupervisor",
    "raise_for_status",
]
