# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic post-processing helpers."""

from .classify import classify, classify_diagnostics

__all__ = ["classify", "classify_diagnostics"]
