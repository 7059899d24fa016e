# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared logging helpers for user-facing console output."""

from __future__ import annotations

from .public import emoji, fail, info, ok, section, warn

__all__ = [
    "emoji",
    "fail",
    "info",
    "ok",
    "section",
    "warn",
]
