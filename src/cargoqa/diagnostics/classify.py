# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Message-content heuristics tagging diagnostics by intent."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from ..core.models import Diagnostic, DiagnosticCategory

# Checked in order; the first matching category wins.
CATEGORY_RULES: Final[tuple[tuple[DiagnosticCategory, tuple[str, ...]], ...]] = (
    (DiagnosticCategory.PERFORMANCE, ("consider", "optimize")),
    (DiagnosticCategory.PITFALL, ("unnecessary", "avoid")),
)


def classify(message: str) -> DiagnosticCategory:
    """Return the category implied by ``message``.

    Matching is case-sensitive, following the lowercase wording clippy uses.

    Args:
        message: Diagnostic message text.

    Returns:
        DiagnosticCategory: ``PERFORMANCE`` before ``PITFALL`` before ``PLAIN``.
    """

    for category, needles in CATEGORY_RULES:
        if any(needle in message for needle in needles):
            return category
    return DiagnosticCategory.PLAIN


def classify_diagnostics(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Return copies of ``diagnostics`` with :attr:`Diagnostic.category` set."""

    return [diag.model_copy(update={"category": classify(diag.message)}) for diag in diagnostics]


__all__ = ["CATEGORY_RULES", "classify", "classify_diagnostics"]
