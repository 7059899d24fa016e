# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest


def write_manifest(directory: Path, body: str) -> Path:
    """Create ``directory/Cargo.toml`` containing ``body`` and return the directory."""

    directory.mkdir(parents=True, exist_ok=True)
    (directory / "Cargo.toml").write_text(body.strip() + "\n", encoding="utf-8")
    return directory


@pytest.fixture
def single_crate(tmp_path: Path) -> Path:
    """Return a directory holding a one-package crate."""

    root = write_manifest(tmp_path / "crate", '[package]\nname = "demo"\nversion = "0.1.0"')
    (root / "src").mkdir()
    (root / "src" / "lib.rs").write_text("pub fn demo() {}\n", encoding="utf-8")
    return root


@pytest.fixture
def multi_workspace(tmp_path: Path) -> Path:
    """Return a virtual workspace with two member crates."""

    root = write_manifest(tmp_path / "ws", '[workspace]\nmembers = ["crates/*"]')
    write_manifest(root / "crates" / "alpha", '[package]\nname = "alpha"\nversion = "0.1.0"')
    write_manifest(root / "crates" / "beta", '[package]\nname = "beta-crate"\nversion = "0.1.0"')
    return root


@pytest.fixture
def manifest_writer():
    """Return the helper that writes ``Cargo.toml`` files."""

    return write_manifest
