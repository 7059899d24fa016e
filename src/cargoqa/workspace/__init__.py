# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Manifest discovery helpers for cargo workspaces."""

from .manifest import MANIFEST_NAME, CargoManifest, PackageMember, find_manifest_dir, load_manifest

__all__ = [
    "MANIFEST_NAME",
    "CargoManifest",
    "PackageMember",
    "find_manifest_dir",
    "load_manifest",
]
