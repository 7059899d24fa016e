# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate and read ``Cargo.toml`` manifests."""

from __future__ import annotations

import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Final

from ..errors import PackageResolutionError

MANIFEST_NAME: Final[str] = "Cargo.toml"
_GLOB_CHARS: Final[frozenset[str]] = frozenset("*?[")


@dataclass(frozen=True, slots=True)
class PackageMember:
    """One package declared by a manifest."""

    name: str
    directory: Path


@dataclass(frozen=True, slots=True)
class CargoManifest:
    """Parsed view of a ``Cargo.toml`` relevant to package resolution."""

    directory: Path
    members: tuple[PackageMember, ...] = ()
    is_workspace: bool = False
    data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def path(self) -> Path:
        """Return the manifest file path."""

        return self.directory / MANIFEST_NAME

    def member(self, name: str) -> PackageMember | None:
        """Return the member called ``name`` (or living in a directory of that name)."""

        for member in self.members:
            if name in {member.name, member.directory.name}:
                return member
        return None


def find_manifest_dir(start: Path) -> Path | None:
    """Walk from ``start`` towards the filesystem root looking for a manifest.

    Args:
        start: File or directory to start from.

    Returns:
        Path | None: Directory holding the nearest ``Cargo.toml``, or ``None``.
    """

    current = start.resolve()
    if not current.is_dir():
        current = current.parent
    for directory in (current, *current.parents):
        if (directory / MANIFEST_NAME).is_file():
            return directory
    return None


def _read_toml(path: Path) -> dict[str, Any]:
    """Return the TOML document at ``path``.

    Raises:
        PackageResolutionError: If the file cannot be read or parsed.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise PackageResolutionError(path.parent, f"cannot read {path.name}: {exc}") from exc


def _package_name(data: Mapping[str, Any]) -> str | None:
    package = data.get("package")
    if isinstance(package, Mapping):
        name = package.get("name")
        if isinstance(name, str):
            return name
    return None


def _expand_members(directory: Path, patterns: Iterable[str], excludes: Iterable[str]) -> list[Path]:
    """Expand ``[workspace].members`` globs into package directories.

    Args:
        directory: Workspace root holding the manifest.
        patterns: Member entries, possibly containing glob characters.
        excludes: Entries listed under ``[workspace].exclude``.

    Returns:
        list[Path]: Resolved member directories in declaration order, deduplicated.
    """

    excluded = {(directory / entry).resolve() for entry in excludes}
    found: list[Path] = []
    for pattern in patterns:
        if _GLOB_CHARS.intersection(pattern):
            candidates = sorted(directory.glob(pattern))
        else:
            candidates = [directory / pattern]
        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved in excluded or resolved in found:
                continue
            if (resolved / MANIFEST_NAME).is_file():
                found.append(resolved)
    return found


def load_manifest(directory: Path) -> CargoManifest:
    """Read the manifest in ``directory`` and list the packages it declares.

    A root ``[package]`` table counts as a member alongside the expanded
    ``[workspace].members`` entries.

    Args:
        directory: Directory containing ``Cargo.toml``.

    Returns:
        CargoManifest: Manifest details including member packages.

    Raises:
        PackageResolutionError: If the manifest is missing or malformed.
    """

    root = directory.resolve()
    manifest_path = root / MANIFEST_NAME
    if not manifest_path.is_file():
        raise PackageResolutionError(root, f"{MANIFEST_NAME} not found")
    data = _read_toml(manifest_path)

    members: list[PackageMember] = []
    root_name = _package_name(data)
    if root_name is not None:
        members.append(PackageMember(name=root_name, directory=root))

    workspace = data.get("workspace")
    is_workspace = isinstance(workspace, Mapping)
    if isinstance(workspace, Mapping):
        patterns = [str(entry) for entry in workspace.get("members", []) if isinstance(entry, str)]
        excludes = [str(entry) for entry in workspace.get("exclude", []) if isinstance(entry, str)]
        for member_dir in _expand_members(root, patterns, excludes):
            if member_dir == root:
                continue
            name = _package_name(_read_toml(member_dir / MANIFEST_NAME)) or member_dir.name
            members.append(PackageMember(name=name, directory=member_dir))

    return CargoManifest(directory=root, members=tuple(members), is_workspace=is_workspace, data=data)


__all__ = [
    "MANIFEST_NAME",
    "CargoManifest",
    "PackageMember",
    "find_manifest_dir",
    "load_manifest",
]
