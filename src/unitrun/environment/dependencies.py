# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Detect Composer packages whose installed version differs from the lock file."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from ..errors import ManifestError


def _load(document: str, label: str) -> Any:
    try:
        return json.loads(document)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Unable to parse {label}: {exc}") from exc


def _package_list(value: Any, label: str) -> list[Mapping[str, Any]]:
    if not isinstance(value, list) or not all(isinstance(item, Mapping) and "name" in item for item in value):
        raise ManifestError(f"{label} must contain a list of packages with a name")
    return value


def stale_dependencies(lock_json: str, installed_json: str) -> list[str]:
    """Return lock-file packages that are missing or differ in the installed manifest.

    The installed manifest is either an object with a ``packages`` array or a
    bare array; both shapes appear depending on the Composer version.

    Args:
        lock_json: Contents of ``composer.lock``.
        installed_json: Contents of ``vendor/composer/installed.json``.

    Returns:
        list[str]: Stale package names in lock-file order.

    Raises:
        ManifestError: If either document is malformed.
    """

    lock = _load(lock_json, "lock file")
    if not isinstance(lock, Mapping):
        raise ManifestError("lock file must be a JSON object")
    locked = _package_list(lock.get("packages", []), "lock file")

    installed = _load(installed_json, "installed manifest")
    if isinstance(installed, Mapping):
        installed = installed.get("packages", [])
    installed_versions = {
        entry["name"]: entry.get("version") for entry in _package_list(installed, "installed manifest")
    }

    return [
        package["name"]
        for package in locked
        if package["name"] not in installed_versions
        or installed_versions[package["name"]] != package.get("version")
    ]


def check_dependency_files(lock_file: Path, installed_manifest: Path) -> list[str]:
    """Return stale dependencies for the files on disk.

    A missing lock file means there is nothing to compare; a missing installed
    manifest makes every locked package stale.

    Raises:
        ManifestError: If either document is malformed.
    """

    if not lock_file.is_file():
        return []
    installed = installed_manifest.read_text(encoding="utf-8") if installed_manifest.is_file() else "[]"
    return stale_dependencies(lock_file.read_text(encoding="utf-8"), installed)


def stale_dependency_message(names: Sequence[str]) -> str:
    """Return the warning shown when ``names`` are out-of-date."""

    return (
        f"The following Composer dependencies are out-of-date: {', '.join(names)}. "
        "This could cause unit test failures. Run `composer install` to resolve this issue."
    )


__all__ = ["check_dependency_files", "stale_dependencies", "stale_dependency_message"]
