# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared dispatch for affected-test resolution strategies."""

from __future__ import annotations

import os
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from ..filesystem.paths import is_descendant, transpose_path
from ..models import AffectedTestMap

SourceTestLookup = Callable[[str], list[str]]


@runtime_checkable
class AffectedTestResolver(Protocol):
    """Map changed paths onto the test files that must run."""

    supports_run_all: bool

    def resolve(self, changed_paths: Sequence[str]) -> AffectedTestMap:
        """Return an ordered mapping from each input path to its affected tests."""

        raise NotImplementedError


def collect_test_files(directory: str, *, suffix: str, base_dir: Path | None = None) -> list[str]:
    """Return every file below ``directory`` whose name ends with ``suffix``.

    Args:
        directory: Directory to scan, as given by the caller.
        suffix: Required filename ending, e.g. ``Test.php``.
        base_dir: Anchor used to locate a relative ``directory`` on disk.

    Returns:
        list[str]: Sorted paths formed as ``directory/<relative file>``.
    """

    prefix = directory.rstrip("/")
    on_disk = Path(directory) if base_dir is None else base_dir / directory
    if not on_disk.is_dir():
        return []
    found: list[str] = []
    for current, dirnames, filenames in os.walk(on_disk):
        dirnames.sort()
        relative_dir = Path(current).relative_to(on_disk)
        for filename in sorted(filenames):
            if filename.endswith(suffix):
                found.append(f"{prefix}/{(relative_dir / filename).as_posix()}")
    return found


class PathDispatcher:
    """Apply the common changed-path rules shared by every strategy.

    Directories under the test root expand to every test file below them and
    directories under the source root are mirrored onto the test root first.
    Files without the source suffix affect nothing. A test file affects
    itself, and a source file is handed to the strategy's lookup.
    """

    def __init__(
        self,
        source_root: str,
        test_root: str,
        *,
        source_suffix: str,
        test_suffix: str,
        base_dir: Path | None = None,
    ) -> None:
        self.source_root = source_root
        self.test_root = test_root
        self.source_suffix = source_suffix
        self.test_suffix = test_suffix
        self.base_dir = base_dir

    def _on_disk(self, path: str) -> Path:
        candidate = Path(path)
        if self.base_dir is None or candidate.is_absolute():
            return candidate
        return self.base_dir / candidate

    def _anchored(self, path: str) -> str:
        return self._on_disk(path).as_posix()

    def tests_for_path(self, path: str, lookup: SourceTestLookup) -> list[str]:
        """Return the tests affected by ``path`` using ``lookup`` for source files."""

        anchored = self._anchored(path)
        if self._on_disk(path).is_dir():
            if is_descendant(anchored, self.test_root):
                return collect_test_files(path, suffix=self.test_suffix, base_dir=self.base_dir)
            if is_descendant(anchored, self.source_root):
                mirrored = transpose_path(anchored, self.source_root, self.test_root)
                return collect_test_files(mirrored, suffix=self.test_suffix)
            return []

        if not path.endswith(self.source_suffix):
            return []

        tests: list[str] = []
        if is_descendant(anchored, self.test_root) and path.endswith(self.test_suffix):
            tests.append(path)
        if is_descendant(anchored, self.source_root):
            tests.extend(lookup(anchored))
        return tests

    def resolve(self, changed_paths: Iterable[str], lookup: SourceTestLookup) -> AffectedTestMap:
        """Return an :data:`AffectedTestMap` preserving input order."""

        affected: AffectedTestMap = {}
        for path in changed_paths:
            affected[path] = self.tests_for_path(path, lookup)
        return affected


__all__ = ["AffectedTestResolver", "PathDispatcher", "SourceTestLookup", "collect_test_files"]
