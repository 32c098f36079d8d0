# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Structural mirroring between the source tree and the test tree."""

from __future__ import annotations

import posixpath
from collections.abc import Sequence
from pathlib import Path

from ..filesystem.paths import transpose_path
from ..models import AffectedTestMap
from .base import PathDispatcher


def mirrored_test_name(source_path: str, *, source_suffix: str = ".php", test_marker: str = "Test") -> str:
    """Return the test filename convention for ``source_path`` in place.

    The basename's first letter is upper-cased and ``test_marker`` is inserted
    before the extension, so ``src/helper.php`` becomes ``src/HelperTest.php``.

    Args:
        source_path: Source file path ending with ``source_suffix``.
        source_suffix: Extension shared by source and test files.
        test_marker: Marker inserted before the extension.

    Returns:
        str: Path in the same directory with the test filename.
    """

    directory, filename = posixpath.split(source_path)
    stem = filename[: -len(source_suffix)] if filename.endswith(source_suffix) else filename
    test_name = f"{stem[:1].upper()}{stem[1:]}{test_marker}{source_suffix}"
    return posixpath.join(directory, test_name) if directory else test_name


class StructuralResolver:
    """Resolve affected tests by mirroring source paths onto the test root."""

    supports_run_all = True

    def __init__(
        self,
        source_root: str,
        test_root: str,
        *,
        source_suffix: str = ".php",
        test_marker: str = "Test",
        base_dir: Path | None = None,
    ) -> None:
        self.source_suffix = source_suffix
        self.test_marker = test_marker
        self._dispatcher = PathDispatcher(
            source_root,
            test_root,
            source_suffix=source_suffix,
            test_suffix=f"{test_marker}{source_suffix}",
            base_dir=base_dir,
        )

    def source_tests(self, path: str) -> list[str]:
        """Return the single mirrored test path for a source file."""

        candidate = mirrored_test_name(path, source_suffix=self.source_suffix, test_marker=self.test_marker)
        return [transpose_path(candidate, self._dispatcher.source_root, self._dispatcher.test_root)]

    def resolve(self, changed_paths: Sequence[str]) -> AffectedTestMap:
        return self._dispatcher.resolve(changed_paths, self.source_tests)


__all__ = ["StructuralResolver", "mirrored_test_name"]
