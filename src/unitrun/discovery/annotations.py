# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Reverse lookup from source classes to the tests that declare coverage of them.

Functional and integration tests exercise many classes at once, so their
location says nothing about what they cover. Instead every matching test file
is scanned for ``@covers`` and ``@coversDefaultClass`` annotations, and the
resulting ``class -> [test files]`` index is consulted for each changed source
file. Class names are stored without a leading backslash.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Final, TypeAlias

from ..models import AffectedTestMap
from .base import PathDispatcher, collect_test_files

_COVERS_PATTERN: Final[re.Pattern[str]] = re.compile(r"@(covers|coversDefaultClass)\s+(\S+)")
_NAMESPACE_PATTERN: Final[re.Pattern[str]] = re.compile(r"namespace\s+(.*);")

CoverageIndex: TypeAlias = dict[str, list[str]]


def _canonical_class(name: str) -> str:
    return name.lstrip("\\")


def extract_annotated_classes(content: str) -> list[str]:
    """Return class names declared by coverage annotations in ``content``.

    ``Class::method`` targets collapse to ``Class`` and bare ``::method``
    targets are ignored.

    Args:
        content: Source text of a test file.

    Returns:
        list[str]: Class names in declaration order, duplicates included.
    """

    classes: list[str] = []
    for match in _COVERS_PATTERN.finditer(content):
        target = match.group(2)
        if "::" in target:
            target = target.split("::", 1)[0]
            if not target:
                continue
        classes.append(target)
    return classes


def build_coverage_index(test_files: Iterable[str], *, base_dir: Path | None = None) -> CoverageIndex:
    """Return the deduplicated ``class -> [test file]`` index for ``test_files``.

    Args:
        test_files: Test file paths to scan.
        base_dir: Anchor used to read relative paths.

    Returns:
        CoverageIndex: Mapping preserving first-seen order of test files.
    """

    index: CoverageIndex = {}
    for test_file in test_files:
        on_disk = Path(test_file) if base_dir is None else base_dir / test_file
        content = on_disk.read_text(encoding="utf-8", errors="replace")
        for class_name in extract_annotated_classes(content):
            entries = index.setdefault(_canonical_class(class_name), [])
            if test_file not in entries:
                entries.append(test_file)
    return index


def source_class_name(path: Path, *, source_suffix: str = ".php") -> str | None:
    """Return the fully-qualified class declared by the source file at ``path``.

    Args:
        path: Source file on disk.
        source_suffix: Extension stripped from the filename.

    Returns:
        str | None: ``Namespace\\Stem`` (or ``Stem`` without a namespace), or
        ``None`` when the file does not exist.
    """

    if not path.is_file():
        return None
    content = path.read_text(encoding="utf-8", errors="replace")
    stem = path.name[: -len(source_suffix)] if path.name.endswith(source_suffix) else path.stem
    match = _NAMESPACE_PATTERN.search(content)
    if match is None:
        return stem
    return f"{_canonical_class(match.group(1).strip())}\\{stem}"


class AnnotationResolver:
    """Resolve affected tests through coverage annotations in test files."""

    supports_run_all = False

    def __init__(
        self,
        source_root: str,
        test_root: str,
        *,
        test_type: str = "functional",
        source_suffix: str = ".php",
        test_marker: str = "Test",
        base_dir: Path | None = None,
    ) -> None:
        self.source_suffix = source_suffix
        self.test_type_suffix = f"{test_type[:1].upper()}{test_type[1:]}{test_marker}{source_suffix}"
        self.base_dir = base_dir
        self._dispatcher = PathDispatcher(
            source_root,
            test_root,
            source_suffix=source_suffix,
            test_suffix=f"{test_marker}{source_suffix}",
            base_dir=base_dir,
        )
        self._index: CoverageIndex | None = None

    @property
    def index(self) -> CoverageIndex:
        """Return the coverage index, scanning the test root on first access."""

        if self._index is None:
            test_files = collect_test_files(
                self._dispatcher.test_root,
                suffix=self.test_type_suffix,
                base_dir=self.base_dir,
            )
            self._index = build_coverage_index(test_files, base_dir=self.base_dir)
        return self._index

    def source_tests(self, path: str) -> list[str]:
        """Return the tests whose annotations cover the class defined at ``path``."""

        class_name = source_class_name(Path(path), source_suffix=self.source_suffix)
        if class_name is None:
            return []
        return list(self.index.get(class_name, []))

    def resolve(self, changed_paths: Sequence[str]) -> AffectedTestMap:
        return self._dispatcher.resolve(changed_paths, self.source_tests)


__all__ = [
    "AnnotationResolver",
    "CoverageIndex",
    "build_coverage_index",
    "extract_annotated_classes",
    "source_class_name",
]
