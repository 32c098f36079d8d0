# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Collision-free report destinations for each test file."""

from __future__ import annotations

import hashlib
import posixpath
from pathlib import Path
from typing import Final

from ..models import OutputPaths

JUNIT_DIRNAME: Final[str] = "junit"
CLOVER_DIRNAME: Final[str] = "clover"
_DIGEST_LENGTH: Final[int] = 8


def unique_basename(test_path: str) -> str:
    """Return ``<stem>-<first 8 hex digits of md5(test_path)>``.

    Test files in different directories often share a basename, so the digest
    of the full path keeps their reports apart.
    """

    stem, _ = posixpath.splitext(posixpath.basename(test_path.replace("\\", "/")))
    digest = hashlib.md5(test_path.encode("utf-8"), usedforsecurity=False).hexdigest()
    return f"{stem}-{digest[:_DIGEST_LENGTH]}"


class OutputPathAllocator:
    """Reserve ``junit/`` and ``clover/`` report files below ``reports_dir``."""

    def __init__(self, reports_dir: Path, *, coverage: bool) -> None:
        self.reports_dir = reports_dir
        self.coverage = coverage

    @property
    def junit_dir(self) -> Path:
        return self.reports_dir / JUNIT_DIRNAME

    @property
    def clover_dir(self) -> Path:
        return self.reports_dir / CLOVER_DIRNAME

    def allocate(self, test_path: str) -> OutputPaths:
        """Return report paths for ``test_path``, creating their directories.

        Reports left over from an earlier run for the same test are removed.

        Args:
            test_path: Test file the reports belong to.

        Returns:
            OutputPaths: JUnit path plus a Clover path when coverage is enabled.
        """

        filename = f"{unique_basename(test_path)}.xml"
        self.junit_dir.mkdir(parents=True, exist_ok=True)
        junit = self.junit_dir / filename
        junit.unlink(missing_ok=True)
        clover: Path | None = None
        if self.coverage:
            self.clover_dir.mkdir(parents=True, exist_ok=True)
            clover = self.clover_dir / filename
            clover.unlink(missing_ok=True)
        return OutputPaths(junit=junit, clover=clover)


__all__ = ["CLOVER_DIRNAME", "JUNIT_DIRNAME", "OutputPathAllocator", "unique_basename"]
