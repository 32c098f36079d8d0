# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Clover XML coverage parsing.

The coverage string for a file has one character per line of the live source
file: ``C`` for a covered statement, ``U`` for an uncovered statement and ``N``
where coverage does not apply. Files in which no statement was covered are
left out of the result, since Clover reports every file the autoloader touched
rather than only the files under test.
"""

from __future__ import annotations

from pathlib import Path
from typing import Final
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

from ..errors import ReportParseError, UnexpectedCoverageValueError
from ..filesystem.paths import readable_path
from ..models import CoverageMap

COVERED: Final[str] = "C"
UNCOVERED: Final[str] = "U"
NOT_APPLICABLE: Final[str] = "N"
_STATEMENT: Final[str] = "stmt"


class LineCountOracle:
    """Count lines of source files relative to a project root, caching results."""

    def __init__(self, project_root: Path) -> None:
        self.project_root = project_root
        self._counts: dict[str, int] = {}

    def set_line_count(self, path: str, count: int) -> None:
        """Record ``count`` for ``path`` instead of reading the file."""

        self._counts[path] = count

    def __call__(self, path: str) -> int:
        """Return the number of lines in ``path``; a missing file has zero lines."""

        if path not in self._counts:
            candidate = Path(path)
            if not candidate.is_absolute():
                candidate = self.project_root / candidate
            try:
                content = candidate.read_text(encoding="utf-8", errors="replace")
            except FileNotFoundError:
                content = ""
            self._counts[path] = len(content.splitlines())
        return self._counts[path]


def _parse_count(line: Element) -> int:
    raw = line.get("count")
    try:
        count = int(raw) if raw is not None else -1
    except ValueError:
        count = -1
    if count < 0:
        raise UnexpectedCoverageValueError(f'Unexpected value for "count" attribute: {raw!r}.')
    return count


def _parse_line_number(line: Element) -> int:
    raw = line.get("num")
    try:
        return int(raw) if raw is not None else 0
    except ValueError as exc:
        raise UnexpectedCoverageValueError(f'Unexpected value for "num" attribute: {raw!r}.') from exc


def parse_clover(xml: str, project_root: Path, line_counts: LineCountOracle) -> CoverageMap:
    """Convert a Clover document into a :data:`CoverageMap`.

    Args:
        xml: Clover XML text.
        project_root: Root used to make ``<file name=...>`` paths readable.
        line_counts: Oracle returning the live line count for a readable path.

    Returns:
        CoverageMap: Readable path mapped to its coverage string.

    Raises:
        ReportParseError: If ``xml`` is not well-formed.
        UnexpectedCoverageValueError: If a statement carries an invalid count.
    """

    try:
        root = fromstring(xml)
    except (ParseError, DefusedXmlException) as exc:
        raise ReportParseError("Unable to parse Clover XML.") from exc

    coverage: CoverageMap = {}
    for file_element in root.iter("file"):
        path = readable_path(file_element.get("name", ""), project_root)
        states = [NOT_APPLICABLE] * line_counts(path)
        any_covered = False
        for line in file_element.iter("line"):
            if line.get("type") != _STATEMENT:
                continue
            count = _parse_count(line)
            index = _parse_line_number(line) - 1
            if count > 0:
                any_covered = True
            if not 0 <= index < len(states):
                continue
            states[index] = COVERED if count > 0 else UNCOVERED
        if any_covered:
            coverage[path] = "".join(states)
    return coverage


__all__ = ["COVERED", "LineCountOracle", "NOT_APPLICABLE", "UNCOVERED", "parse_clover"]
