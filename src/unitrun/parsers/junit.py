# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Conversion of PHPUnit JUnit reports into :class:`TestResult` records."""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Final
from xml.etree.ElementTree import Element, ParseError

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import fromstring

from ..errors import ReportParseError
from ..models import CoverageMap, ResultKind, TestResult
from .clover import LineCountOracle, parse_clover

SKIP_MARKERS: Final[tuple[str, ...]] = ("Skipped Test:", "Incomplete Test:")

_METHOD_SUFFIX: Final[re.Pattern[str]] = re.compile(r"::.*$")
_CLASS_PREFIX: Final[re.Pattern[str]] = re.compile(r"^[^:]+::")
_DATA_SET_VALUES: Final[re.Pattern[str]] = re.compile(r" \(.*\)", re.DOTALL)


def get_test_name(suite: str, name: str) -> tuple[str, str]:
    """Split JUnit suite and test identifiers into ``(namespace, name)``.

    The namespace is the class part of ``suite``. The name keeps the method and
    any ``with data set #N`` marker but drops the rendered data set values.

    Examples:
        >>> get_test_name("SomeTest::testB", "SomeTest::testB with data set #0 (1, 2, 3)")
        ('SomeTest', 'testB with data set #0')
    """

    namespace = _METHOD_SUFFIX.sub("", suite)
    stripped = _CLASS_PREFIX.sub("", name, count=1)
    return namespace, _DATA_SET_VALUES.sub("", stripped, count=1)


@dataclass(frozen=True, slots=True)
class JunitCase:
    """One ``<testcase>`` flattened out of its enclosing suites."""

    suite: str
    name: str
    kind: ResultKind
    duration: float | None
    message: str | None


def _message(element: Element) -> str:
    text = (element.text or "").strip()
    return text or element.get("message", "")


def _classify(case: Element) -> tuple[ResultKind, str | None]:
    failure = case.find("failure")
    if failure is not None:
        return ResultKind.FAIL, _message(failure)
    error = case.find("error")
    if error is not None:
        message = _message(error)
        if any(marker in message for marker in SKIP_MARKERS):
            return ResultKind.SKIP, message
        return ResultKind.BROKEN, message
    skipped = case.find("skipped")
    if skipped is not None:
        return ResultKind.SKIP, _message(skipped) or None
    warning = case.find("warning")
    if warning is not None:
        return ResultKind.UNSOUND, _message(warning)
    return ResultKind.PASS, None


def _duration(case: Element) -> float | None:
    raw = case.get("time")
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ReportParseError(f"Invalid testcase time {raw!r} in JUnit report.") from exc


def _iter_cases(element: Element, suite: str) -> Iterator[JunitCase]:
    for child in element:
        if child.tag == "testsuite":
            yield from _iter_cases(child, child.get("name", suite))
        elif child.tag == "testcase":
            kind, message = _classify(child)
            yield JunitCase(
                suite=child.get("class") or child.get("classname") or suite,
                name=child.get("name", ""),
                kind=kind,
                duration=_duration(child),
                message=message,
            )


def parse_junit(xml: str) -> list[JunitCase]:
    """Return the test cases of a JUnit document in document order.

    Raises:
        ReportParseError: If ``xml`` is not well-formed.
    """

    try:
        root = fromstring(xml)
    except (ParseError, DefusedXmlException) as exc:
        raise ReportParseError(f"Unable to parse JUnit XML: {exc}") from exc
    if root.tag == "testcase":
        return list(_iter_cases(_wrap(root), ""))
    return list(_iter_cases(root, root.get("name", "") if root.tag == "testsuite" else ""))


def _wrap(case: Element) -> Element:
    holder = Element("testsuite")
    holder.append(case)
    return holder


class JunitResultParser:
    """Produce :class:`TestResult` records from one test file's reports."""

    def __init__(self, project_root: Path, *, line_counts: LineCountOracle | None = None) -> None:
        self.project_root = project_root
        self.line_counts = line_counts or LineCountOracle(project_root)

    def parse(
        self,
        test_path: str,
        junit_xml: str,
        clover_xml: str | None,
        stderr: str,
    ) -> list[TestResult]:
        """Return results for ``test_path``.

        An empty report or any stderr output means the runner crashed, which
        yields one ``Broken`` result carrying ``stderr``.

        Args:
            test_path: Test file the reports belong to.
            junit_xml: JUnit report text, empty when none was written.
            clover_xml: Clover report text, or ``None`` when coverage is off.
            stderr: Runner standard error.

        Returns:
            list[TestResult]: One record per test case.

        Raises:
            ReportParseError: If either report is malformed.
        """

        if not junit_xml.strip() or stderr:
            return [
                TestResult(
                    name=test_path,
                    result=ResultKind.BROKEN,
                    user_data=stderr,
                    test_path=test_path,
                )
            ]

        cases = parse_junit(junit_xml)
        coverage: CoverageMap | None = None
        if clover_xml is not None:
            coverage = parse_clover(clover_xml, self.project_root, self.line_counts)

        results: list[TestResult] = []
        for case in cases:
            namespace, name = get_test_name(case.suite, case.name)
            results.append(
                TestResult(
                    namespace=namespace,
                    name=name,
                    result=case.kind,
                    duration=case.duration,
                    user_data=case.message,
                    coverage=coverage,
                    test_path=test_path,
                )
            )
        return results


__all__ = ["JunitCase", "JunitResultParser", "SKIP_MARKERS", "get_test_name", "parse_junit"]
