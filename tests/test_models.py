# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for result models and error rendering."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from unitrun.errors import NoTestsError, UsageError
from unitrun.models import EngineReport, JobFailure, ResultKind, TestResult


def test_failure_kinds() -> None:
    assert {kind for kind in ResultKind if kind.is_failure} == {
        ResultKind.FAIL,
        ResultKind.BROKEN,
        ResultKind.UNSOUND,
    }


def test_coverage_states_are_validated() -> None:
    TestResult(name="testA", result=ResultKind.PASS, coverage={"src/A.php": "NCU"})

    with pytest.raises(ValidationError, match="unknown states"):
        TestResult(name="testA", result=ResultKind.PASS, coverage={"src/A.php": "NCX"})


def test_display_name() -> None:
    assert TestResult(namespace="ATest", name="testA", result=ResultKind.PASS).display_name == "ATest::testA"
    assert TestResult(name="test/ATest.php", result=ResultKind.BROKEN).display_name == "test/ATest.php"


def test_report_counts_and_failures() -> None:
    report = EngineReport(
        results=[
            TestResult(name="a", result=ResultKind.PASS),
            TestResult(name="b", result=ResultKind.SKIP),
            TestResult(name="c", result=ResultKind.PASS),
        ]
    )

    assert report.counts()[ResultKind.PASS] == 2
    assert report.counts()[ResultKind.FAIL] == 0
    assert not report.has_failures

    report.failures.append(JobFailure(test_path="test/XTest.php", message="bad"))
    assert report.has_failures


def test_usage_error_renders_remediation() -> None:
    error = UsageError("Something is off.", remediation="Fix it.")

    assert str(error) == "Something is off.\n\nFix it."
    assert str(NoTestsError()) == "No tests to run."
