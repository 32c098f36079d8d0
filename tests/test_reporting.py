# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for console rendering and JSON reports."""

from __future__ import annotations

import json
from io import StringIO
from pathlib import Path

import pytest
from rich.console import Console

from unitrun.models import EngineReport, JobFailure, ResultKind, TestResult
from unitrun.reporting import ConsoleRenderer, basic_result, format_duration, format_time, write_json_report


def _console() -> tuple[Console, StringIO]:
    buffer = StringIO()
    return Console(file=buffer, width=120, color_system=None, highlight=False), buffer


def _result(kind: ResultKind, *, name: str = "testA", **extra: object) -> TestResult:
    return TestResult(namespace="SomeTest", name=name, result=kind, **extra)


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [
        (65.0, "1m05s"),
        (600.4, "10m00s"),
        (2.5, " 2.5s"),
        (0.12, "120ms"),
        (0.005, "  5ms"),
        (0.0004, " <1ms"),
    ],
)
def test_format_time(seconds: float, expected: str) -> None:
    assert format_time(seconds) == expected


def test_format_duration_marks_fast_tests() -> None:
    assert format_duration(0.01).plain == " 10ms★"
    assert format_duration(0.3).plain == "300ms "


def test_basic_result_marks() -> None:
    marks = [basic_result(_result(kind)) for kind in ResultKind]

    assert marks == [".", "F", "E", "S", "U"]


def test_render_result_for_pass_and_failure() -> None:
    renderer = ConsoleRenderer(_console()[0])

    passed = renderer.render_result(_result(ResultKind.PASS, duration=0.01, user_data="ignored"))
    failed = renderer.render_result(_result(ResultKind.FAIL, name="testB", user_data="Expected 2, got 3"))

    assert passed.plain == "   PASS   10ms★ SomeTest::testA"
    assert failed.plain == "   FAIL  SomeTest::testB\nExpected 2, got 3"


def test_progress_prints_marks_inline() -> None:
    console, buffer = _console()
    renderer = ConsoleRenderer(console)

    for kind in (ResultKind.PASS, ResultKind.PASS, ResultKind.FAIL):
        renderer.progress(_result(kind))

    assert buffer.getvalue() == "..F"


def test_finish_lists_only_failures() -> None:
    console, buffer = _console()
    report = EngineReport(
        results=[
            _result(ResultKind.PASS),
            _result(ResultKind.BROKEN, name="testCrash", user_data="Fatal error"),
            _result(ResultKind.SKIP, name="testLater"),
        ],
        failures=[JobFailure(test_path="test/XTest.php", message="bad xml")],
    )

    ConsoleRenderer(console).finish(report)

    output = buffer.getvalue()
    assert "Failed Test Results:" in output
    assert "SomeTest::testCrash" in output
    assert "Fatal error" in output
    assert "testLater" not in output
    assert "1 pass, 1 broken, 1 skip, 1 unparsable report(s)" in output


def test_finish_without_failures_omits_listing() -> None:
    console, buffer = _console()

    ConsoleRenderer(console, name="Suite").finish(EngineReport(results=[_result(ResultKind.PASS)]))

    assert "Failed Test Results:" not in buffer.getvalue()
    assert "1 pass" in buffer.getvalue()


def test_header_uses_suite_name() -> None:
    console, buffer = _console()

    ConsoleRenderer(console, name="Billing").header()

    assert buffer.getvalue().strip() == "Billing"


def test_write_json_report(tmp_path: Path) -> None:
    report = EngineReport(
        results=[_result(ResultKind.PASS, coverage={"src/A.php": "NCU"}, test_path="test/ATest.php")],
        stale_dependencies=["acme/lib"],
    )

    destination = write_json_report(report, tmp_path / "out" / "results.json")

    payload = json.loads(destination.read_text(encoding="utf-8"))
    assert payload["results"][0]["result"] == "pass"
    assert payload["results"][0]["coverage"] == {"src/A.php": "NCU"}
    assert payload["stale_dependencies"] == ["acme/lib"]
    assert payload["failures"] == []
