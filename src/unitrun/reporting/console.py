# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Terminal rendering of test results."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Final

from rich.console import Console
from rich.text import Text

from ..models import EngineReport, ResultKind, TestResult

_PROGRESS_MARKS: Final[dict[ResultKind, str]] = {
    ResultKind.PASS: ".",
    ResultKind.FAIL: "F",
    ResultKind.SKIP: "S",
    ResultKind.BROKEN: "E",
    ResultKind.UNSOUND: "U",
}
_BADGE_STYLES: Final[dict[ResultKind, str]] = {
    ResultKind.PASS: "bold white on green",
    ResultKind.FAIL: "bold white on red",
    ResultKind.SKIP: "bold black on yellow",
    ResultKind.BROKEN: "bold white on red",
    ResultKind.UNSOUND: "bold black on yellow",
}
# Inclusive upper bounds in milliseconds, ascending.
_DURATION_STYLES: Final[tuple[tuple[float, str], ...]] = (
    (50, "green"),
    (200, "green"),
    (500, "yellow"),
    (float("inf"), "red"),
)
_FAST_THRESHOLD_MS: Final[float] = 50
_STAR: Final[str] = "★"


def basic_result(result: TestResult) -> str:
    """Return the single progress character for ``result``."""

    return _PROGRESS_MARKS.get(result.result, "")


def format_time(seconds: float) -> str:
    """Return a compact duration such as ``1m05s``, `` 2.5s``, ``120ms`` or `` <1ms``."""

    if seconds >= 60:
        return f"{int(seconds // 60)}m{int(seconds) % 60:02d}s"
    if seconds >= 1:
        return f"{seconds:4.1f}s"
    milliseconds = seconds * 1000
    if milliseconds >= 1:
        return f"{round(milliseconds):3d}ms"
    return " <1ms"


def format_duration(seconds: float) -> Text:
    """Return ``seconds`` formatted and coloured by how acceptable it is."""

    milliseconds = seconds * 1000
    text = Text(format_time(seconds))
    for upper_bound, style in _DURATION_STYLES:
        if milliseconds <= upper_bound:
            text.stylize(style)
            break
    if milliseconds <= _FAST_THRESHOLD_MS:
        text.append(_STAR, style="yellow")
    else:
        text.append(" ")
    return text


class ConsoleRenderer:
    """Print progress marks while tests run and a failure summary afterwards."""

    def __init__(self, console: Console, *, name: str = "PHPUnit") -> None:
        self.console = console
        self.name = name

    def header(self) -> None:
        self.console.print(Text(f" {self.name} ", style="bold white on green"))

    def progress(self, result: TestResult) -> None:
        """Print the progress character for ``result`` without a newline."""

        self.console.print(basic_result(result), end="")

    def render_result(self, result: TestResult) -> Text:
        """Return the detailed line (and user data) for ``result``.

        Passing results show their duration after the badge; every other
        result is followed by its user data when present.
        """

        line = Text("  ")
        line.append(f" {result.result.name} ", style=_BADGE_STYLES[result.result])
        if result.result is ResultKind.PASS and result.duration is not None:
            line.append(" ")
            line.append_text(format_duration(result.duration))
        line.append(f" {result.display_name}")
        if result.result is not ResultKind.PASS and result.user_data:
            line.append(f"\n{result.user_data}")
        return line

    def print_failing(self, results: Iterable[TestResult]) -> None:
        """Print every failing result under a ``Failed Test Results:`` header."""

        failing = [item for item in results if item.result.is_failure]
        if not failing:
            return
        self.console.print(Text(" Failed Test Results: ", style="bold white on red"))
        for item in failing:
            self.console.print(self.render_result(item))

    def summary(self, report: EngineReport) -> None:
        counts = report.counts()
        parts = [f"{counts[kind]} {kind.value}" for kind in ResultKind if counts[kind]]
        if report.failures:
            parts.append(f"{len(report.failures)} unparsable report(s)")
        style = "red" if report.has_failures else "green"
        self.console.print(Text(", ".join(parts) or "no results", style=style))

    def finish(self, report: EngineReport) -> None:
        """Close the progress line and print the failure listing and totals."""

        self.console.print()
        self.console.print()
        self.print_failing(report.results)
        self.summary(report)


__all__ = ["ConsoleRenderer", "basic_result", "format_duration", "format_time"]
