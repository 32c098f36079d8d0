# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the unitrun package."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final, TypeAlias

from pydantic import BaseModel, ConfigDict, Field, field_validator

COVERAGE_STATES: Final[frozenset[str]] = frozenset({"C", "U", "N"})

CoverageMap: TypeAlias = dict[str, str]
AffectedTestMap: TypeAlias = dict[str, list[str]]


class ResultKind(str, Enum):
    """Outcome of a single test case."""

    PASS = "pass"
    FAIL = "fail"
    BROKEN = "broken"
    SKIP = "skip"
    UNSOUND = "unsound"

    @property
    def is_failure(self) -> bool:
        """Return ``True`` for outcomes that should fail the run."""

        return self in {ResultKind.FAIL, ResultKind.BROKEN, ResultKind.UNSOUND}


class TestResult(BaseModel):
    """Uniform record describing one executed test case."""

    __test__ = False

    model_config = ConfigDict(frozen=True)

    namespace: str = ""
    name: str
    result: ResultKind
    duration: float | None = None
    user_data: str | None = None
    coverage: dict[str, str] | None = None
    test_path: str | None = None

    @field_validator("coverage")
    @classmethod
    def _validate_coverage(cls, value: dict[str, str] | None) -> dict[str, str] | None:
        """Reject coverage strings containing characters other than ``C``, ``U`` or ``N``.

        Args:
            value: Coverage map keyed by readable source path.

        Returns:
            dict[str, str] | None: The unchanged coverage map.

        Raises:
            ValueError: If a coverage string holds an unknown state.
        """

        if value is None:
            return None
        for path, states in value.items():
            unknown = set(states) - COVERAGE_STATES
            if unknown:
                raise ValueError(f"coverage for {path} contains unknown states: {''.join(sorted(unknown))}")
        return value

    @property
    def display_name(self) -> str:
        """Return ``namespace::name`` or ``name`` when no namespace is known."""

        return f"{self.namespace}::{self.name}" if self.namespace else self.name


@dataclass(frozen=True, slots=True)
class OutputPaths:
    """Report destinations reserved for one test file."""

    junit: Path
    clover: Path | None = None


@dataclass(frozen=True, slots=True)
class TestJob:
    """External process invocation for one affected test file."""

    __test__ = False

    test_path: str
    outputs: OutputPaths
    command: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class JobCompletion:
    """Captured process output for a finished :class:`TestJob`."""

    job: TestJob
    returncode: int
    stdout: str
    stderr: str
    elapsed: float = 0.0

    @property
    def test_path(self) -> str:
        """Return the test file this completion belongs to."""

        return self.job.test_path


class JobFailure(BaseModel):
    """Report for a job whose output could not be parsed."""

    model_config = ConfigDict(frozen=True)

    test_path: str
    message: str


class EngineReport(BaseModel):
    """Aggregated outcome of an engine run."""

    model_config = ConfigDict(validate_assignment=True)

    results: list[TestResult] = Field(default_factory=list)
    failures: list[JobFailure] = Field(default_factory=list)
    stale_dependencies: list[str] = Field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        """Return ``True`` when any result failed or any job could not be parsed."""

        return bool(self.failures) or any(item.result.is_failure for item in self.results)

    def counts(self) -> dict[ResultKind, int]:
        """Return the number of results per :class:`ResultKind`."""

        totals = {kind: 0 for kind in ResultKind}
        for item in self.results:
            totals[item.result] += 1
        return totals


__all__ = [
    "AffectedTestMap",
    "COVERAGE_STATES",
    "CoverageMap",
    "EngineReport",
    "JobCompletion",
    "JobFailure",
    "OutputPaths",
    "ResultKind",
    "TestJob",
    "TestResult",
]
