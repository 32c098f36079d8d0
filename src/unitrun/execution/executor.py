# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Bounded-concurrency execution of one runner process per affected test."""

from __future__ import annotations

import logging
import posixpath
import time
from collections.abc import Iterable, Iterator
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path

from ..errors import NoTestsError
from ..models import AffectedTestMap, JobCompletion, TestJob
from ..process import SPAWN_FAILURE_RETURNCODE, CommandOptions, RunnerCallable
from .commands import CommandBuilder
from .outputs import OutputPathAllocator

_LOGGER = logging.getLogger(__name__)


def _identity(test_path: str, base_dir: Path | None) -> str:
    candidate = Path(test_path)
    if base_dir is not None and not candidate.is_absolute():
        candidate = base_dir / candidate
    return posixpath.normpath(candidate.as_posix())


def unique_tests(affected: AffectedTestMap, *, base_dir: Path | None = None) -> list[str]:
    """Flatten ``affected`` into test paths in first-seen order without duplicates.

    Relative paths are anchored at ``base_dir`` before comparison, so a test
    reached both as ``test/FooTest.php`` and by its absolute path runs once
    under the spelling seen first.
    """

    seen: dict[str, str] = {}
    for tests in affected.values():
        for test_path in tests:
            seen.setdefault(_identity(test_path, base_dir), test_path)
    return list(seen.values())


class ParallelTestExecutor:
    """Run test jobs with at most ``jobs`` runner processes alive at once.

    Completions are yielded in the order processes finish, so callers can
    report each result while slower tests are still running.
    """

    def __init__(
        self,
        runner: RunnerCallable,
        builder: CommandBuilder,
        allocator: OutputPathAllocator,
        *,
        jobs: int = 4,
        options: CommandOptions | None = None,
        base_dir: Path | None = None,
    ) -> None:
        if jobs < 1:
            raise ValueError("jobs must be at least 1")
        self.runner = runner
        self.builder = builder
        self.allocator = allocator
        self.jobs = jobs
        self.options = options
        self.base_dir = base_dir

    def _exists(self, test_path: str) -> bool:
        candidate = Path(test_path)
        if self.base_dir is not None and not candidate.is_absolute():
            candidate = self.base_dir / candidate
        return candidate.is_file()

    def plan(self, affected: AffectedTestMap) -> list[TestJob]:
        """Build one :class:`TestJob` per existing affected test file.

        Args:
            affected: Changed paths mapped to the tests they affect.

        Returns:
            list[TestJob]: Jobs in first-seen order.

        Raises:
            NoTestsError: If no affected test file exists on disk.
        """

        planned: list[TestJob] = []
        for test_path in unique_tests(affected, base_dir=self.base_dir):
            if not self._exists(test_path):
                _LOGGER.debug("skipping missing test %s", test_path)
                continue
            outputs = self.allocator.allocate(test_path)
            if self.builder.uses_docker:
                outputs.junit.touch()
                if outputs.clover is not None:
                    outputs.clover.touch()
            planned.append(TestJob(test_path=test_path, outputs=outputs, command=self.builder.build(test_path, outputs)))
        if not planned:
            raise NoTestsError()
        return planned

    def run_job(self, job: TestJob) -> JobCompletion:
        """Run ``job`` and capture its output; spawn failures become exit code 127."""

        started = time.monotonic()
        try:
            completed = self.runner(list(job.command), options=self.options)
        except OSError as exc:
            return JobCompletion(
                job=job,
                returncode=SPAWN_FAILURE_RETURNCODE,
                stdout="",
                stderr=str(exc) or exc.__class__.__name__,
                elapsed=time.monotonic() - started,
            )
        return JobCompletion(
            job=job,
            returncode=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
            elapsed=time.monotonic() - started,
        )

    def execute(self, jobs: Iterable[TestJob]) -> Iterator[JobCompletion]:
        """Yield a :class:`JobCompletion` for every job as it finishes."""

        queued = list(jobs)
        if self.jobs == 1 or len(queued) <= 1:
            for job in queued:
                yield self.run_job(job)
            return

        pool = ThreadPoolExecutor(max_workers=self.jobs)
        try:
            future_map = {pool.submit(self.run_job, job): job for job in queued}
            for future in as_completed(future_map):
                yield future.result()
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

    def run(self, affected: AffectedTestMap) -> Iterator[JobCompletion]:
        """Plan ``affected`` eagerly, then stream completions.

        Raises:
            NoTestsError: Raised immediately, before any process starts.
        """

        return self.execute(self.plan(affected))


__all__ = ["ParallelTestExecutor", "unique_tests"]
