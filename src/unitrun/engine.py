# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Test engine wiring discovery, execution and result parsing together."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager, nullcontext
from pathlib import Path

from .config import ProjectLayout, UnitConfig
from .discovery import AffectedTestResolver, AnnotationResolver, StructuralResolver
from .environment import EnvironmentInfo, check_coverage_engine, check_dependency_files, stale_dependency_message
from .errors import ManifestError, ReportParseError, UsageError
from .execution import CommandBuilder, OutputPathAllocator, ParallelTestExecutor, environment_session
from .logging import fail, warn
from .models import EngineReport, JobCompletion, JobFailure, TestResult
from .parsers import JunitResultParser, LineCountOracle
from .process import CommandOptions, RunnerCallable, run_command

ResultCallback = Callable[[TestResult], None]

_LOGGER = logging.getLogger(__name__)


def build_resolver(config: UnitConfig, layout: ProjectLayout) -> AffectedTestResolver:
    """Return the discovery strategy selected by ``config.strategy``."""

    if config.strategy == "annotation":
        return AnnotationResolver(
            layout.source_root,
            layout.test_root,
            test_type=config.test_type,
            source_suffix=config.source_suffix,
            test_marker=config.test_marker,
            base_dir=layout.root,
        )
    return StructuralResolver(
        layout.source_root,
        layout.test_root,
        source_suffix=config.source_suffix,
        test_marker=config.test_marker,
        base_dir=layout.root,
    )


def _read_report(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return ""


class TestEngine:
    """Run the tests affected by a set of changed paths.

    The discovery strategy is injected, so structural and annotation-driven
    runs share every other step: the coverage precondition, the advisory
    dependency check, planning, bounded execution and parsing.
    """

    __test__ = False

    def __init__(
        self,
        config: UnitConfig,
        layout: ProjectLayout,
        *,
        resolver: AffectedTestResolver | None = None,
        runner: RunnerCallable | None = None,
        environment: EnvironmentInfo | None = None,
        on_result: ResultCallback | None = None,
        use_emoji: bool = True,
    ) -> None:
        self.config = config
        self.layout = layout
        self.resolver = resolver or build_resolver(config, layout)
        self.runner: RunnerCallable = runner or run_command
        self._environment = environment
        self.on_result = on_result
        self.use_emoji = use_emoji
        self.parser = JunitResultParser(layout.root, line_counts=LineCountOracle(layout.root))

    @property
    def coverage(self) -> bool:
        return self.config.coverage_enabled

    def environment_info(self) -> EnvironmentInfo:
        """Return the interpreter snapshot, probing it on first use."""

        if self._environment is None:
            self._environment = EnvironmentInfo.probe(
                self.runner,
                php_binary=self.config.php_binary,
                options=CommandOptions(cwd=self.layout.root),
            )
        return self._environment

    def check_preconditions(self) -> None:
        """Raise a :class:`UsageError` when coverage cannot be collected."""

        if not self.coverage:
            return
        check_coverage_engine(
            True,
            self.environment_info(),
            required_modes=self.config.required_coverage_modes,
            php_binary=self.config.php_binary,
        )

    def stale_dependencies(self) -> list[str]:
        """Return stale packages, warning about them; malformed manifests only warn."""

        try:
            stale = check_dependency_files(
                self.layout.root / self.config.lock_file,
                self.layout.root / self.config.installed_manifest,
            )
        except ManifestError as exc:
            warn(f"Skipping dependency check: {exc}", use_emoji=self.use_emoji)
            return []
        if stale:
            warn(stale_dependency_message(stale), use_emoji=self.use_emoji)
        return stale

    def command_builder(self) -> CommandBuilder:
        docker = self.config.docker
        return CommandBuilder(
            binary=self.layout.binary,
            root=self.layout.root,
            runner_config=self.layout.runner_config,
            docker_image=docker.image if docker.enabled else None,
            docker_binary=docker.binary or (str(self.config.binary) if docker.enabled else None),
        )

    def _options(self) -> CommandOptions:
        return CommandOptions(cwd=self.layout.root, timeout=self.config.timeout)

    def _test_options(self) -> CommandOptions:
        """Return options for test processes; session runs add the session environment."""

        options = self._options()
        if self.config.session.enabled:
            options = options.with_overrides(env=self.config.session.test_env)
        return options

    def _session(self, builder: CommandBuilder) -> AbstractContextManager[None]:
        session = self.config.session
        if not session.enabled:
            return nullcontext()
        return environment_session(
            builder.session_command(session.setup),
            builder.session_command(session.teardown),
            runner=self.runner,
            options=self._options(),
            use_emoji=self.use_emoji,
        )

    def collect(self, completion: JobCompletion, report: EngineReport) -> list[TestResult]:
        """Parse the reports of ``completion`` into ``report``.

        A malformed report is recorded as a :class:`JobFailure`; results from
        other jobs are unaffected.
        """

        outputs = completion.job.outputs
        clover = _read_report(outputs.clover) if outputs.clover is not None else None
        try:
            results = self.parser.parse(
                completion.test_path,
                _read_report(outputs.junit),
                clover,
                completion.stderr,
            )
        except ReportParseError as exc:
            fail(f"{completion.test_path}: {exc}", use_emoji=self.use_emoji)
            report.failures.append(JobFailure(test_path=completion.test_path, message=str(exc)))
            return []
        report.results.extend(results)
        if self.on_result is not None:
            for result in results:
                self.on_result(result)
        return results

    def run(self, paths: Sequence[str], *, run_all: bool = False) -> EngineReport:
        """Run every test affected by ``paths``.

        Args:
            paths: Changed files or directories, absolute or relative to the
                project root.
            run_all: Ignore ``paths`` and run the whole test root.

        Returns:
            EngineReport: Results in completion order plus per-job failures.

        Raises:
            UsageError: On a failed precondition, an unsupported run-all
                request, a missing docker client or when there is nothing to run.
        """

        self.check_preconditions()
        stale = self.stale_dependencies()

        if run_all:
            if not self.resolver.supports_run_all:
                raise UsageError(
                    f"The {self.config.strategy} strategy cannot run every test.",
                    remediation="Pass the changed paths explicitly.",
                )
            paths = [self.layout.test_root]

        affected = self.resolver.resolve(list(paths))
        builder = self.command_builder()
        builder.ensure_available()
        executor = ParallelTestExecutor(
            self.runner,
            builder,
            OutputPathAllocator(self.layout.reports_dir, coverage=self.coverage),
            jobs=self.config.effective_jobs,
            options=self._test_options(),
            base_dir=self.layout.root,
        )
        jobs = executor.plan(affected)
        _LOGGER.debug("planned %d test job(s)", len(jobs))

        report = EngineReport(stale_dependencies=stale)
        with self._session(builder):
            for completion in executor.execute(jobs):
                self.collect(completion, report)
        return report


__all__ = ["ResultCallback", "TestEngine", "build_resolver"]
