# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""End-to-end engine tests against a fake PHPUnit runner."""

from __future__ import annotations

import json
from collections.abc import Sequence
from pathlib import Path
from subprocess import CompletedProcess

import pytest

from conftest import FakePhpunit
from unitrun.config import ProjectLayout, SessionSettings, UnitConfig
from unitrun.discovery import AnnotationResolver, StructuralResolver
from unitrun.engine import TestEngine, build_resolver
from unitrun.environment import EnvironmentInfo
from unitrun.errors import CoverageEngineMissingError, NoTestsError, UsageError
from unitrun.execution import commands as commands_module
from unitrun.models import ResultKind, TestResult

XDEBUG_READY = EnvironmentInfo(coverage_engine_loaded=True, coverage_modes=("coverage", "debug"))


def _engine(
    project: Path,
    runner: FakePhpunit,
    *,
    environment: EnvironmentInfo | None = XDEBUG_READY,
    **overrides: object,
) -> TestEngine:
    config = UnitConfig(**overrides)
    layout = ProjectLayout.from_config(config, project)
    return TestEngine(config, layout, runner=runner, environment=environment, use_emoji=False)


def test_build_resolver_selects_strategy(php_project: Path) -> None:
    layout = ProjectLayout.from_config(UnitConfig(), php_project)

    assert isinstance(build_resolver(UnitConfig(), layout), StructuralResolver)
    assert isinstance(build_resolver(UnitConfig(strategy="annotation"), layout), AnnotationResolver)


def test_run_collects_results_with_coverage(php_project: Path) -> None:
    root = php_project.resolve()
    runner = FakePhpunit(clover_path=f"{root.as_posix()}/src/SomeClass.php")
    seen: list[TestResult] = []
    engine = _engine(php_project, runner)
    engine.on_result = seen.append

    report = engine.run(["src/SomeClass.php"])

    assert len(report.results) == 1
    (result,) = report.results
    assert result.result is ResultKind.PASS
    assert (result.namespace, result.name) == ("SomeClassTest", "testSomething")
    assert result.coverage == {"src/SomeClass.php": "CU"}
    assert result.test_path == f"{root.as_posix()}/test/SomeClassTest.php"
    assert seen == report.results
    assert not report.has_failures
    (command,) = runner.commands
    assert command[0] == str(root / "vendor" / "bin" / "phpunit")
    assert any(arg.startswith("--coverage-clover=") for arg in command)


def test_run_without_coverage_skips_probe_and_clover(php_project: Path) -> None:
    runner = FakePhpunit()
    engine = _engine(php_project, runner, environment=None, coverage=False)

    report = engine.run(["src/Sub/Other.php", "src/SomeClass.php"])

    assert sorted(item.namespace for item in report.results) == ["OtherTest", "SomeClassTest"]
    assert all(item.coverage is None for item in report.results)
    assert all(not any(arg.startswith("--coverage-clover") for arg in cmd) for cmd in runner.commands)
    assert all(cmd[1] != "-r" for cmd in runner.commands)


def test_missing_coverage_engine_fails_before_running(php_project: Path) -> None:
    runner = FakePhpunit()
    engine = _engine(php_project, runner, environment=EnvironmentInfo(coverage_engine_loaded=False))

    with pytest.raises(CoverageEngineMissingError):
        engine.run(["src/SomeClass.php"])
    assert runner.commands == []


def test_environment_is_probed_once(php_project: Path) -> None:
    def _hook(cmd: Sequence[str]) -> CompletedProcess[str] | None:
        if len(cmd) > 1 and cmd[1] == "-r":
            return CompletedProcess(list(cmd), 0, stdout="1\ncoverage,debug\n", stderr="")
        return None

    runner = FakePhpunit(hook=_hook)
    engine = _engine(php_project, runner, environment=None)

    engine.check_preconditions()
    engine.check_preconditions()

    assert [cmd[0] for cmd in runner.commands] == ["php"]
    assert engine.environment_info().coverage_modes == ("coverage", "debug")


def test_no_tests_is_fatal(php_project: Path) -> None:
    runner = FakePhpunit()
    engine = _engine(php_project, runner, coverage=False)

    with pytest.raises(NoTestsError):
        engine.run(["README.md", "src/Missing.php"])
    assert runner.commands == []


def test_source_and_its_test_run_once(php_project: Path) -> None:
    runner = FakePhpunit()
    engine = _engine(php_project, runner, coverage=False)

    report = engine.run(["src/SomeClass.php", "test/SomeClassTest.php"])

    assert len(runner.commands) == 1
    assert [item.namespace for item in report.results] == ["SomeClassTest"]


def test_runner_crash_becomes_broken_result(php_project: Path) -> None:
    runner = FakePhpunit(stderr_for={"SomeClassTest.php": "PHP Fatal error: boom"})
    engine = _engine(php_project, runner, coverage=False)

    report = engine.run(["src/SomeClass.php"])

    (result,) = report.results
    assert result.result is ResultKind.BROKEN
    assert result.user_data == "PHP Fatal error: boom"
    assert report.has_failures


def test_malformed_report_is_recorded_per_job(php_project: Path) -> None:
    runner = FakePhpunit(junit_template="<testsuites><testsuite name='{cls}'>")
    engine = _engine(php_project, runner, coverage=False)

    report = engine.run(["src/SomeClass.php"])

    assert report.results == []
    assert len(report.failures) == 1
    assert report.failures[0].test_path.endswith("test/SomeClassTest.php")
    assert report.has_failures


def test_run_all_uses_test_root(php_project: Path) -> None:
    runner = FakePhpunit()
    engine = _engine(php_project, runner, coverage=False)

    report = engine.run([], run_all=True)

    assert sorted(item.namespace for item in report.results) == ["OtherTest", "SomeClassTest"]


def test_run_all_rejected_for_annotation_strategy(php_project: Path) -> None:
    engine = _engine(php_project, FakePhpunit(), coverage=False, strategy="annotation")

    with pytest.raises(UsageError, match="cannot run every test"):
        engine.run([], run_all=True)


def test_annotation_strategy_runs_covering_tests(php_project: Path) -> None:
    (php_project / "src" / "Billing.php").write_text("<?php\nnamespace App;\nclass Billing {}\n", encoding="utf-8")
    (php_project / "test" / "BillingFunctionalTest.php").write_text(
        "<?php\n/** @covers \\App\\Billing */\n", encoding="utf-8"
    )
    runner = FakePhpunit()
    engine = _engine(php_project, runner, coverage=False, strategy="annotation")

    report = engine.run(["src/Billing.php"])

    assert [item.namespace for item in report.results] == ["BillingFunctionalTest"]


def test_stale_dependencies_are_reported(php_project: Path) -> None:
    (php_project / "composer.lock").write_text(
        json.dumps({"packages": [{"name": "acme/lib", "version": "2.0.0"}]}), encoding="utf-8"
    )
    engine = _engine(php_project, FakePhpunit(), coverage=False)

    report = engine.run(["src/SomeClass.php"])

    assert report.stale_dependencies == ["acme/lib"]
    assert len(report.results) == 1


def test_malformed_manifest_does_not_block(php_project: Path) -> None:
    (php_project / "composer.lock").write_text("{broken", encoding="utf-8")
    engine = _engine(php_project, FakePhpunit(), coverage=False)

    report = engine.run(["src/SomeClass.php"])

    assert report.stale_dependencies == []
    assert len(report.results) == 1


def test_session_wraps_serial_run(php_project: Path) -> None:
    runner = FakePhpunit()
    engine = _engine(
        php_project,
        runner,
        coverage=False,
        jobs=4,
        session=SessionSettings(enabled=True),
    )

    engine.run(["src/SomeClass.php", "src/Sub/Other.php"])

    verbs = [cmd[-1] for cmd in runner.commands]
    assert verbs[0] == "setup"
    assert verbs[-1] == "shutdown"
    assert len(verbs) == 4
    test_options = runner.options[1:-1]
    assert all(option is not None and option.env == {"SETUP": "false"} for option in test_options)


def test_docker_commands_wrap_runner(php_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(commands_module, "find_executable", lambda name: "/usr/bin/docker")
    runner = FakePhpunit()
    engine = _engine(php_project, runner, coverage=False, docker={"enabled": True, "image": "php:8.3"})

    report = engine.run(["src/SomeClass.php"])

    (command,) = runner.commands
    assert command[:3] == ("docker", "run", "--rm")
    assert "php:8.3" in command
    assert command[command.index("php:8.3") + 1] == "vendor/bin/phpunit"
    assert len(report.results) == 1
