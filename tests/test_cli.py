# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for the unitrun command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from conftest import FakePhpunit
from unitrun import engine as engine_module
from unitrun.cli.app import app
from unitrun.config_loader import DOCKER_ENV_VAR

FAILING_JUNIT = """<?xml version="1.0" encoding="UTF-8"?>
<testsuites>
  <testsuite name="{cls}">
    <testcase name="testBroken" class="{cls}" time="0.2">
      <failure>Failed asserting that false is true.</failure>
    </testcase>
  </testsuite>
</testsuites>
"""


@pytest.fixture
def cli_project(php_project: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.chdir(php_project)
    monkeypatch.delenv(DOCKER_ENV_VAR, raising=False)
    return php_project


def _patch_runner(monkeypatch: pytest.MonkeyPatch, runner: FakePhpunit) -> FakePhpunit:
    monkeypatch.setattr(engine_module, "run_command", runner)
    return runner


def test_run_passing_tests(cli_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    runner = _patch_runner(monkeypatch, FakePhpunit())

    result = CliRunner().invoke(app, ["run", "src/SomeClass.php", "--no-coverage", "--no-emoji", "--no-color"])

    assert result.exit_code == 0, result.output
    assert "PHPUnit" in result.output
    assert "1 pass" in result.output
    assert len(runner.commands) == 1


def test_run_failing_tests_exit_one(cli_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_runner(monkeypatch, FakePhpunit(junit_template=FAILING_JUNIT))

    result = CliRunner().invoke(app, ["run", "src/SomeClass.php", "--no-coverage", "--no-emoji", "--no-color"])

    assert result.exit_code == 1
    assert "Failed Test Results:" in result.output
    assert "SomeClassTest::testBroken" in result.output
    assert "Failed asserting that false is true." in result.output


def test_run_requires_paths(cli_project: Path) -> None:
    result = CliRunner().invoke(app, ["run", "--no-emoji"])

    assert result.exit_code == 2
    assert "--everything" in result.output


def test_run_everything(cli_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    runner = _patch_runner(monkeypatch, FakePhpunit())

    result = CliRunner().invoke(app, ["run", "--everything", "--no-coverage", "--no-emoji", "--jobs", "2"])

    assert result.exit_code == 0, result.output
    assert len(runner.commands) == 2


def test_run_without_tests_warns_and_succeeds(cli_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    runner = _patch_runner(monkeypatch, FakePhpunit())

    result = CliRunner().invoke(app, ["run", "README.md", "--no-coverage", "--no-emoji"])

    assert result.exit_code == 0
    assert "No tests to run." in result.output
    assert runner.commands == []


def test_run_missing_binary_is_usage_error(cli_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_runner(monkeypatch, FakePhpunit())
    (cli_project / "vendor" / "bin" / "phpunit").unlink()

    result = CliRunner().invoke(app, ["run", "src/SomeClass.php", "--no-coverage", "--no-emoji"])

    assert result.exit_code == 2
    assert "PHPUnit does not seem to be installed" in result.output
    assert "composer install" in result.output


def test_run_missing_coverage_engine_is_usage_error(cli_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    runner = _patch_runner(monkeypatch, FakePhpunit())

    result = CliRunner().invoke(app, ["run", "src/SomeClass.php", "--no-emoji"])

    assert result.exit_code == 2
    assert "Xdebug is not installed" in result.output
    assert all(cmd[0] == "php" for cmd in runner.commands)


def test_run_invalid_configuration(cli_project: Path) -> None:
    (cli_project / ".unitrun.toml").write_text('strategy = "magic"\n', encoding="utf-8")

    result = CliRunner().invoke(app, ["run", "src/SomeClass.php", "--no-emoji"])

    assert result.exit_code == 2
    assert "Invalid unitrun configuration" in result.output


def test_run_writes_json_report(cli_project: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _patch_runner(monkeypatch, FakePhpunit())
    destination = cli_project / "out" / "results.json"

    result = CliRunner().invoke(
        app,
        ["run", "src/Sub/Other.php", "--no-coverage", "--no-emoji", "--json-out", str(destination)],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(destination.read_text(encoding="utf-8"))
    assert [item["namespace"] for item in payload["results"]] == ["OtherTest"]


def test_stale_command(cli_project: Path) -> None:
    runner = CliRunner()
    assert runner.invoke(app, ["stale", "--no-emoji"]).exit_code == 0

    (cli_project / "composer.lock").write_text(
        json.dumps({"packages": [{"name": "acme/lib", "version": "1.2.0"}]}), encoding="utf-8"
    )
    stale = runner.invoke(app, ["stale", "--no-emoji"])
    assert stale.exit_code == 1
    assert "acme/lib" in stale.output
    assert "--- Composer dependencies (composer.lock) ---" in stale.output

    manifest = cli_project / "vendor" / "composer" / "installed.json"
    manifest.parent.mkdir(parents=True)
    manifest.write_text(json.dumps([{"name": "acme/lib", "version": "1.2.0"}]), encoding="utf-8")
    assert runner.invoke(app, ["stale", "--no-emoji"]).exit_code == 0

    manifest.write_text("{oops", encoding="utf-8")
    assert runner.invoke(app, ["stale", "--no-emoji"]).exit_code == 2
