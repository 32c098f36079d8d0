# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared pytest fixtures."""

from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from subprocess import CompletedProcess

import pytest

from unitrun.process import CommandOptions

PASSING_JUNIT = """<?xml version="1.0" encoding="UTF-8"?>
<testsuites>
  <testsuite name="{cls}" tests="1">
    <testcase name="testSomething" class="{cls}" classname="{cls}" time="0.010"/>
  </testsuite>
</testsuites>
"""

CLOVER = """<?xml version="1.0" encoding="UTF-8"?>
<coverage generated="0">
  <project timestamp="0">
    <file name="{path}">
      <line num="1" type="stmt" count="3"/>
      <line num="2" type="stmt" count="0"/>
    </file>
  </project>
</coverage>
"""


def _flag(command: Sequence[str], prefix: str) -> str | None:
    for arg in command:
        if arg.startswith(prefix):
            return arg[len(prefix) :]
    return None


@dataclass
class FakePhpunit:
    """Runner double that writes the reports PHPUnit would have written."""

    junit_template: str = PASSING_JUNIT
    clover_path: str | None = None
    stderr_for: dict[str, str] = field(default_factory=dict)
    commands: list[tuple[str, ...]] = field(default_factory=list)
    options: list[CommandOptions | None] = field(default_factory=list)
    hook: Callable[[Sequence[str]], CompletedProcess[str] | None] | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def __call__(self, cmd: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
        with self._lock:
            self.commands.append(tuple(cmd))
            self.options.append(options)
        if self.hook is not None:
            hooked = self.hook(cmd)
            if hooked is not None:
                return hooked
        test_path = cmd[-1]
        stderr = self.stderr_for.get(Path(test_path).name, "")
        junit = _flag(cmd, "--log-junit=")
        if junit is not None and not stderr:
            Path(junit).write_text(self.junit_template.format(cls=Path(test_path).stem), encoding="utf-8")
        clover = _flag(cmd, "--coverage-clover=")
        if clover is not None and self.clover_path is not None:
            Path(clover).write_text(CLOVER.format(path=self.clover_path), encoding="utf-8")
        return CompletedProcess(list(cmd), 1 if stderr else 0, stdout="", stderr=stderr)


@pytest.fixture
def php_project(tmp_path: Path) -> Path:
    """Return a project root with mirrored ``src``/``test`` trees and a runner binary."""

    (tmp_path / "src" / "Sub").mkdir(parents=True)
    (tmp_path / "test" / "Sub").mkdir(parents=True)
    (tmp_path / "src" / "SomeClass.php").write_text("<?php\nclass SomeClass {}\n", encoding="utf-8")
    (tmp_path / "src" / "Sub" / "Other.php").write_text("<?php\nclass Other {}\n", encoding="utf-8")
    (tmp_path / "test" / "SomeClassTest.php").write_text("<?php\n", encoding="utf-8")
    (tmp_path / "test" / "Sub" / "OtherTest.php").write_text("<?php\n", encoding="utf-8")
    binary = tmp_path / "vendor" / "bin" / "phpunit"
    binary.parent.mkdir(parents=True)
    binary.write_text("#!/bin/sh\n", encoding="utf-8")
    binary.chmod(0o755)
    return tmp_path


@pytest.fixture
def fake_phpunit() -> FakePhpunit:
    return FakePhpunit()
