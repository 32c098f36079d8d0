# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Coverage engine (Xdebug) availability checks.

The PHP interpreter is probed once per run and the answer is carried around
as an :class:`EnvironmentInfo` value, so repeated checks never spawn another
process.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from ..config import DEFAULT_COVERAGE_MODES
from ..errors import CoverageEngineMisconfiguredError, CoverageEngineMissingError
from ..process import CommandOptions, RunnerCallable

_PROBE_SCRIPT: Final[str] = (
    'echo extension_loaded("xdebug") ? "1" : "0", PHP_EOL, '
    'getenv("XDEBUG_MODE") !== false ? getenv("XDEBUG_MODE") : ini_get("xdebug.mode"), PHP_EOL;'
)


def _split_modes(raw: str) -> tuple[str, ...]:
    return tuple(mode.strip() for mode in raw.split(",") if mode.strip())


@dataclass(frozen=True, slots=True)
class EnvironmentInfo:
    """Snapshot of the coverage engine state of the PHP interpreter."""

    coverage_engine_loaded: bool
    coverage_modes: tuple[str, ...] = ()

    @classmethod
    def probe(
        cls,
        runner: RunnerCallable,
        *,
        php_binary: str = "php",
        options: CommandOptions | None = None,
    ) -> EnvironmentInfo:
        """Ask ``php_binary`` whether Xdebug is loaded and which modes are active.

        Args:
            runner: Process runner.
            php_binary: PHP interpreter to probe.
            options: Execution options for the probe.

        Returns:
            EnvironmentInfo: Probe result; an interpreter that cannot be run
            reports the engine as not loaded.
        """

        try:
            completed = runner([php_binary, "-r", _PROBE_SCRIPT], options=options)
        except OSError:
            return cls(coverage_engine_loaded=False)
        if completed.returncode != 0:
            return cls(coverage_engine_loaded=False)
        lines = (completed.stdout or "").splitlines()
        loaded = bool(lines) and lines[0].strip() == "1"
        modes = _split_modes(lines[1]) if len(lines) > 1 else ()
        return cls(coverage_engine_loaded=loaded, coverage_modes=modes)

    def missing_modes(self, required: Sequence[str] = DEFAULT_COVERAGE_MODES) -> list[str]:
        """Return the required modes that are not active."""

        return [mode for mode in required if mode not in self.coverage_modes]


def check_coverage_engine(
    enable_coverage: bool,
    info: EnvironmentInfo,
    *,
    required_modes: Sequence[str] = DEFAULT_COVERAGE_MODES,
    php_binary: str = "php",
) -> None:
    """Fail fast when coverage is requested but the engine cannot provide it.

    Args:
        enable_coverage: Whether the run collects coverage.
        info: Interpreter snapshot.
        required_modes: Modes that must all be active.
        php_binary: Interpreter named in the remediation text.

    Raises:
        CoverageEngineMissingError: If Xdebug is not loaded.
        CoverageEngineMisconfiguredError: If a required mode is not active.
    """

    if not enable_coverage:
        return
    if not info.coverage_engine_loaded:
        raise CoverageEngineMissingError(php_binary)
    missing = info.missing_modes(required_modes)
    if missing:
        raise CoverageEngineMisconfiguredError(
            missing=missing,
            required=required_modes,
            current=info.coverage_modes,
        )


__all__ = ["EnvironmentInfo", "check_coverage_engine"]
