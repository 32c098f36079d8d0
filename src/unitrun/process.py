# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shell-free subprocess execution used for every external test process."""

from __future__ import annotations

import logging
import os
import shutil

# Bandit: commands are assembled from validated configuration and passed as
# argument lists without ``shell=True``.
import subprocess  # nosec B404
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, replace
from pathlib import Path
from subprocess import CompletedProcess
from typing import Final, Protocol, runtime_checkable

TIMEOUT_RETURNCODE: Final[int] = 124
SPAWN_FAILURE_RETURNCODE: Final[int] = 127

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandOptions:
    """Execution settings applied to a single external command."""

    cwd: Path | None = None
    env: Mapping[str, str] | None = None
    timeout: float | None = None

    def with_overrides(
        self,
        *,
        cwd: Path | None = None,
        env: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> CommandOptions:
        """Return a copy with the supplied non-``None`` values replaced.

        Args:
            cwd: Working directory override.
            env: Extra environment variables merged over the existing mapping.
            timeout: Timeout override in seconds.

        Returns:
            CommandOptions: Updated options instance.

        Raises:
            ValueError: When ``timeout`` is negative.
        """

        if timeout is not None and timeout < 0:
            raise ValueError("timeout override must be non-negative")
        merged_env = self.env
        if env is not None:
            merged_env = {**(self.env or {}), **env}
        return replace(
            self,
            cwd=cwd if cwd is not None else self.cwd,
            env=merged_env,
            timeout=timeout if timeout is not None else self.timeout,
        )


@runtime_checkable
class RunnerCallable(Protocol):
    """Callable protocol for invoking external commands."""

    def __call__(
        self,
        cmd: Sequence[str],
        *,
        options: CommandOptions | None = None,
    ) -> CompletedProcess[str]:
        """Execute ``cmd`` returning a completed subprocess."""

        raise NotImplementedError


def find_executable(name: str) -> str | None:
    """Return the absolute path of ``name`` on ``PATH`` or ``None``."""

    return shutil.which(name)


def _ensure_text(value: str | bytes | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.decode(errors="ignore")


def _normalize_args(args: Sequence[str]) -> list[str]:
    """Normalise the subprocess argument sequence.

    Args:
        args: Raw command arguments supplied by the caller.

    Returns:
        list[str]: Argument list whose head is an absolute executable path.

    Raises:
        ValueError: If no arguments are provided.
        FileNotFoundError: If a bare executable name cannot be found on ``PATH``.
    """

    if not args:
        raise ValueError("subprocess command requires at least one argument")

    head, *rest = args
    head_path = Path(head)
    if head_path.is_absolute():
        return [str(head_path), *rest]

    resolved = find_executable(head)
    if resolved is None:
        raise FileNotFoundError(f"Executable '{head}' was not found on PATH")
    return [resolved, *rest]


def run_command(args: Sequence[str], *, options: CommandOptions | None = None) -> CompletedProcess[str]:
    """Execute ``args`` capturing text output.

    A process that outlives ``options.timeout`` is killed and reported as a
    completed process with exit status ``124`` and a timeout note on stderr.

    Args:
        args: Command and argument sequence to execute.
        options: Working directory, extra environment and timeout settings.

    Returns:
        CompletedProcess: Subprocess execution metadata.

    Raises:
        FileNotFoundError: If the executable cannot be resolved on ``PATH``.
    """

    normalized = _normalize_args(args)
    resolved = options or CommandOptions()
    env = {**os.environ, **resolved.env} if resolved.env is not None else None
    _LOGGER.debug("running %s", " ".join(normalized))

    try:
        completed: CompletedProcess[str] = subprocess.run(  # nosec B603
            normalized,
            cwd=str(resolved.cwd) if resolved.cwd is not None else None,
            env=env,
            check=False,
            capture_output=True,
            text=True,
            timeout=resolved.timeout,
            stdin=subprocess.DEVNULL,
        )
    except subprocess.TimeoutExpired as exc:
        stderr = _ensure_text(exc.stderr)
        timeout_msg = f"Command timed out after {resolved.timeout:.1f}s"
        completed = subprocess.CompletedProcess(
            args=normalized,
            returncode=TIMEOUT_RETURNCODE,
            stdout=_ensure_text(exc.stdout) or "",
            stderr=f"{stderr}\n{timeout_msg}" if stderr else timeout_msg,
        )
    return completed


__all__ = [
    "CommandOptions",
    "RunnerCallable",
    "SPAWN_FAILURE_RETURNCODE",
    "TIMEOUT_RETURNCODE",
    "find_executable",
    "run_command",
]
