# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Command lines for the external test runner."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from ..errors import UsageError
from ..models import OutputPaths
from ..process import find_executable


def runner_arguments(outputs: OutputPaths, *, runner_config: Path | None) -> list[str]:
    """Return PHPUnit flags directing reports to ``outputs``.

    Args:
        outputs: Report destinations for the job.
        runner_config: Optional PHPUnit configuration file.

    Returns:
        list[str]: Arguments placed between the binary and the test path.
    """

    args: list[str] = []
    if runner_config is not None:
        args.append(f"--configuration={runner_config}")
    args.extend(["-d", "display_errors=stderr", f"--log-junit={outputs.junit}"])
    if outputs.clover is not None:
        args.append(f"--coverage-clover={outputs.clover}")
    return args


@dataclass(frozen=True, slots=True)
class CommandBuilder:
    """Assemble per-test commands, optionally wrapped in ``docker run``."""

    binary: Path
    root: Path
    runner_config: Path | None = None
    docker_image: str | None = None
    docker_binary: str | None = None

    @property
    def uses_docker(self) -> bool:
        return self.docker_image is not None

    def ensure_available(self) -> None:
        """Raise :class:`UsageError` when the docker client is required but missing."""

        if self.uses_docker and find_executable("docker") is None:
            raise UsageError(
                "Docker does not seem to be installed.",
                remediation="Install Docker or unset RUN_PHPUNIT_IN_DOCKER.",
            )

    def prefix(self, outputs: OutputPaths) -> list[str]:
        """Return the executable portion of the command for ``outputs``."""

        if not self.uses_docker:
            return [str(self.binary)]
        prefix = [
            "docker",
            "run",
            "--rm",
            f"--volume={self.root}:{self.root}",
            f"--volume={outputs.junit}:{outputs.junit}",
        ]
        if outputs.clover is not None:
            prefix.append(f"--volume={outputs.clover}:{outputs.clover}")
        prefix.append(f"--workdir={self.root}")
        prefix.append(str(self.docker_image))
        prefix.append(self.docker_binary or str(self.binary))
        return prefix

    def build(self, test_path: str, outputs: OutputPaths) -> tuple[str, ...]:
        """Return the full command running ``test_path``."""

        return (
            *self.prefix(outputs),
            *runner_arguments(outputs, runner_config=self.runner_config),
            test_path,
        )

    def session_command(self, step: list[str]) -> tuple[str, ...]:
        """Return the command for a session ``setup`` or ``teardown`` step."""

        return (str(self.binary), *step)


__all__ = ["CommandBuilder", "runner_arguments"]
