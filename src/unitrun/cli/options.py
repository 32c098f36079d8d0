# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Typer option declarations and normalised option containers."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any

import typer

PATHS_ARGUMENT = Annotated[
    list[str] | None,
    typer.Argument(help="Changed files or directories whose tests should run.", show_default=False),
]
ROOT_OPTION = Annotated[
    Path,
    typer.Option("--root", "-r", help="Project root containing the configuration.", show_default=False),
]
EVERYTHING_OPTION = Annotated[
    bool,
    typer.Option("--everything", help="Run every test under the test directory."),
]
COVERAGE_OPTION = Annotated[
    bool | None,
    typer.Option("--coverage/--no-coverage", help="Collect coverage (default: enabled).", show_default=False),
]
JOBS_OPTION = Annotated[
    int | None,
    typer.Option("--jobs", "-j", min=1, help="Maximum concurrent test processes.", show_default=False),
]
TIMEOUT_OPTION = Annotated[
    float | None,
    typer.Option("--timeout", min=0.1, help="Seconds before a test process is killed.", show_default=False),
]
JSON_OUT_OPTION = Annotated[
    Path | None,
    typer.Option("--json-out", help="Write the aggregated results as JSON to this file.", show_default=False),
]
EMOJI_OPTION = Annotated[
    bool,
    typer.Option("--emoji/--no-emoji", help="Toggle emoji output."),
]
COLOR_OPTION = Annotated[
    bool,
    typer.Option("--color/--no-color", help="Toggle coloured output."),
]
DEBUG_OPTION = Annotated[
    bool,
    typer.Option("--debug", help="Print debug information."),
]


@dataclass(slots=True)
class RunOptions:
    """Normalised CLI inputs for the ``run`` command."""

    root: Path
    paths: list[str]
    run_all: bool
    coverage: bool | None
    jobs: int | None
    timeout: float | None
    json_out: Path | None
    use_emoji: bool
    use_color: bool
    debug: bool

    def config_overrides(self) -> dict[str, Any]:
        """Return configuration overrides; unset flags are ``None`` and ignored."""

        return {"coverage": self.coverage, "jobs": self.jobs, "timeout": self.timeout}


def build_run_options(
    *,
    root: Path,
    paths: list[str] | None,
    everything: bool,
    coverage: bool | None,
    jobs: int | None,
    timeout: float | None,
    json_out: Path | None,
    emoji: bool,
    color: bool,
    debug: bool,
) -> RunOptions:
    """Construct :class:`RunOptions` from Typer parameters.

    Changed paths are made absolute against the working directory so they can
    be compared with the configured roots regardless of ``--root``.
    """

    return RunOptions(
        root=root.resolve(),
        paths=[os.path.abspath(path) for path in paths or []],
        run_all=everything,
        coverage=coverage,
        jobs=jobs,
        timeout=timeout,
        json_out=json_out,
        use_emoji=emoji,
        use_color=color,
        debug=debug,
    )


__all__ = [
    "COLOR_OPTION",
    "COVERAGE_OPTION",
    "DEBUG_OPTION",
    "EMOJI_OPTION",
    "EVERYTHING_OPTION",
    "JOBS_OPTION",
    "JSON_OUT_OPTION",
    "PATHS_ARGUMENT",
    "ROOT_OPTION",
    "RunOptions",
    "TIMEOUT_OPTION",
    "build_run_options",
]
