# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command running the tests affected by changed paths."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from ..config import ProjectLayout, UnitConfig
from ..config_loader import ConfigLoader
from ..engine import TestEngine
from ..errors import ConfigError, NoTestsError, UsageError
from ..reporting import ConsoleRenderer, write_json_report
from .options import (
    COLOR_OPTION,
    COVERAGE_OPTION,
    DEBUG_OPTION,
    EMOJI_OPTION,
    EVERYTHING_OPTION,
    JOBS_OPTION,
    JSON_OUT_OPTION,
    PATHS_ARGUMENT,
    ROOT_OPTION,
    TIMEOUT_OPTION,
    RunOptions,
    build_run_options,
)
from .shared import EXIT_FAILURES, EXIT_OK, EXIT_USAGE, CLIError, CLILogger, build_cli_logger


def load_project(options: RunOptions) -> tuple[UnitConfig, ProjectLayout]:
    """Load configuration and resolve the project layout.

    Raises:
        CLIError: With exit code 2 when configuration or layout is invalid.
    """

    try:
        config = ConfigLoader(options.root).load(options.config_overrides())
        layout = ProjectLayout.from_config(config, options.root)
    except (ConfigError, UsageError) as exc:
        raise CLIError(str(exc), exit_code=EXIT_USAGE) from exc
    return config, layout


def execute_run(options: RunOptions, logger: CLILogger) -> int:
    """Run the engine for ``options`` and return the process exit code."""

    config, layout = load_project(options)
    renderer = ConsoleRenderer(logger.console, name=config.name)
    engine = TestEngine(config, layout, on_result=renderer.progress, use_emoji=options.use_emoji)
    logger.debug(f"root={layout.root} strategy={config.strategy} jobs={config.effective_jobs}")

    renderer.header()
    try:
        report = engine.run(options.paths, run_all=options.run_all)
    except NoTestsError as exc:
        logger.warn(exc.message)
        return EXIT_OK
    except UsageError as exc:
        raise CLIError(str(exc), exit_code=EXIT_USAGE) from exc

    renderer.finish(report)
    if options.json_out is not None:
        destination = write_json_report(report, options.json_out)
        logger.ok(f"Wrote JSON report to {destination}")
    return EXIT_FAILURES if report.has_failures else EXIT_OK


def run_tests(
    paths: PATHS_ARGUMENT = None,
    root: ROOT_OPTION = Path("."),
    everything: EVERYTHING_OPTION = False,
    coverage: COVERAGE_OPTION = None,
    jobs: JOBS_OPTION = None,
    timeout: TIMEOUT_OPTION = None,
    json_out: JSON_OUT_OPTION = None,
    emoji: EMOJI_OPTION = True,
    color: COLOR_OPTION = True,
    debug: DEBUG_OPTION = False,
) -> None:
    """Run the tests affected by PATHS.

    Raises:
        typer.Exit: Always raised to terminate the command with an exit status.
    """

    options = build_run_options(
        root=root,
        paths=paths,
        everything=everything,
        coverage=coverage,
        jobs=jobs,
        timeout=timeout,
        json_out=json_out,
        emoji=emoji,
        color=color,
        debug=debug,
    )
    if debug:
        logging.basicConfig(level=logging.DEBUG)
    logger = build_cli_logger(emoji=emoji, debug=debug, no_color=not color)
    if not options.paths and not options.run_all:
        logger.fail("Pass at least one path or use --everything.")
        raise typer.Exit(code=EXIT_USAGE)
    try:
        code = execute_run(options, logger)
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=code)


__all__ = ["execute_run", "load_project", "run_tests"]
