# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""CLI command listing out-of-date Composer dependencies."""

from __future__ import annotations

from pathlib import Path

import typer

from ..config_loader import ConfigLoader
from ..environment import check_dependency_files, stale_dependency_message
from ..errors import ConfigError, ManifestError
from ..logging import section
from .options import EMOJI_OPTION, ROOT_OPTION
from .shared import EXIT_FAILURES, EXIT_OK, EXIT_USAGE, build_cli_logger


def stale_command(
    root: ROOT_OPTION = Path("."),
    emoji: EMOJI_OPTION = True,
) -> None:
    """Compare composer.lock with the installed packages.

    Raises:
        typer.Exit: Always raised; exit status 1 when dependencies are stale.
    """

    logger = build_cli_logger(emoji=emoji)
    resolved = root.resolve()
    try:
        config = ConfigLoader(resolved).load()
        section("Composer dependencies", use_color=logger.use_color, detail=config.lock_file.as_posix())
        stale = check_dependency_files(resolved / config.lock_file, resolved / config.installed_manifest)
    except (ConfigError, ManifestError) as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=EXIT_USAGE) from exc

    if stale:
        logger.warn(stale_dependency_message(stale))
        raise typer.Exit(code=EXIT_FAILURES)
    logger.ok("Composer dependencies are up-to-date.")
    raise typer.Exit(code=EXIT_OK)


__all__ = ["stale_command"]
