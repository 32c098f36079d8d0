# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands."""

from __future__ import annotations

import typer

from .run import run_tests
from .stale import stale_command

app = typer.Typer(help="Run the PHPUnit tests affected by changed files.", no_args_is_help=True)
app.command("run")(run_tests)
app.command("stale")(stale_command)


def main() -> None:
    """Console script entry point."""

    app()


__all__ = ["app", "main"]
