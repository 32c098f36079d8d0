# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Shared Rich consoles for status lines and test progress."""

from __future__ import annotations

import sys
from functools import lru_cache

from rich.console import Console


def stdout_is_tty() -> bool:
    """Return ``True`` when stdout is attached to a terminal."""

    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


@lru_cache(maxsize=8)
def _build_console(color: bool, emoji: bool, tty: bool) -> Console:
    return Console(
        color_system="auto" if color else None,
        force_terminal=tty,
        no_color=not color,
        emoji=emoji,
        highlight=False,
        soft_wrap=True,
    )


def shared_console(*, color: bool, emoji: bool) -> Console:
    """Return the cached console for the given output preferences.

    Colour is honoured only on a terminal, so piped runs and CI logs stay
    free of ANSI sequences.
    """

    tty = stdout_is_tty()
    return _build_console(color and tty, emoji, tty)


__all__ = ["shared_console", "stdout_is_tty"]
