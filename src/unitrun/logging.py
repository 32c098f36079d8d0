# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Status lines printed around a test run: preconditions, sessions, summaries."""

from __future__ import annotations

from functools import partial
from typing import Final, Literal

from rich.rule import Rule
from rich.text import Text

from .console import shared_console, stdout_is_tty

Level = Literal["info", "ok", "warn", "fail"]

# glyph, style
_LEVELS: Final[dict[str, tuple[str, str]]] = {
    "info": ("ℹ️", "cyan"),
    "ok": ("✅", "green"),
    "warn": ("⚠️", "yellow"),
    "fail": ("❌", "red"),
}


def emit(level: Level, msg: str, *, use_emoji: bool, use_color: bool | None = None) -> None:
    """Print ``msg`` as a status line of the given ``level``.

    Args:
        level: Severity selecting the glyph and colour.
        msg: Message text.
        use_emoji: Prefix the line with the level's glyph.
        use_color: Explicit colour flag; terminal detection decides when ``None``.
    """

    glyph, style = _LEVELS[level]
    color = stdout_is_tty() if use_color is None else use_color
    text = Text(f"{glyph} {msg}" if use_emoji else msg, style=style if color else "")
    shared_console(color=color, emoji=use_emoji).print(text)


info = partial(emit, "info")
ok = partial(emit, "ok")
warn = partial(emit, "warn")
fail = partial(emit, "fail")


def section(title: str, *, use_color: bool, detail: str | None = None) -> None:
    """Print a header separating one block of output from the next."""

    heading = f"{title} ({detail})" if detail else title
    console = shared_console(color=use_color, emoji=False)
    console.print()
    if use_color and stdout_is_tty():
        console.print(Rule(heading))
    else:
        console.print(f"--- {heading} ---")


__all__ = ["Level", "emit", "fail", "info", "ok", "section", "warn"]
