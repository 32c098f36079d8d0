# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Tests for status line helpers."""

from __future__ import annotations

import pytest

from unitrun.logging import emit, section, warn


def test_emit_prefixes_glyph_only_with_emoji(capsys: pytest.CaptureFixture[str]) -> None:
    emit("ok", "Setup done", use_emoji=True, use_color=False)
    warn("Lock file missing", use_emoji=False, use_color=False)

    lines = capsys.readouterr().out.splitlines()

    assert lines == ["✅ Setup done", "Lock file missing"]


def test_section_renders_plain_heading_off_terminal(capsys: pytest.CaptureFixture[str]) -> None:
    section("Composer dependencies", use_color=True, detail="composer.lock")

    assert capsys.readouterr().out.splitlines() == ["", "--- Composer dependencies (composer.lock) ---"]
