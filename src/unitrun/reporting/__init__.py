# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rendering of engine results for terminals and machine consumers."""

from __future__ import annotations

from .console import ConsoleRenderer, basic_result, format_duration, format_time
from .json import write_json_report

__all__ = ["ConsoleRenderer", "basic_result", "format_duration", "format_time", "write_json_report"]
