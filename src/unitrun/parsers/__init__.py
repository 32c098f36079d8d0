# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parsers for the reports written by the external test runner."""

from __future__ import annotations

from .clover import LineCountOracle, parse_clover
from .junit import JunitResultParser, get_test_name, parse_junit

__all__ = ["JunitResultParser", "LineCountOracle", "get_test_name", "parse_clover", "parse_junit"]
