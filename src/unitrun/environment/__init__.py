# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Checks that run once before any test process starts."""

from __future__ import annotations

from .dependencies import check_dependency_files, stale_dependencies, stale_dependency_message
from .precondition import EnvironmentInfo, check_coverage_engine

__all__ = [
    "EnvironmentInfo",
    "check_coverage_engine",
    "check_dependency_files",
    "stale_dependencies",
    "stale_dependency_message",
]
