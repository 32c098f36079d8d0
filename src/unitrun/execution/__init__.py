# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Job planning, command construction and bounded parallel execution."""

from __future__ import annotations

from .commands import CommandBuilder, runner_arguments
from .executor import ParallelTestExecutor, unique_tests
from .outputs import OutputPathAllocator, unique_basename
from .session import environment_session, run_session_step

__all__ = [
    "CommandBuilder",
    "OutputPathAllocator",
    "ParallelTestExecutor",
    "environment_session",
    "run_session_step",
    "runner_arguments",
    "unique_basename",
    "unique_tests",
]
