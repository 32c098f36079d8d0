# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Affected-test orchestration for mirrored PHPUnit source trees."""

from __future__ import annotations

from importlib import metadata

try:
    __version__ = metadata.version("unitrun")
except metadata.PackageNotFoundError:  # pragma: no cover - editable checkout without metadata
    __version__ = "0.0.0"

__all__ = ["__version__"]
