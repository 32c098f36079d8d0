# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Filesystem helpers for mirrored source and test trees."""

from __future__ import annotations

from .paths import is_descendant, normalize_root, readable_path, relative_path, transpose_path

__all__ = ["is_descendant", "normalize_root", "readable_path", "relative_path", "transpose_path"]
