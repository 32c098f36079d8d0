# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Strategies mapping changed paths to the test files they affect."""

from __future__ import annotations

from .annotations import AnnotationResolver, build_coverage_index, extract_annotated_classes
from .base import AffectedTestResolver, collect_test_files
from .structural import StructuralResolver, mirrored_test_name

__all__ = [
    "AffectedTestResolver",
    "AnnotationResolver",
    "StructuralResolver",
    "build_coverage_index",
    "collect_test_files",
    "extract_annotated_classes",
    "mirrored_test_name",
]
