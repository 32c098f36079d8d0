# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""JSON serialisation of engine reports."""

from __future__ import annotations

from pathlib import Path

from ..models import EngineReport


def write_json_report(report: EngineReport, destination: Path) -> Path:
    """Write ``report`` to ``destination`` as indented JSON and return the path."""

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(report.model_dump_json(indent=2), encoding="utf-8")
    return destination


__all__ = ["write_json_report"]
