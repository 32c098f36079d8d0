# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for unitrun runs."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import BinaryNotFoundError, ConfigPathError
from .filesystem.paths import normalize_root

DEFAULT_JOBS: Final[int] = 4
DEFAULT_TIMEOUT_SECONDS: Final[float] = 1800.0
DEFAULT_COVERAGE_MODES: Final[tuple[str, ...]] = ("coverage", "debug")

Strategy = Literal["structural", "annotation"]


class DockerSettings(BaseModel):
    """Run every test process inside a throwaway container."""

    model_config = ConfigDict(validate_assignment=True)

    enabled: bool = False
    image: str = "phpunit"
    binary: str | None = None


class SessionSettings(BaseModel):
    """Serial runs wrapped by a single setup and teardown invocation."""

    model_config = ConfigDict(validate_assignment=True)

    enabled: bool = False
    setup: list[str] = Field(default_factory=lambda: ["setup"])
    teardown: list[str] = Field(default_factory=lambda: ["shutdown"])
    test_env: dict[str, str] = Field(default_factory=lambda: {"SETUP": "false"})


class UnitConfig(BaseModel):
    """Settings controlling discovery, execution and reporting."""

    model_config = ConfigDict(validate_assignment=True)

    name: str = "PHPUnit"
    source_directory: Path = Path("src")
    test_directory: Path = Path("test")
    binary: Path = Path("vendor/bin/phpunit")
    runner_config: Path | None = None
    reports_root: Path = Path("reports")
    reports: str = "phpunit"
    coverage: bool | None = None
    jobs: int = Field(default=DEFAULT_JOBS, ge=1)
    timeout: float | None = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    strategy: Strategy = "structural"
    test_type: str = "functional"
    source_suffix: str = ".php"
    test_marker: str = "Test"
    lock_file: Path = Path("composer.lock")
    installed_manifest: Path = Path("vendor/composer/installed.json")
    php_binary: str = "php"
    required_coverage_modes: tuple[str, ...] = DEFAULT_COVERAGE_MODES
    docker: DockerSettings = Field(default_factory=DockerSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)

    @field_validator("reports")
    @classmethod
    def _strip_reports(cls, value: str) -> str:
        """Trim trailing separators so report paths never contain ``//``."""

        stripped = value.rstrip("/")
        if not stripped:
            raise ValueError("reports must name a sub-directory")
        return stripped

    @field_validator("source_suffix")
    @classmethod
    def _dotted_suffix(cls, value: str) -> str:
        return value if value.startswith(".") else f".{value}"

    @property
    def coverage_enabled(self) -> bool:
        """Return whether coverage is collected; an unset value means enabled."""

        return self.coverage is not False

    @property
    def effective_jobs(self) -> int:
        """Return the concurrency limit, forced to one for session runs."""

        return 1 if self.session.enabled else self.jobs


@dataclass(frozen=True, slots=True)
class ProjectLayout:
    """Absolute locations derived from a :class:`UnitConfig` and a project root."""

    root: Path
    source_root: str
    test_root: str
    binary: Path
    runner_config: Path | None
    reports_dir: Path

    @classmethod
    def from_config(cls, config: UnitConfig, root: Path, *, validate: bool = True) -> ProjectLayout:
        """Resolve configured paths against ``root``.

        Args:
            config: Loaded configuration.
            root: Project root directory.
            validate: When ``True`` every configured path must exist.

        Returns:
            ProjectLayout: Layout with absolute paths.

        Raises:
            ConfigPathError: If a configured directory or runner config is missing.
            BinaryNotFoundError: If the runner executable is missing or not executable.
        """

        root = root.resolve()
        source = root / config.source_directory
        test = root / config.test_directory
        binary = root / config.binary
        runner_config = root / config.runner_config if config.runner_config is not None else None
        if validate:
            for path, key in ((source, "source_directory"), (test, "test_directory")):
                if not path.is_dir():
                    raise ConfigPathError(path, key)
            if runner_config is not None and not runner_config.exists():
                raise ConfigPathError(runner_config, "runner_config")
            if not config.docker.enabled and not (binary.is_file() and os.access(binary, os.X_OK)):
                raise BinaryNotFoundError(binary)
        return cls(
            root=root,
            source_root=normalize_root(source),
            test_root=normalize_root(test),
            binary=binary,
            runner_config=runner_config,
            reports_dir=root / config.reports_root / config.reports,
        )


__all__ = [
    "DEFAULT_COVERAGE_MODES",
    "DEFAULT_JOBS",
    "DEFAULT_TIMEOUT_SECONDS",
    "DockerSettings",
    "ProjectLayout",
    "SessionSettings",
    "Strategy",
    "UnitConfig",
]
