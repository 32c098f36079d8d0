# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Layered configuration loading from TOML documents and CLI overrides."""

from __future__ import annotations

import logging
import os
import re
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .config import UnitConfig
from .errors import ConfigError

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
PROJECT_CONFIG_FILENAME: Final[str] = ".unitrun.toml"
PYPROJECT_SECTION: Final[str] = "unitrun"
DOCKER_ENV_VAR: Final[str] = "RUN_PHPUNIT_IN_DOCKER"

_ENV_VAR_PATTERN = re.compile(r"\$(\w+)|\$\{([^}]+)\}")
_LOGGER = logging.getLogger(__name__)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in result and isinstance(result[key], Mapping) and isinstance(value, Mapping):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _expand_env_value(value: Any, env: Mapping[str, str]) -> Any:
    if isinstance(value, str):

        def _replace(match: re.Match[str]) -> str:
            key = match.group(1) or match.group(2)
            return env.get(key, match.group(0))

        return _ENV_VAR_PATTERN.sub(_replace, value)
    if isinstance(value, Mapping):
        return {key: _expand_env_value(item, env) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env_value(item, env) for item in value]
    return value


class TomlConfigSource:
    """Load a configuration fragment from a standalone TOML document."""

    def __init__(self, path: Path, *, env: Mapping[str, str] | None = None) -> None:
        self.path = path
        self._env = os.environ if env is None else env

    def _read(self) -> dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            with self.path.open("rb") as handle:
                return tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"Unable to parse {self.path}: {exc}") from exc

    def load(self) -> dict[str, Any]:
        """Return the document with environment references expanded."""

        return _expand_env_value(self._read(), self._env)

    def describe(self) -> str:
        return f"TOML configuration at {self.path}"


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.unitrun]`` within ``pyproject.toml``."""

    def load(self) -> dict[str, Any]:
        tool_section = self._read().get("tool")
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION)
        if not isinstance(section, Mapping):
            return {}
        return _expand_env_value(dict(section), self._env)

    def describe(self) -> str:
        return f"pyproject.toml ({self.path})"


class ConfigLoader:
    """Merge defaults, project files, environment and overrides into a :class:`UnitConfig`.

    Precedence, lowest first: built-in defaults, ``[tool.unitrun]`` in
    ``pyproject.toml``, ``.unitrun.toml``, the ``RUN_PHPUNIT_IN_DOCKER``
    environment switch, then explicit overrides.
    """

    def __init__(self, root: Path, *, env: Mapping[str, str] | None = None) -> None:
        self.root = root
        self._env = os.environ if env is None else env
        self.sources = (
            PyProjectConfigSource(root / PYPROJECT_FILENAME, env=self._env),
            TomlConfigSource(root / PROJECT_CONFIG_FILENAME, env=self._env),
        )

    def load(self, overrides: Mapping[str, Any] | None = None) -> UnitConfig:
        """Return the merged configuration.

        Args:
            overrides: Highest-precedence values, typically from CLI flags.
                ``None`` values are ignored.

        Returns:
            UnitConfig: Validated configuration.

        Raises:
            ConfigError: If a document cannot be parsed or validation fails.
        """

        merged: dict[str, Any] = {}
        for source in self.sources:
            fragment = source.load()
            if fragment:
                _LOGGER.debug("loaded %s", source.describe())
            merged = _deep_merge(merged, fragment)
        if self._env.get(DOCKER_ENV_VAR):
            merged = _deep_merge(merged, {"docker": {"enabled": True}})
        if overrides:
            merged = _deep_merge(merged, {key: value for key, value in overrides.items() if value is not None})
        try:
            return UnitConfig.model_validate(merged)
        except ValidationError as exc:
            raise ConfigError(f"Invalid unitrun configuration: {exc}") from exc


def load_config(root: Path, overrides: Mapping[str, Any] | None = None) -> UnitConfig:
    """Load configuration for ``root`` using the process environment."""

    return ConfigLoader(root).load(overrides)


__all__ = [
    "ConfigLoader",
    "DOCKER_ENV_VAR",
    "PROJECT_CONFIG_FILENAME",
    "PYPROJECT_FILENAME",
    "PyProjectConfigSource",
    "TomlConfigSource",
    "load_config",
]
