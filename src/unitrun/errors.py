# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy shared by the unitrun engine and CLI."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class UnitrunError(RuntimeError):
    """Base class for errors raised by unitrun."""


class UsageError(UnitrunError):
    """Fatal condition detected before any test process is spawned.

    The ``remediation`` text tells the user what to run or which setting to
    change; it is appended to the rendered message.
    """

    def __init__(self, message: str, *, remediation: str | None = None) -> None:
        """Initialise the error with a message and optional remediation text.

        Args:
            message: Short description of the failure.
            remediation: Instructions describing how to resolve the failure.
        """

        self.message = message
        self.remediation = remediation
        rendered = f"{message}\n\n{remediation}" if remediation else message
        super().__init__(rendered)


class NoTestsError(UsageError):
    """Raised when no affected test file exists for the requested paths."""

    def __init__(self) -> None:
        super().__init__("No tests to run.")


class CoverageEngineMissingError(UsageError):
    """Raised when coverage is requested but Xdebug cannot be loaded."""

    def __init__(self, php_binary: str) -> None:
        """Initialise the error for the interpreter that lacks the extension.

        Args:
            php_binary: PHP executable that was probed.
        """

        super().__init__(
            "You are running tests with coverage enabled, but Xdebug is not installed.",
            remediation=(
                "Install the extension with `pecl install xdebug`, enable it in your "
                f"php.ini (see `{php_binary} --ini`), or follow the steps at "
                "https://xdebug.org/wizard. Alternatively, rerun with --no-coverage."
            ),
        )


class CoverageEngineMisconfiguredError(UsageError):
    """Raised when Xdebug is loaded without every required mode."""

    def __init__(self, *, missing: Sequence[str], required: Sequence[str], current: Sequence[str]) -> None:
        """Initialise the error with the mode sets that disagree.

        Args:
            missing: Required modes absent from the active configuration.
            required: Modes the test run needs.
            current: Modes reported by the interpreter.
        """

        self.missing = tuple(missing)
        current_text = ",".join(current) if current else "off"
        super().__init__(
            f"Xdebug is installed but the mode(s) {', '.join(self.missing)} are not enabled.",
            remediation=(
                "Expected the following configuration in your xdebug.ini:\n\n"
                f"    xdebug.mode={','.join(required)}\n\n"
                f"Your current configuration is: xdebug.mode={current_text}\n\n"
                "Locate the active file with `php -i | grep xdebug.ini`."
            ),
        )


class BinaryNotFoundError(UsageError):
    """Raised when the configured test runner executable is missing."""

    def __init__(self, binary: Path) -> None:
        self.binary = binary
        super().__init__(
            f"PHPUnit does not seem to be installed at `{binary}`.",
            remediation="Have you run `composer install`?",
        )


class ConfigPathError(UsageError):
    """Raised when a configured path does not exist on disk."""

    def __init__(self, path: Path, key: str) -> None:
        """Initialise the error for ``key`` pointing at ``path``.

        Args:
            path: Resolved path that was not found.
            key: Configuration key that supplied the path.
        """

        self.path = path
        self.key = key
        super().__init__(
            f"Path '{path}' was not found for '{key}'.",
            remediation=f"Update `{key}` under [tool.unitrun] or in .unitrun.toml.",
        )


class SessionError(UsageError):
    """Raised when a session setup or teardown step exits unsuccessfully."""

    def __init__(self, step: str, returncode: int, stderr: str) -> None:
        self.step = step
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(
            f"Test session {step} exited with status {returncode}.",
            remediation=stderr.strip() or None,
        )


class NotDescendantError(UnitrunError, ValueError):
    """Raised when a path is transposed out of a root it does not belong to."""

    def __init__(self, path: str, root: str) -> None:
        self.path = path
        self.root = root
        super().__init__(f"Path '{path}' is not a descendant of '{root}'.")


class ReportParseError(UnitrunError):
    """Raised when a JUnit or Clover report cannot be interpreted."""


class UnexpectedCoverageValueError(ReportParseError):
    """Raised when a Clover ``count`` attribute is not a non-negative integer."""


class ManifestError(UnitrunError, ValueError):
    """Raised when a lock file or installed manifest is malformed."""


class ConfigError(Exception):
    """Raised when configuration input cannot be validated."""


__all__ = [
    "BinaryNotFoundError",
    "ConfigError",
    "ConfigPathError",
    "CoverageEngineMisconfiguredError",
    "CoverageEngineMissingError",
    "ManifestError",
    "NoTestsError",
    "NotDescendantError",
    "ReportParseError",
    "SessionError",
    "UnexpectedCoverageValueError",
    "UnitrunError",
    "UsageError",
]
