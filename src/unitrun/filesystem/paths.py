# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Pure path arithmetic between mirrored source and test roots.

Every helper in this module works on path strings and never touches the
filesystem beyond reading the current working directory, so paths that were
deleted (or never existed) can still be mapped. Backslash separators are
normalised to forward slashes first, which keeps Windows-style inputs usable
on POSIX hosts.
"""

from __future__ import annotations

import posixpath
import re
from functools import lru_cache
from os import PathLike
from pathlib import Path
from typing import Final

from ..errors import NotDescendantError

_Pathish = str | PathLike[str] | Path
_DRIVE_PATTERN: Final[re.Pattern[str]] = re.compile(r"^[A-Za-z]:(/|$)")
_PARENT: Final[str] = ".."
_DEFAULT_CACHE_SIZE: Final[int] = 1024


def _to_posix(path: _Pathish) -> str:
    """Return ``path`` as a string with forward slash separators."""

    return str(path).replace("\\", "/")


def _segments(path: str) -> list[str]:
    return [segment for segment in path.split("/") if segment and segment != "."]


@lru_cache(maxsize=_DEFAULT_CACHE_SIZE)
def _absolute(path: str, cwd: str) -> str:
    """Return ``path`` made absolute against ``cwd`` and lexically normalised.

    Args:
        path: Forward-slash path, absolute or relative.
        cwd: Forward-slash working directory used for relative inputs.

    Returns:
        str: Normalised absolute path without a trailing separator.
    """

    if not (path.startswith("/") or _DRIVE_PATTERN.match(path)):
        path = f"{cwd.rstrip('/')}/{path}"
    normalised = posixpath.normpath(path)
    return normalised.replace("//", "/") if normalised.startswith("//") else normalised


def _resolve(path: _Pathish) -> str:
    return _absolute(_to_posix(path), Path.cwd().as_posix())


def relative_path(from_path: _Pathish, to_path: _Pathish) -> str:
    """Return the relative location of ``to_path`` as seen from ``from_path``.

    ``from_path`` is treated as a directory. The common leading segments are
    skipped, one ``..`` is emitted for every remaining ``from_path`` segment,
    then the remaining ``to_path`` segments follow.

    Args:
        from_path: Directory the result is relative to.
        to_path: Target path.

    Returns:
        str: Forward-slash relative path, or ``""`` when both paths are equal.
    """

    source = _segments(_to_posix(from_path))
    target = _segments(_to_posix(to_path))
    common = 0
    for left, right in zip(source, target):
        if left != right:
            break
        common += 1
    parts = [_PARENT] * (len(source) - common) + target[common:]
    return "/".join(parts)


def is_descendant(path: _Pathish, root: _Pathish) -> bool:
    """Return whether ``path`` lies within ``root`` (or is ``root`` itself).

    Args:
        path: Candidate child path, absolute or relative to the working directory.
        root: Root directory, absolute or relative to the working directory.

    Returns:
        bool: ``False`` when the relative path from ``root`` starts by leaving it.
    """

    relative = relative_path(_resolve(root), _resolve(path))
    return relative.split("/", 1)[0] != _PARENT


def transpose_path(path: _Pathish, from_root: _Pathish, to_root: _Pathish) -> str:
    """Move ``path`` from ``from_root`` onto the mirrored ``to_root``.

    Args:
        path: Path that must be a descendant of ``from_root``.
        from_root: Root the path currently lives under.
        to_root: Root receiving the mirrored path.

    Returns:
        str: ``to_root`` verbatim when ``path`` is ``from_root`` itself, otherwise
        ``to_root`` joined with the relative remainder.

    Raises:
        NotDescendantError: If ``path`` is outside ``from_root``.
    """

    if not is_descendant(path, from_root):
        raise NotDescendantError(str(path), str(from_root))
    relative = relative_path(_resolve(from_root), _resolve(path))
    if not relative:
        return str(to_root)
    return f"{str(to_root).rstrip('/')}/{relative}"


def readable_path(path: _Pathish, root: _Pathish) -> str:
    """Return ``path`` relative to ``root`` when contained, else unchanged.

    Args:
        path: Absolute or relative path to display.
        root: Project root used as the anchor.

    Returns:
        str: Relative forward-slash path inside ``root``, or the original path.
    """

    if not is_descendant(path, root):
        return _to_posix(path)
    return relative_path(_resolve(root), _resolve(path))


def normalize_root(path: _Pathish, *, base_dir: _Pathish | None = None) -> str:
    """Return ``path`` as an absolute root with exactly one trailing separator.

    Args:
        path: Root directory, absolute or relative to ``base_dir``.
        base_dir: Anchor for relative roots. Defaults to the working directory.

    Returns:
        str: Absolute forward-slash path ending with ``/``.
    """

    base = _to_posix(base_dir) if base_dir is not None else Path.cwd().as_posix()
    absolute = _absolute(_to_posix(path), _absolute(base, Path.cwd().as_posix()))
    return absolute.rstrip("/") + "/"


__all__ = ["is_descendant", "normalize_root", "readable_path", "relative_path", "transpose_path"]
