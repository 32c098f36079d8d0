# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Setup and teardown wrapping for serial test sessions."""

from __future__ import annotations

import time
from collections.abc import Iterator, Sequence
from contextlib import contextmanager

from ..errors import SessionError
from ..logging import fail, info, ok
from ..process import SPAWN_FAILURE_RETURNCODE, CommandOptions, RunnerCallable


def run_session_step(
    step: str,
    command: Sequence[str],
    *,
    runner: RunnerCallable,
    options: CommandOptions | None = None,
    use_emoji: bool = True,
) -> None:
    """Run one session step and raise :class:`SessionError` when it fails.

    Args:
        step: Human readable step name (``setup`` or ``teardown``).
        command: Command to execute.
        runner: Process runner.
        options: Execution options shared with the test processes.
        use_emoji: Whether console messages may include emoji.

    Raises:
        SessionError: If the command cannot be spawned or exits non-zero.
    """

    started = time.monotonic()
    try:
        completed = runner(list(command), options=options)
    except OSError as exc:
        raise SessionError(step, SPAWN_FAILURE_RETURNCODE, str(exc)) from exc
    if completed.returncode != 0:
        raise SessionError(step, completed.returncode, completed.stderr or "")
    ok(f"Test environment {step} completed in {time.monotonic() - started:.2f}s", use_emoji=use_emoji)


@contextmanager
def environment_session(
    setup: Sequence[str],
    teardown: Sequence[str],
    *,
    runner: RunnerCallable,
    options: CommandOptions | None = None,
    use_emoji: bool = True,
) -> Iterator[None]:
    """Run ``setup`` before the body and ``teardown`` after it, always.

    Teardown runs even when setup or the body fails. When both the body and
    teardown fail, the body's exception propagates with the teardown failure
    attached as a note; a teardown failure after a clean body is raised.

    Args:
        setup: Setup command.
        teardown: Teardown command.
        runner: Process runner.
        options: Execution options for both steps.
        use_emoji: Whether console messages may include emoji.

    Yields:
        None: Control returns to the caller between setup and teardown.
    """

    info("Starting test environment setup...", use_emoji=use_emoji)
    try:
        run_session_step("setup", setup, runner=runner, options=options, use_emoji=use_emoji)
        yield
    except BaseException as body_error:
        info("Tearing down test environment...", use_emoji=use_emoji)
        try:
            run_session_step("teardown", teardown, runner=runner, options=options, use_emoji=use_emoji)
        except SessionError as teardown_error:
            fail(str(teardown_error), use_emoji=use_emoji)
            body_error.add_note(f"teardown also failed: {teardown_error.message}")
        raise
    else:
        info("Tearing down test environment...", use_emoji=use_emoji)
        run_session_step("teardown", teardown, runner=runner, options=options, use_emoji=use_emoji)


__all__ = ["environment_session", "run_session_step"]
