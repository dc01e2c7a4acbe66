"""Orchestrator: runs one command under the lock file.

Sequence: open lock file -> acquire -> build command -> supervise
(launch, group, attach, resume, wait) -> release -> close. Once the lock
file is open it is released and closed on every path, and a failure
during that cleanup is reported even when an earlier step already failed.
"""

import logging
from pathlib import Path

from ..errors import GenericError, WithLockFileError
from ..models import LockSettings, RunResult
from . import command_builder, lock_manager, supervisor

logger = logging.getLogger(__name__)


def run(
    lock_path: Path,
    command_name: str,
    args: list[str] | tuple[str, ...] = (),
    settings: LockSettings | None = None,
) -> RunResult:
    """Run ``command_name args...`` while holding the lock on ``lock_path``.

    Args:
        lock_path: Lock file path, created if missing
        command_name: Program to run, resolved against PATH
        args: Arguments passed to the program unchanged
        settings: Lock retry policy

    Returns:
        RunResult with the child's exit code, or the failure that aborted the run
    """
    if not command_name:
        return RunResult(failure=GenericError("empty command name").record)

    try:
        handle = lock_manager.open_lock_file(lock_path)
    except WithLockFileError as e:
        return RunResult(failure=e.record)

    result: RunResult
    try:
        lock_manager.acquire(handle, settings)
        logger.info(f"Holding lock {lock_path}")
        command = command_builder.build_command(command_name, args)
        result = RunResult(exit_code=supervisor.supervise(command))
    except WithLockFileError as e:
        result = RunResult(failure=e.record)
    except BaseException:
        # Interrupted (e.g. KeyboardInterrupt): still give the lock back
        lock_manager.release(handle)
        raise

    try:
        lock_manager.release(handle)
    except WithLockFileError as e:
        if result.failure is not None:
            logger.error(f"Earlier failure superseded by cleanup failure: {result.failure.message}")
        return RunResult(failure=e.record)

    return result
