"""Lock manager for cross-process command serialisation.

Provides an exclusive advisory lock on a lock file, shared by every
withlockfile invocation on the host. The file is a pure token: it is
created empty if missing and its content is never read or written.

Acquisition is non-blocking per attempt; contention is retried after a
fixed interval up to a fixed number of attempts. Any other failure is
fatal on the spot.
"""

import contextlib
import errno
import logging
import os
import sys
import time
from collections.abc import Callable, Iterator
from pathlib import Path

from ..constants import ERROR_LOCK_VIOLATION, LOCK_RANGE_LENGTH, LOCK_RANGE_OFFSET
from ..errors import LockContentionError, LockTimeoutError, OsResourceError
from ..models import LockSettings, LockState

logger = logging.getLogger(__name__)

# New lock files are created without write permission bits
LOCK_FILE_MODE = 0o444


class LockHandle:
    """Open reference to a lock file plus its lock state."""

    def __init__(self, path: Path, fd: int) -> None:
        self.path = path
        self.fd = fd
        self.state = LockState.UNLOCKED
        self.closed = False

    @property
    def locked(self) -> bool:
        return self.state is LockState.LOCKED

    def __repr__(self) -> str:
        return f"LockHandle(path={str(self.path)!r}, fd={self.fd}, state={self.state.value})"


class _PosixBackend:
    """flock() on the whole file; works on read-only descriptors."""

    contention_errnos = frozenset({errno.EAGAIN, errno.EWOULDBLOCK, errno.EACCES})
    timeout_code = errno.EWOULDBLOCK

    def try_lock(self, fd: int) -> None:
        import fcntl

        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)

    def unlock(self, fd: int) -> None:
        import fcntl

        fcntl.flock(fd, fcntl.LOCK_UN)


class _WindowsBackend:
    """msvcrt.locking() on the locked byte range."""

    contention_errnos = frozenset({errno.EACCES, errno.EDEADLOCK})
    timeout_code = ERROR_LOCK_VIOLATION

    def try_lock(self, fd: int) -> None:
        import msvcrt

        os.lseek(fd, LOCK_RANGE_OFFSET, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_NBLCK, LOCK_RANGE_LENGTH)

    def unlock(self, fd: int) -> None:
        import msvcrt

        os.lseek(fd, LOCK_RANGE_OFFSET, os.SEEK_SET)
        msvcrt.locking(fd, msvcrt.LK_UNLCK, LOCK_RANGE_LENGTH)


def _default_backend() -> _PosixBackend | _WindowsBackend:
    if sys.platform == "win32":
        return _WindowsBackend()
    return _PosixBackend()


BACKEND = _default_backend()


def open_lock_file(path: Path) -> LockHandle:
    """Open the lock file, creating it if it does not exist.

    The file is opened for reading only, so concurrent openers never
    block each other here; they only contend when locking.

    Args:
        path: Path to the lock file

    Returns:
        Unlocked LockHandle

    Raises:
        OsResourceError: If the file cannot be created or opened
    """
    flags = os.O_RDONLY | os.O_CREAT | getattr(os, "O_BINARY", 0)
    try:
        fd = os.open(path, flags, LOCK_FILE_MODE)
    except OSError as e:
        raise OsResourceError.from_os_error("open", e) from e
    logger.debug(f"Opened lock file {path} (fd {fd})")
    return LockHandle(path, fd)


def try_acquire(handle: LockHandle) -> None:
    """Make a single non-blocking attempt to lock the handle.

    Raises:
        LockContentionError: If another holder currently owns the lock
        OsResourceError: For any other locking failure
    """
    try:
        BACKEND.try_lock(handle.fd)
    except OSError as e:
        if e.errno in BACKEND.contention_errnos:
            raise LockContentionError(e.errno) from e
        raise OsResourceError.from_os_error("lock", e) from e
    handle.state = LockState.LOCKED


def acquire(
    handle: LockHandle,
    settings: LockSettings | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Acquire the exclusive lock, retrying while it is contended.

    Args:
        handle: Open lock handle
        settings: Retry policy (default: 300 attempts, 1 second apart)
        sleep: Sleep function used between attempts

    Raises:
        LockTimeoutError: If the lock was busy on every attempt
        OsResourceError: If locking failed for any reason other than contention
    """
    settings = settings or LockSettings()

    for attempt in range(1, settings.attempts + 1):
        try:
            try_acquire(handle)
        except LockContentionError:
            logger.info(
                f"Lock {handle.path} is held by another process "
                f"(attempt {attempt}/{settings.attempts})"
            )
            if attempt < settings.attempts:
                sleep(settings.interval)
            continue
        logger.debug(f"Acquired lock {handle.path} on attempt {attempt}")
        return

    logger.info(f"Giving up on lock {handle.path} after {settings.attempts} attempts")
    raise LockTimeoutError(BACKEND.timeout_code, settings.attempts)


def release(handle: LockHandle) -> None:
    """Unlock the handle if locked, then close it.

    The descriptor is closed even when unlocking fails.

    Raises:
        OsResourceError: If unlocking or closing fails
    """
    try:
        if handle.locked:
            try:
                BACKEND.unlock(handle.fd)
            except OSError as e:
                raise OsResourceError.from_os_error("unlock", e) from e
            handle.state = LockState.UNLOCKED
            logger.debug(f"Released lock {handle.path}")
    finally:
        close(handle)


def close(handle: LockHandle) -> None:
    """Close the handle's descriptor once.

    Raises:
        OsResourceError: If the descriptor cannot be closed
    """
    if handle.closed:
        return
    handle.closed = True
    try:
        os.close(handle.fd)
    except OSError as e:
        raise OsResourceError.from_os_error("close", e) from e


@contextlib.contextmanager
def locked(path: Path, settings: LockSettings | None = None) -> Iterator[LockHandle]:
    """Hold the lock on ``path`` for the duration of the block."""
    handle = open_lock_file(path)
    try:
        acquire(handle, settings)
        yield handle
    finally:
        release(handle)
