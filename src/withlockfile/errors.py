"""Custom errors for withlockfile.

Every error carries the FailureRecord describing it, so the record built
at the point of failure is what eventually gets reported.
"""

import errno
import os
import sys

from .models import FailureKind, FailureRecord


def describe_error(code: int) -> str:
    """Return the OS message for an error code, without trailing newline."""
    if sys.platform == "win32":
        import ctypes

        return ctypes.FormatError(code).rstrip("\r\n")
    return os.strerror(code).rstrip("\r\n")


class WithLockFileError(Exception):
    """Base withlockfile exception."""

    def __init__(self, record: FailureRecord) -> None:
        super().__init__(record.message)
        self.record = record


class LockContentionError(WithLockFileError):
    """Raised by a lock backend when another process holds the lock."""

    def __init__(self, code: int) -> None:
        super().__init__(
            FailureRecord(
                kind=FailureKind.LOCK_CONTENTION,
                operation="lock",
                code=code,
                message=describe_error(code),
            )
        )


class LockTimeoutError(WithLockFileError):
    """Raised when the lock stayed busy through every retry attempt."""

    def __init__(self, code: int, attempts: int) -> None:
        super().__init__(
            FailureRecord(
                kind=FailureKind.LOCK_TIMEOUT,
                operation="lock",
                code=code,
                message=describe_error(code),
            )
        )
        self.attempts = attempts


class OsResourceError(WithLockFileError):
    """Raised when an OS call fails."""

    def __init__(self, operation: str, code: int, message: str | None = None) -> None:
        super().__init__(
            FailureRecord(
                kind=FailureKind.OS_ERROR,
                operation=operation,
                code=code,
                message=message or describe_error(code),
            )
        )

    @classmethod
    def from_os_error(cls, operation: str, error: OSError) -> "OsResourceError":
        """Build from an OSError, preferring the Windows error code when set."""
        code = getattr(error, "winerror", None) or error.errno or errno.EIO
        return cls(operation, code, error.strerror or None)


class GenericError(WithLockFileError):
    """Raised for internal failures that did not come from an OS call."""

    def __init__(self, message: str) -> None:
        super().__init__(FailureRecord(kind=FailureKind.GENERIC, message=message))
