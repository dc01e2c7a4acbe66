"""Tests for the withlockfile error taxonomy."""

import errno
import os

from withlockfile.errors import (
    GenericError,
    LockContentionError,
    LockTimeoutError,
    OsResourceError,
    describe_error,
)
from withlockfile.models import FailureKind


class TestOsResourceError:
    """Tests for OsResourceError construction."""

    def test_carries_operation_code_and_message(self) -> None:
        """The record names the operation and the OS error."""
        error = OsResourceError("open", errno.EACCES)
        assert error.record.kind is FailureKind.OS_ERROR
        assert error.record.operation == "open"
        assert error.record.code == errno.EACCES
        assert error.record.message == os.strerror(errno.EACCES)

    def test_from_os_error_uses_errno_and_strerror(self) -> None:
        """from_os_error copies errno and strerror."""
        error = OsResourceError.from_os_error(
            "unlock", OSError(errno.EBADF, "Bad file descriptor")
        )
        assert error.record.code == errno.EBADF
        assert error.record.message == "Bad file descriptor"

    def test_from_os_error_without_errno_falls_back_to_eio(self) -> None:
        """An OSError without errno still yields a nonzero code."""
        error = OsResourceError.from_os_error("wait", OSError("mystery"))
        assert error.record.code == errno.EIO


def test_lock_timeout_is_distinct_from_os_error():
    error = LockTimeoutError(errno.EWOULDBLOCK, attempts=300)
    assert error.record.kind is FailureKind.LOCK_TIMEOUT
    assert error.record.operation == "lock"
    assert error.record.code == errno.EWOULDBLOCK
    assert error.record.message == describe_error(errno.EWOULDBLOCK)
    assert error.attempts == 300


def test_lock_contention_record():
    error = LockContentionError(errno.EAGAIN)
    assert error.record.kind is FailureKind.LOCK_CONTENTION


def test_generic_error_has_no_code():
    error = GenericError("something odd")
    assert error.record.kind is FailureKind.GENERIC
    assert error.record.code is None
    assert str(error) == "something odd"


def test_describe_error_has_no_trailing_newline():
    assert not describe_error(errno.ENOENT).endswith("\n")
