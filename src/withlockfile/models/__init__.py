"""Pydantic data models for withlockfile.

This package defines the data structures shared by the lock, the
supervisor and the reporter:
- Lock state and retry policy (LockState, LockSettings)
- The command to run and its child lifecycle (Command, ChildState)
- Classified failures and the final outcome (FailureRecord, RunResult)

Example:
    >>> from withlockfile.models import Command
    >>> Command(executable="/bin/echo", args=("hello world",)).command_line
    '/bin/echo "hello world"'
"""

from .command import Command, quote_argument
from .failure import FailureKind, FailureRecord
from .lock import LockSettings, LockState
from .process import ChildState
from .result import RunResult

__all__ = [
    "ChildState",
    "Command",
    "FailureKind",
    "FailureRecord",
    "LockSettings",
    "LockState",
    "RunResult",
    "quote_argument",
]
