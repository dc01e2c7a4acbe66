"""Core lock and supervision logic for withlockfile.

This package contains the components that run a command under a lock:
- lock_manager: cross-process exclusive lock with bounded retry
- command_builder: executable resolution and command line quoting
- supervisor: suspended launch inside a kill-on-release process group
- orchestrator: the full lock -> run -> unlock sequence
"""

from .command_builder import build_command, build_command_line, resolve_executable
from .lock_manager import LockHandle, acquire, locked, open_lock_file, release
from .orchestrator import run
from .supervisor import supervise

__all__ = [
    "LockHandle",
    "acquire",
    "build_command",
    "build_command_line",
    "locked",
    "open_lock_file",
    "release",
    "resolve_executable",
    "run",
    "supervise",
]
