"""Command building: executable resolution and command line quoting."""

import errno
import logging
import os
import shutil
import sys

from ..errors import OsResourceError
from ..models import Command, quote_argument

logger = logging.getLogger(__name__)

# Extension every executable carries on this platform
EXECUTABLE_EXTENSION = ".exe" if sys.platform == "win32" else ""


def enforce_extension(name: str, extension: str = EXECUTABLE_EXTENSION) -> str:
    """Append the executable extension unless already present (case-insensitive)."""
    if extension and not name.lower().endswith(extension.lower()):
        return name + extension
    return name


def resolve_executable(name: str, path: str | None = None) -> str:
    """Resolve a command name to a fully qualified executable path.

    Args:
        name: Command name as given on the command line
        path: Search path (default: the PATH environment variable)

    Returns:
        Absolute path of the executable

    Raises:
        OsResourceError: If no matching executable is found
    """
    executable = enforce_extension(name, EXECUTABLE_EXTENSION)
    found = shutil.which(executable, path=path)
    if found is None:
        raise OsResourceError(
            "resolve executable",
            errno.ENOENT,
            f"{os.strerror(errno.ENOENT)}: {executable}",
        )
    resolved = os.path.abspath(found)
    logger.debug(f"Resolved {name} to {resolved}")
    return resolved


def build_command_line(executable: str, args: list[str] | tuple[str, ...]) -> str:
    """Quote the executable and each argument and join them with spaces."""
    return " ".join([quote_argument(executable), *(quote_argument(a) for a in args)])


def build_command(name: str, args: list[str] | tuple[str, ...] = ()) -> Command:
    """Resolve ``name`` and bundle it with ``args`` into a Command."""
    command = Command(executable=resolve_executable(name), args=tuple(args))
    logger.info(f"Command line: {command.command_line}")
    return command
