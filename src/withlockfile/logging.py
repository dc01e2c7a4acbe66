"""Logging configuration for withlockfile."""

import logging
from enum import IntEnum

from rich.console import Console
from rich.logging import RichHandler


class LogLevel(IntEnum):
    """Log level enumeration.

    The default is QUIET so that only the wrapped command's own output
    shows up unless the caller asks for more.
    """

    SILENT = logging.ERROR
    QUIET = logging.WARNING
    VERBOSE = logging.INFO
    DEBUG = logging.DEBUG


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    debug: bool = False,
) -> Console:
    """Configure logging based on CLI options.

    Args:
        verbosity: Number of -v flags (0=warnings, 1=info, 2+=debug)
        quiet: Only log errors (takes precedence over debug/verbosity)
        no_color: Disable colored output
        debug: Enable debug logging (equivalent to -vv, ignored if quiet is set)

    Returns:
        Configured Rich console writing to stderr

    Note:
        Flag precedence: quiet > debug > verbosity
    """
    if quiet:
        level = LogLevel.SILENT
    elif debug or verbosity >= 2:
        level = LogLevel.DEBUG
    elif verbosity >= 1:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.QUIET

    console = Console(stderr=True, no_color=no_color)

    handler = RichHandler(
        console=console,
        show_time=level <= logging.DEBUG,
        show_path=level <= logging.DEBUG,
    )

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    return console
