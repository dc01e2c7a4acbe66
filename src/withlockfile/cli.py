"""withlockfile CLI: run a command while holding a lock file."""

from pathlib import Path

import typer

from withlockfile import __version__

from .constants import LOCK_RETRY_ATTEMPTS, LOCK_RETRY_INTERVAL, USAGE
from .core import orchestrator
from .logging import configure_logging
from .models import LockSettings
from .output import GENERIC_EXIT_CODE, OutputContext


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"withlockfile {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="withlockfile",
    help="Run a command while holding an exclusive lock on a lock file",
    add_completion=False,
)


@app.command(
    context_settings={
        # Everything after the lock file belongs to the command
        "allow_interspersed_args": False,
        "ignore_unknown_options": True,
    },
)
def main(
    lockfile: str | None = typer.Argument(None, help="Lock file path (created if missing)"),
    command: list[str] | None = typer.Argument(None, help="Command and its arguments"),
    attempts: int = typer.Option(
        LOCK_RETRY_ATTEMPTS,
        "--attempts",
        "-n",
        min=1,
        help="Lock attempts before giving up",
    ),
    interval: float = typer.Option(
        LOCK_RETRY_INTERVAL,
        "--interval",
        "-i",
        min=0,
        help="Seconds between lock attempts",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only log errors",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Run COMMAND while holding an exclusive lock on LOCKFILE.

    Only one command per lock file runs at a time on this host. The exit
    code is the command's own exit code.
    """
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
        debug=debug,
    )
    ctx = OutputContext(console=console)

    if not lockfile or not command:
        ctx.print(USAGE)
        raise typer.Exit(GENERIC_EXIT_CODE)

    result = orchestrator.run(
        Path(lockfile),
        command[0],
        command[1:],
        LockSettings(attempts=attempts, interval=interval),
    )
    raise typer.Exit(ctx.report(result))
