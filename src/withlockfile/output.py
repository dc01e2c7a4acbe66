"""Diagnostics and exit codes for withlockfile."""

from dataclasses import dataclass

from rich.console import Console

from .models import FailureKind, FailureRecord, RunResult

# Exit code for failures that carry no OS error code
GENERIC_EXIT_CODE = 1


def format_failure(record: FailureRecord) -> str:
    """Render a failure as a single diagnostic line.

    OS failures: ``error: <operation> failed: <message> (code <N>)``.
    Anything else: ``error: <message>``.
    """
    if record.is_os_failure:
        operation = record.operation or "operation"
        return f"error: {operation} failed: {record.message} (code {record.code})"
    return f"error: {record.message}"


def exit_code_for(result: RunResult) -> int:
    """Exit status for a run: the child's code, the OS code, or 1."""
    if result.failure is None:
        assert result.exit_code is not None
        return result.exit_code
    if result.failure.is_os_failure:
        assert result.failure.code is not None
        return result.failure.code
    return GENERIC_EXIT_CODE


@dataclass
class OutputContext:
    """Writes withlockfile's own messages to stderr."""

    console: Console

    def print(self, message: str, style: str | None = None) -> None:
        """Print a message verbatim (no markup or highlighting)."""
        self.console.print(message, style=style, markup=False, highlight=False, soft_wrap=True)

    def error(self, record: FailureRecord) -> None:
        """Print a failure diagnostic."""
        style = "yellow" if record.kind is FailureKind.LOCK_TIMEOUT else "red"
        self.print(format_failure(record), style=style)

    def report(self, result: RunResult) -> int:
        """Report a run's failure, if any, and return the process exit code."""
        if result.failure is not None:
            self.error(result.failure)
        return exit_code_for(result)
