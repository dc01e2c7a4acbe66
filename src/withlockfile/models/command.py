"""Command model: the resolved executable plus its arguments."""

from pydantic import BaseModel, ConfigDict, Field


def quote_argument(arg: str) -> str:
    """Wrap an argument in double quotes if it contains whitespace.

    Embedded double quotes are not escaped.
    """
    if " " in arg or "\t" in arg:
        return f'"{arg}"'
    return arg


class Command(BaseModel):
    """Immutable command to run under the lock.

    Attributes:
        executable: Fully qualified path of the program.
        args: Arguments passed after the program, in invocation order.
    """

    model_config = ConfigDict(frozen=True)

    executable: str = Field(description="Absolute path of the executable")
    args: tuple[str, ...] = Field(default=(), description="Caller supplied arguments")

    @property
    def argv(self) -> list[str]:
        """Argument vector including the executable."""
        return [self.executable, *self.args]

    @property
    def command_line(self) -> str:
        """Single quoted command line string."""
        return " ".join(quote_argument(part) for part in self.argv)
