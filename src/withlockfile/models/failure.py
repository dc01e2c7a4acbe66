"""Failure model shared by every withlockfile component.

A FailureRecord is created where an operation fails and travels unchanged
to the reporter, which turns it into a diagnostic line and an exit code.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FailureKind(str, Enum):
    """Classification of a failure."""

    LOCK_CONTENTION = "lock_contention"
    LOCK_TIMEOUT = "lock_timeout"
    OS_ERROR = "os_error"
    GENERIC = "generic"


class FailureRecord(BaseModel):
    """A classified failure.

    Attributes:
        kind: Failure classification.
        operation: Name of the operation that failed (OS failures only).
        code: Numeric OS error code, if any.
        message: Human readable description.
    """

    model_config = ConfigDict(frozen=True)

    kind: FailureKind = Field(description="Failure classification")
    operation: str | None = Field(default=None, description="Operation that failed")
    code: int | None = Field(default=None, description="OS error code")
    message: str = Field(default="", description="Human readable message")

    @property
    def is_os_failure(self) -> bool:
        """True if the failure originated from an OS call."""
        return self.kind is not FailureKind.GENERIC and self.code is not None
