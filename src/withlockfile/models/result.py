"""Outcome of one withlockfile invocation."""

from pydantic import BaseModel, Field, model_validator

from .failure import FailureRecord


class RunResult(BaseModel):
    """Either the child's exit code or the failure that aborted the run."""

    exit_code: int | None = Field(default=None, description="Child exit code")
    failure: FailureRecord | None = Field(default=None, description="Fatal failure")

    @model_validator(mode="after")
    def _exactly_one(self) -> "RunResult":
        if (self.exit_code is None) == (self.failure is None):
            raise ValueError("RunResult needs exactly one of exit_code or failure")
        return self

    @property
    def ok(self) -> bool:
        """True if the command ran to completion."""
        return self.failure is None
