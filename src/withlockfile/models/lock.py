"""Lock models for cross-process command serialisation."""

from enum import Enum

from pydantic import BaseModel, Field

from ..constants import LOCK_RETRY_ATTEMPTS, LOCK_RETRY_INTERVAL


class LockState(str, Enum):
    """State of a lock handle."""

    UNLOCKED = "unlocked"
    LOCKED = "locked"


class LockSettings(BaseModel):
    """Retry policy for lock acquisition.

    Attributes:
        attempts: Maximum number of non-blocking lock attempts.
        interval: Seconds to sleep between attempts.
    """

    attempts: int = Field(default=LOCK_RETRY_ATTEMPTS, ge=1, description="Lock attempts")
    interval: float = Field(
        default=LOCK_RETRY_INTERVAL, ge=0, description="Seconds between attempts"
    )

    @property
    def ceiling(self) -> float:
        """Longest time acquisition may wait, in seconds."""
        return self.attempts * self.interval
