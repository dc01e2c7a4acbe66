"""Child process lifecycle states."""

from enum import Enum


class ChildState(str, Enum):
    """Lifecycle of a supervised child.

    A child moves strictly forward: created (suspended) -> group_attached
    -> running -> exited.
    """

    CREATED = "created"
    GROUP_ATTACHED = "group_attached"
    RUNNING = "running"
    EXITED = "exited"
