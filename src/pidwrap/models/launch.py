"""Launch result model.

Distinguishes a suppressed duplicate launch from a command that ran,
even when both map to exit code 0 on the command line.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class LaunchOutcome(str, Enum):
    """What a launch attempt did."""

    RAN = "ran"
    DUPLICATE = "duplicate"


class LaunchResult(BaseModel):
    """Outcome of a single launch attempt.

    Attributes:
        outcome: Whether the command ran or was suppressed.
        key: Logical command identifier.
        lock_path: PID file that guarded the launch.
        exit_code: Exit status of the command when it ran.
        owner_pid: Live competing owner when suppressed as a duplicate.
    """

    outcome: LaunchOutcome
    key: str
    lock_path: Path
    exit_code: int | None = Field(default=None, description="Command exit status")
    owner_pid: int | None = Field(default=None, description="Competing owner PID")

    @property
    def duplicate(self) -> bool:
        """True if the launch was suppressed because another instance is alive."""
        return self.outcome == LaunchOutcome.DUPLICATE

    def to_exit_code(self, duplicate_exit_code: int = 0) -> int:
        """Map the result to a process exit status."""
        if self.duplicate:
            return duplicate_exit_code
        return self.exit_code if self.exit_code is not None else 0
