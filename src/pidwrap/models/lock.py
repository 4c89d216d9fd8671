"""Lock record model for single-instance launches.

A lock record is a PID file stored at a path derived from the logical
command's key. The first line is the owning launcher's process ID as
decimal text. Once the command has started, a second line holds the
command's process group, so the lock outlives a launcher killed without
the chance to clean up.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class Liveness(str, Enum):
    """Result of probing whether a recorded PID names a running process."""

    ALIVE = "alive"
    DEAD = "dead"
    UNKNOWN = "unknown"  # Probe inconclusive; callers treat as alive


class LockRecord(BaseModel):
    """PID file asserting that a logical command is running.

    Attributes:
        key: Identifier of the logical command.
        owner_pid: Process ID of the lock holder, None if the file is unreadable.
        path: Location of the PID file.
        child_pgid: Process group of the supervised command, once started.
        modified_at: File modification time, when known.
    """

    key: str = Field(description="Logical command identifier")
    owner_pid: int | None = Field(default=None, description="Process ID holding the lock")
    child_pgid: int | None = Field(
        default=None, description="Process group of the supervised command"
    )
    path: Path = Field(description="PID file location")
    modified_at: datetime | None = Field(default=None, description="PID file mtime")

    @staticmethod
    def parse_pid(content: str) -> int | None:
        """Parse one PID field, returning None unless it is a positive integer."""
        text = content.strip()
        if not text.isdigit():
            return None
        pid = int(text)
        return pid if pid > 0 else None

    @classmethod
    def parse_record(cls, content: str) -> tuple[int | None, int | None]:
        """Parse PID file contents into (owner_pid, child_pgid).

        A record whose first line is not a PID is unreadable: (None, None).
        """
        lines = content.strip().splitlines()
        if not lines or len(lines) > 2:
            return None, None
        owner_pid = cls.parse_pid(lines[0])
        if owner_pid is None:
            return None, None
        child_pgid = cls.parse_pid(lines[1]) if len(lines) == 2 else None
        return owner_pid, child_pgid

    @staticmethod
    def format_pid(pid: int) -> str:
        """Render one line of a PID file."""
        return f"{pid}\n"

    def age_seconds(self, now: datetime | None = None) -> float | None:
        """Seconds since the record was last written, None if unknown."""
        if self.modified_at is None:
            return None
        now = now or datetime.now()
        return max((now - self.modified_at).total_seconds(), 0.0)
