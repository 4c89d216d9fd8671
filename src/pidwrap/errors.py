"""Custom errors for pidwrap."""


class PidwrapError(Exception):
    """Base pidwrap exception."""


class ConfigError(PidwrapError):
    """Raised when the configuration file is invalid."""


class LockError(PidwrapError):
    """Error acquiring or managing a lock."""


class LockPathError(LockError):
    """Raised when the lock file or its directory cannot be written."""


class LockHeldError(LockError):
    """Raised when a live (or unconfirmed) process already holds the lock."""

    def __init__(self, key: str, owner_pid: int | None) -> None:
        self.key = key
        self.owner_pid = owner_pid
        owner = f"PID {owner_pid}" if owner_pid is not None else "an unreadable record"
        super().__init__(f"'{key}' is already running ({owner})")


class LaunchError(PidwrapError):
    """Raised when the command to supervise cannot be started."""
