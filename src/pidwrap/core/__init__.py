"""Core logic for pidwrap.

- lock_manager: PID-file locks, liveness probes, stale reclaim
- guard: flock serialising launchers sharing a lock directory
- supervisor: running the wrapped command and relaying signals to it
- launcher: the single-instance launch operation
"""

from .launcher import launch
from .lock_manager import (
    acquire_lock,
    clean_stale_locks,
    derive_key,
    held_lock,
    is_stale,
    list_locks,
    lock_path_for,
    probe_group,
    probe_pid,
    read_lock,
    record_child_group,
    record_state,
    release_lock,
)
from .supervisor import Supervisor, exit_status, run_supervised

__all__ = [
    "Supervisor",
    "acquire_lock",
    "clean_stale_locks",
    "derive_key",
    "exit_status",
    "held_lock",
    "is_stale",
    "launch",
    "list_locks",
    "lock_path_for",
    "probe_group",
    "probe_pid",
    "read_lock",
    "record_child_group",
    "record_state",
    "release_lock",
    "run_supervised",
]
