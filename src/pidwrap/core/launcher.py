"""Single-instance launch: run a command unless another instance is alive."""

import contextlib
import logging
import signal
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from ..config import default_lock_dir
from ..constants import UNREADABLE_GRACE_SECONDS
from ..errors import LaunchError, LockHeldError
from ..models import LaunchOutcome, LaunchResult
from .lock_manager import derive_key, held_lock, lock_path_for, record_child_group
from .supervisor import Supervisor

logger = logging.getLogger(__name__)


def launch(
    command: Sequence[str],
    key: str | None = None,
    lock_dir: Path | None = None,
    grace_seconds: float = UNREADABLE_GRACE_SECONDS,
    forward_signals: Iterable[signal.Signals] | None = None,
) -> LaunchResult:
    """Run command unless a live process already holds the lock for key.

    A duplicate launch is not an error: it returns a result with outcome
    DUPLICATE and the command is not started. Otherwise the lock is held for
    the lifetime of the command and released however the command ends.

    Args:
        command: Program and arguments
        key: Logical command identifier (derived from sys.argv[0] if omitted)
        lock_dir: Directory holding lock records (per-user temp dir if omitted)
        grace_seconds: Age below which an unreadable record is still honored
        forward_signals: Signals relayed to the command

    Returns:
        LaunchResult describing what happened

    Raises:
        LaunchError: If command is empty
        LockPathError: If the lock record cannot be written
        LockError: If the key is invalid
    """
    argv = list(command)
    if not argv:
        raise LaunchError("No command given")
    if key is None:
        key = derive_key(sys.argv[0])
    if lock_dir is None:
        lock_dir = default_lock_dir()
    lock_path = lock_path_for(key, lock_dir)

    with contextlib.ExitStack() as stack:
        supervisor = stack.enter_context(Supervisor(forward_signals))
        try:
            with supervisor.deferring():
                stack.enter_context(held_lock(key, lock_dir, grace_seconds))
        except LockHeldError as e:
            owner = f"PID {e.owner_pid}" if e.owner_pid is not None else "unreadable record"
            logger.info(f"'{key}' is already running ({owner}); not starting another instance")
            return LaunchResult(
                outcome=LaunchOutcome.DUPLICATE,
                key=key,
                lock_path=lock_path,
                owner_pid=e.owner_pid,
            )
        exit_code = supervisor.run(
            argv, on_start=lambda proc: record_child_group(key, lock_dir, proc.pid)
        )

    return LaunchResult(
        outcome=LaunchOutcome.RAN,
        key=key,
        lock_path=lock_path,
        exit_code=exit_code,
    )
