"""Advisory file lock serialising launchers that share a lock directory."""

import fcntl
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from ..errors import LockPathError


@contextmanager
def exclusive_lock(guard_path: Path) -> Iterator[None]:
    """Hold an exclusive flock on guard_path for the duration of the block.

    The guard file is never removed; unlinking a flock target lets two
    processes lock different inodes under the same name.

    Raises:
        LockPathError: If the guard file cannot be opened
    """
    try:
        handle = guard_path.open("a+", encoding="utf-8")
    except OSError as e:
        raise LockPathError(f"Cannot open guard file {guard_path}: {e}") from e
    with handle:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
