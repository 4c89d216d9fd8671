"""Lock manager for single-instance launches.

Provides PID-file locking so at most one live process holds the lock for a
given key. Includes stale lock detection for crash recovery.

Uses atomic file creation (O_CREAT | O_EXCL) as the only gate, so two
launchers can never both create the record. Stale reclaim (unlink then
recreate) runs under a per-directory flock so a launcher never unlinks a
record a competitor has just written.

Liveness checks fail closed: if a probe cannot prove the owner is dead,
the owner is treated as alive. A record whose launcher has died is still
held while the command's process group survives it.
"""

import contextlib
import hashlib
import logging
import os
import re
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from ..constants import GUARD_FILE, LOCK_SUFFIX, MAX_LOCK_RETRIES, UNREADABLE_GRACE_SECONDS
from ..errors import LockError, LockHeldError, LockPathError
from ..models import Liveness, LockRecord
from .guard import exclusive_lock

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,99}$")
_SCRIPT_SUFFIXES = (".py", ".sh")


def derive_key(name: str) -> str:
    """Derive a lock key from an invocation name.

    Args:
        name: Program path or name, e.g. sys.argv[0]

    Returns:
        Basename without a .py/.sh suffix

    Raises:
        LockError: If nothing usable remains
    """
    base = Path(name).name
    for suffix in _SCRIPT_SUFFIXES:
        if base.endswith(suffix) and len(base) > len(suffix):
            base = base[: -len(suffix)]
            break
    if not base.strip():
        raise LockError(f"Cannot derive a lock key from {name!r}")
    return base


def lock_path_for(key: str, lock_dir: Path) -> Path:
    """Get path to the lock record for key.

    Filename-safe keys map to <lock_dir>/<key>.pid. Anything else is slugged
    and suffixed with a short SHA256 of the key so distinct keys stay distinct.

    Raises:
        LockError: If key is empty
    """
    if not key or not key.strip():
        raise LockError("Lock key must not be empty")
    if _SAFE_KEY.match(key):
        name = key
    else:
        slug = re.sub(r"[^A-Za-z0-9._-]+", "-", key).strip("-.")[:50] or "key"
        digest = hashlib.sha256(key.encode()).hexdigest()[:8]
        name = f"{slug}-{digest}"
    return lock_dir / f"{name}{LOCK_SUFFIX}"


def _probe(send: Callable[[int, int], None], ident: int, what: str) -> Liveness:
    if ident <= 0:
        return Liveness.DEAD
    try:
        send(ident, 0)  # Signal 0 doesn't kill, just checks
    except ProcessLookupError:
        return Liveness.DEAD
    except PermissionError:
        # Exists, owned by another user
        return Liveness.ALIVE
    except OSError as e:
        logger.warning(f"Liveness check for {what} inconclusive ({e}); assuming alive")
        return Liveness.UNKNOWN
    return Liveness.ALIVE


def probe_pid(pid: int) -> Liveness:
    """Check if a process with given PID is running."""
    return _probe(os.kill, pid, f"PID {pid}")


def probe_group(pgid: int) -> Liveness:
    """Check if any process in process group pgid is running."""
    return _probe(os.killpg, pgid, f"process group {pgid}")


def _read_record(path: Path, key: str) -> LockRecord | None:
    """Read the record at path, None if it doesn't exist."""
    try:
        content = path.read_bytes().decode("ascii", errors="replace")
        mtime = path.stat().st_mtime
    except FileNotFoundError:
        return None
    except OSError as e:
        raise LockError(f"Cannot read lock record {path}: {e}") from e
    owner_pid, child_pgid = LockRecord.parse_record(content)
    return LockRecord(
        key=key,
        owner_pid=owner_pid,
        child_pgid=child_pgid,
        path=path,
        modified_at=datetime.fromtimestamp(mtime),
    )


def read_lock(key: str, lock_dir: Path) -> LockRecord | None:
    """Get the current lock record for key.

    Args:
        key: Logical command identifier
        lock_dir: Directory holding lock records

    Returns:
        LockRecord if a record exists (owner_pid is None when unreadable), None otherwise

    Raises:
        LockError: If the record exists but cannot be read
    """
    return _read_record(lock_path_for(key, lock_dir), key)


def is_stale(
    record: LockRecord,
    grace_seconds: float = UNREADABLE_GRACE_SECONDS,
    now: datetime | None = None,
) -> bool:
    """Check if a lock record can be reclaimed.

    A record with a PID is stale only when the PID is provably dead. A record
    without a readable PID may belong to a launcher that has created the file
    but not yet written to it, so it is honored until it is older than
    grace_seconds. A launcher killed outright leaves its command running,
    so a record naming the command's process group also needs that group
    to be gone.
    """
    if record.owner_pid is None:
        age = record.age_seconds(now)
        return age is not None and age > grace_seconds
    if probe_pid(record.owner_pid) != Liveness.DEAD:
        return False
    if record.child_pgid is None:
        return True
    return probe_group(record.child_pgid) == Liveness.DEAD


def record_state(record: LockRecord, grace_seconds: float = UNREADABLE_GRACE_SECONDS) -> str:
    """Describe a record for display: live, orphaned, stale, unknown or unreadable."""
    if record.owner_pid is None:
        return "stale" if is_stale(record, grace_seconds) else "unreadable"
    liveness = probe_pid(record.owner_pid)
    if liveness == Liveness.DEAD and record.child_pgid is not None:
        # Launcher gone, command possibly still running
        liveness = probe_group(record.child_pgid)
        if liveness == Liveness.ALIVE:
            return "orphaned"
    if liveness == Liveness.DEAD:
        return "stale"
    if liveness == Liveness.UNKNOWN:
        return "unknown"
    return "live"


def _ensure_lock_dir(lock_dir: Path) -> None:
    try:
        lock_dir.mkdir(mode=0o700, parents=True, exist_ok=True)
    except OSError as e:
        raise LockPathError(f"Cannot create lock directory {lock_dir}: {e}") from e


def _try_atomic_create(lock_path: Path, pid: int) -> bool:
    """Attempt atomic lock file creation.

    Uses O_CREAT | O_EXCL flags for atomicity - if file exists,
    open() fails immediately rather than overwriting.

    Returns:
        True if lock was created, False if file already exists

    Raises:
        LockPathError: If the file cannot be created or written
    """
    try:
        fd = os.open(str(lock_path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
    except FileExistsError:
        return False
    except OSError as e:
        raise LockPathError(f"Cannot create lock record {lock_path}: {e}") from e
    try:
        os.write(fd, LockRecord.format_pid(pid).encode())
    except OSError as e:
        with contextlib.suppress(OSError):
            lock_path.unlink()
        raise LockPathError(f"Cannot write lock record {lock_path}: {e}") from e
    finally:
        os.close(fd)
    return True


def acquire_lock(
    key: str,
    lock_dir: Path,
    grace_seconds: float = UNREADABLE_GRACE_SECONDS,
) -> LockRecord:
    """Acquire the lock for key on behalf of the current process.

    Args:
        key: Logical command identifier
        lock_dir: Directory holding lock records
        grace_seconds: Age below which an unreadable record is still honored

    Returns:
        LockRecord owned by this process

    Raises:
        LockHeldError: If a live or unconfirmed owner holds the lock
        LockPathError: If the lock directory or record cannot be written
        LockError: If the key is invalid or retries are exhausted
    """
    lock_path = lock_path_for(key, lock_dir)
    pid = os.getpid()
    _ensure_lock_dir(lock_dir)

    with exclusive_lock(lock_dir / GUARD_FILE):
        for _ in range(MAX_LOCK_RETRIES):
            if _try_atomic_create(lock_path, pid):
                logger.debug(f"Acquired lock for '{key}' at {lock_path} (PID {pid})")
                return LockRecord(
                    key=key, owner_pid=pid, path=lock_path, modified_at=datetime.now()
                )

            try:
                existing = _read_record(lock_path, key)
            except LockError as e:
                logger.warning(f"{e}; treating '{key}' as running")
                raise LockHeldError(key, None) from e

            if existing is None:
                # Removed between attempts - retry
                continue

            if existing.owner_pid == pid:
                return existing

            if not is_stale(existing, grace_seconds):
                raise LockHeldError(key, existing.owner_pid)

            owner = existing.owner_pid if existing.owner_pid is not None else "unreadable"
            logger.info(f"Reclaiming stale lock for '{key}' (owner {owner})")
            try:
                lock_path.unlink(missing_ok=True)
            except OSError as e:
                raise LockPathError(f"Cannot remove stale lock record {lock_path}: {e}") from e

    raise LockError(f"Failed to acquire lock for '{key}' after {MAX_LOCK_RETRIES} attempts")


def record_child_group(key: str, lock_dir: Path, pgid: int) -> bool:
    """Add the supervised command's process group to our lock record.

    Competitors then keep honoring the lock while that group is alive, even
    if this process is killed before it can release the lock.

    Returns:
        True if the record was updated
    """
    lock_path = lock_path_for(key, lock_dir)
    try:
        existing = _read_record(lock_path, key)
    except LockError as e:
        logger.warning(f"Cannot record process group for '{key}': {e}")
        return False
    if existing is None or existing.owner_pid != os.getpid():
        logger.warning(f"Lock for '{key}' is no longer ours; not recording process group")
        return False

    try:
        fd = os.open(str(lock_path), os.O_WRONLY | os.O_APPEND)
    except OSError as e:
        logger.warning(f"Cannot record process group for '{key}': {e}")
        return False
    try:
        os.write(fd, LockRecord.format_pid(pgid).encode())
    except OSError as e:
        logger.warning(f"Cannot record process group for '{key}': {e}")
        return False
    finally:
        os.close(fd)
    logger.debug(f"Recorded process group {pgid} for '{key}'")
    return True


def release_lock(key: str, lock_dir: Path) -> bool:
    """Release lock if owned by current process.

    Args:
        key: Logical command identifier
        lock_dir: Directory holding lock records

    Returns:
        True if the record was removed
    """
    lock_path = lock_path_for(key, lock_dir)
    try:
        existing = _read_record(lock_path, key)
    except LockError as e:
        logger.warning(f"Not releasing '{key}': {e}")
        return False

    if existing is None:
        return False

    if existing.owner_pid != os.getpid():
        logger.warning(
            f"Lock for '{key}' is held by PID {existing.owner_pid}, not {os.getpid()}; "
            "leaving it in place"
        )
        return False

    try:
        lock_path.unlink(missing_ok=True)
    except OSError as e:
        logger.error(f"Cannot remove lock record {lock_path}: {e}")
        return False
    logger.debug(f"Released lock for '{key}'")
    return True


@contextmanager
def held_lock(
    key: str,
    lock_dir: Path,
    grace_seconds: float = UNREADABLE_GRACE_SECONDS,
) -> Iterator[LockRecord]:
    """Hold the lock for key for the duration of the block.

    Raises:
        LockHeldError: If another live process holds the lock
    """
    record = acquire_lock(key, lock_dir, grace_seconds)
    try:
        yield record
    finally:
        release_lock(key, lock_dir)


def list_locks(lock_dir: Path) -> list[LockRecord]:
    """List lock records in lock_dir, sorted by key.

    Keys are recovered from filenames, so hashed keys show their slugged form.
    Records that cannot be read are skipped with a warning.
    """
    if not lock_dir.is_dir():
        return []

    records = []
    for path in sorted(lock_dir.glob(f"*{LOCK_SUFFIX}")):
        key = path.name[: -len(LOCK_SUFFIX)]
        try:
            record = _read_record(path, key)
        except LockError as e:
            logger.warning(str(e))
            continue
        if record is not None:
            records.append(record)
    return records


def clean_stale_locks(
    lock_dir: Path,
    grace_seconds: float = UNREADABLE_GRACE_SECONDS,
) -> list[LockRecord]:
    """Remove stale records from lock_dir.

    Returns:
        The records that were removed
    """
    if not lock_dir.is_dir():
        return []

    removed = []
    with exclusive_lock(lock_dir / GUARD_FILE):
        for record in list_locks(lock_dir):
            if not is_stale(record, grace_seconds):
                continue
            try:
                record.path.unlink(missing_ok=True)
            except OSError as e:
                raise LockPathError(f"Cannot remove stale lock record {record.path}: {e}") from e
            logger.info(f"Removed stale lock for '{record.key}' (owner {record.owner_pid})")
            removed.append(record)
    return removed
