"""Status command for inspecting lock records."""

from pathlib import Path

import typer

from ..config import resolve_lock_dir
from ..core import list_locks, read_lock, record_state
from ..errors import LockError
from ..models import LockRecord
from ..output import get_output_context
from .common import load_config_or_exit

_COLUMNS = {"key": "Key", "owner_pid": "PID", "state": "State", "age": "Age"}
_STATE_STYLES = {
    "live": "green",
    "orphaned": "cyan",
    "stale": "yellow",
    "unknown": "red",
    "unreadable": "red",
}


def _format_age(seconds: float | None) -> str | None:
    if seconds is None:
        return None
    if seconds < 60:
        return f"{seconds:.0f}s"
    if seconds < 3600:
        return f"{seconds / 60:.0f}m"
    return f"{seconds / 3600:.1f}h"


def status(
    key: str | None = typer.Argument(None, help="Only show this key"),
    lock_dir: Path | None = typer.Option(
        None, "--lock-dir", "-d", help="Directory holding lock records"
    ),
) -> None:
    """Show lock records and whether their owners are alive."""
    ctx = get_output_context()
    config = load_config_or_exit(ctx)
    resolved_dir = resolve_lock_dir(config, lock_dir)

    records: list[LockRecord]
    if key is None:
        records = list_locks(resolved_dir)
    else:
        try:
            record = read_lock(key, resolved_dir)
        except LockError as e:
            ctx.error(str(e))
            raise typer.Exit(1) from None
        if record is None:
            ctx.error(f"No lock record for '{key}'", {"key": key})
            raise typer.Exit(1)
        records = [record]

    if not records and not ctx.json_mode:
        ctx.print(f"No lock records in {resolved_dir}")
        return

    rows = []
    for r in records:
        age = r.age_seconds()
        rows.append(
            {
                "key": r.key,
                "owner_pid": r.owner_pid,
                "child_pgid": r.child_pgid,
                "state": record_state(r, config.lock.grace_seconds),
                "age_seconds": age,
                "age": _format_age(age),
                "path": str(r.path),
            }
        )
    ctx.table(rows, _COLUMNS, title=f"Locks in {resolved_dir}", styles={"state": _STATE_STYLES})
