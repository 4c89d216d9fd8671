"""Clean command for removing stale lock records."""

from pathlib import Path

import typer

from ..config import resolve_lock_dir
from ..constants import EXIT_CANTCREAT
from ..core import clean_stale_locks
from ..errors import LockPathError
from ..output import get_output_context
from .common import load_config_or_exit


def clean(
    lock_dir: Path | None = typer.Option(
        None, "--lock-dir", "-d", help="Directory holding lock records"
    ),
) -> None:
    """Remove lock records whose owners are no longer running."""
    ctx = get_output_context()
    config = load_config_or_exit(ctx)
    resolved_dir = resolve_lock_dir(config, lock_dir)

    try:
        removed = clean_stale_locks(resolved_dir, config.lock.grace_seconds)
    except LockPathError as e:
        ctx.error(str(e))
        raise typer.Exit(EXIT_CANTCREAT) from None

    if not removed:
        ctx.result({"removed": []}, "No stale locks")
        return

    for record in removed:
        owner = record.owner_pid if record.owner_pid is not None else "unreadable"
        ctx.print(f"Removed [bold]{record.key}[/bold] (owner {owner})")
    ctx.result(
        {"removed": [r.key for r in removed]},
        f"[green]Removed {len(removed)} stale lock(s)[/green]",
    )
