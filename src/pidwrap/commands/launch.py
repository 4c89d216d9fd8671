"""Launch commands: run a command unless another instance is alive."""

from pathlib import Path

import typer

from ..config import resolve_lock_dir
from ..constants import EXIT_CANTCREAT, EXIT_USAGE
from ..core import derive_key, launch
from ..errors import LaunchError, LockError, LockPathError
from ..output import get_output_context
from .common import load_config_or_exit

# Everything after KEY/COMMAND belongs to the wrapped command
LAUNCH_CONTEXT_SETTINGS = {
    "allow_interspersed_args": False,
    "ignore_unknown_options": True,
}


def _launch(
    key: str | None,
    command: list[str],
    lock_dir: Path | None,
    duplicate_exit_code: int | None,
) -> None:
    ctx = get_output_context()
    config = load_config_or_exit(ctx)

    try:
        if key is None:
            key = derive_key(command[0])
        result = launch(
            command,
            key=key,
            lock_dir=resolve_lock_dir(config, lock_dir),
            grace_seconds=config.lock.grace_seconds,
            forward_signals=config.launch.signals(),
        )
    except LockPathError as e:
        ctx.error(str(e))
        raise typer.Exit(EXIT_CANTCREAT) from None
    except (LockError, LaunchError) as e:
        ctx.error(str(e))
        raise typer.Exit(EXIT_USAGE) from None

    ctx.print_json(result.model_dump(mode="json"))

    if duplicate_exit_code is None:
        duplicate_exit_code = config.launch.duplicate_exit_code
    raise typer.Exit(result.to_exit_code(duplicate_exit_code))


def launch_cmd(
    key: str = typer.Argument(..., help="Lock key identifying the logical command"),
    command: list[str] = typer.Argument(
        ..., metavar="COMMAND [ARGS]...", help="Command to run if no instance is alive"
    ),
    lock_dir: Path | None = typer.Option(
        None, "--lock-dir", "-d", help="Directory holding lock records"
    ),
    duplicate_exit_code: int | None = typer.Option(
        None,
        "--duplicate-exit-code",
        min=0,
        max=255,
        help="Exit status when another instance is already running (default 0)",
    ),
) -> None:
    """Run COMMAND unless a live process already holds KEY.

    Options for pidwrap go before KEY; everything after it is passed to COMMAND.
    """
    _launch(key, command, lock_dir, duplicate_exit_code)


def run_cmd(
    command: list[str] = typer.Argument(
        ..., metavar="COMMAND [ARGS]...", help="Command to run if no instance is alive"
    ),
    lock_dir: Path | None = typer.Option(
        None, "--lock-dir", "-d", help="Directory holding lock records"
    ),
    duplicate_exit_code: int | None = typer.Option(
        None,
        "--duplicate-exit-code",
        min=0,
        max=255,
        help="Exit status when another instance is already running (default 0)",
    ),
) -> None:
    """Run COMMAND with a lock key derived from its program name."""
    _launch(None, command, lock_dir, duplicate_exit_code)
