"""Init command implementation."""

import typer

from ..config import get_config_path, write_config_template
from ..constants import EXIT_CANTCREAT
from ..output import get_output_context


def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Write a config template."""
    ctx = get_output_context()
    config_path = get_config_path()

    if config_path.exists() and not force:
        ctx.print(f"[yellow]Config already exists:[/yellow] {config_path}")
        ctx.result({"config": str(config_path), "created": False})
        return

    try:
        write_config_template(config_path)
    except OSError as e:
        ctx.error(f"Cannot write {config_path}: {e}")
        raise typer.Exit(EXIT_CANTCREAT) from None

    ctx.print(f"[green]Created config template:[/green] {config_path}")
    ctx.result({"config": str(config_path), "created": True})
