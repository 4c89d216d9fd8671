"""pidwrap CLI: single-instance launcher."""

from pathlib import Path

import typer

from pidwrap import __version__

from .commands import LAUNCH_CONTEXT_SETTINGS, clean, init, launch_cmd, run_cmd, status
from .config import set_config_path
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pidwrap {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="pidwrap",
    help="Run a command only if no other instance of it is alive",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv)",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Only report warnings and errors",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: $PIDWRAP_CONFIG or ~/.config/pidwrap/config.toml)",
    ),
) -> None:
    """pidwrap - run a command only if no other instance of it is alive."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
    )
    set_output_context(OutputContext(console=console, json_mode=json_output))
    set_config_path(config)


app.command("launch", context_settings=LAUNCH_CONTEXT_SETTINGS)(launch_cmd)
app.command("run", context_settings=LAUNCH_CONTEXT_SETTINGS)(run_cmd)
app.command()(status)
app.command()(clean)
app.command()(init)
