"""Helpers shared by CLI commands."""

import typer

from ..config import PidwrapConfig, get_config
from ..constants import EXIT_CONFIG
from ..errors import ConfigError
from ..output import OutputContext


def load_config_or_exit(ctx: OutputContext) -> PidwrapConfig:
    """Load config, exiting with EX_CONFIG if it is invalid."""
    try:
        return get_config()
    except ConfigError as e:
        ctx.error(str(e))
        raise typer.Exit(EXIT_CONFIG) from None
