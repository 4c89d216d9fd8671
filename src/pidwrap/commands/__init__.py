"""CLI command implementations for pidwrap.

This package contains the implementation of each CLI command,
separated from the CLI framework setup in cli.py.
"""

from .clean import clean
from .init import init
from .launch import LAUNCH_CONTEXT_SETTINGS, launch_cmd, run_cmd
from .status import status

__all__ = [
    "LAUNCH_CONTEXT_SETTINGS",
    "clean",
    "init",
    "launch_cmd",
    "run_cmd",
    "status",
]
