"""pidwrap: run a command only if no other instance of it is alive."""

__version__ = "0.1.0"
