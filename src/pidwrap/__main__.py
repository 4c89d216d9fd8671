"""Allow ``python -m pidwrap``."""

from .cli import app

app(prog_name="pidwrap")
