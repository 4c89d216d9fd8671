"""Output formatting for pidwrap CLI."""

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from rich.console import Console
from rich.table import Table


@dataclass
class OutputContext:
    """Context for output formatting.

    Human-readable output goes to the rich console (stderr, so a wrapped
    command's stdout is left alone). JSON goes to stdout for automation.
    """

    console: Console
    json_mode: bool = False

    def print(self, message: str, style: str | None = None) -> None:
        """Print message unless in JSON mode."""
        if not self.json_mode:
            self.console.print(message, style=style)

    def print_json(self, data: Any) -> None:
        """Print JSON data to stdout in JSON mode."""
        if self.json_mode:
            print(json.dumps(data, indent=2, default=str))

    def result(self, data: dict[str, Any], message: str = "") -> None:
        """Print data as JSON, or message for humans."""
        if self.json_mode:
            self.print_json(data)
        elif message:
            self.console.print(message)

    def table(
        self,
        rows: Sequence[dict[str, Any]],
        columns: dict[str, str],
        title: str | None = None,
        styles: dict[str, dict[str, str]] | None = None,
    ) -> None:
        """Print rows as a JSON list, or as a table of the given columns.

        Args:
            rows: One dict per row; JSON mode prints them whole
            columns: Row field -> column header, in display order
            title: Table title
            styles: Row field -> {cell value: rich style} for colored cells
        """
        if self.json_mode:
            self.print_json(list(rows))
            return

        styles = styles or {}
        table = Table(title=title)
        for header in columns.values():
            table.add_column(header)
        for row in rows:
            cells = []
            for field in columns:
                value = row.get(field)
                text = "-" if value is None else str(value)
                style = styles.get(field, {}).get(text)
                cells.append(f"[{style}]{text}[/{style}]" if style else text)
            table.add_row(*cells)
        self.console.print(table)

    def error(self, message: str, data: dict[str, Any] | None = None) -> None:
        """Print error in appropriate format."""
        if self.json_mode:
            self.print_json({"error": message, **(data or {})})
        else:
            self.console.print(f"[red]Error: {message}[/red]")


# Global output context (set by cli.py main callback)
_ctx: OutputContext | None = None


def get_output_context() -> OutputContext:
    """Get the current output context.

    Returns a stderr OutputContext if not yet initialized by CLI.
    """
    if _ctx is None:
        return OutputContext(Console(stderr=True))
    return _ctx


def set_output_context(ctx: OutputContext | None) -> None:
    """Set the global output context. Called by CLI main callback."""
    global _ctx
    _ctx = ctx
