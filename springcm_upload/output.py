"""Console output for the command line interface."""

import json
import sys
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table


class OutputFormatter:
    """Formats messages for the terminal, or as JSON for scripting."""

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Print machine readable JSON instead of text
            quiet: Suppress informational output
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console(soft_wrap=True)
        self.err_console = Console(stderr=True, soft_wrap=True)

    def info(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(escape(message))

    def success(self, message: str) -> None:
        if not self.quiet and not self.json_output:
            self.console.print(f"[green]✓[/green] {escape(message)}")

    def warning(self, message: str) -> None:
        if not self.json_output:
            self.err_console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        """Errors are always shown, even in quiet mode."""
        if self.json_output:
            json.dump({"error": message}, sys.stderr)
            sys.stderr.write("\n")
        else:
            self.err_console.print(f"[red]Error:[/red] {escape(message)}")

    def output_json(self, data: Any) -> None:
        print(json.dumps(data, indent=2, default=str))

    def print_summary(self, title: str, items: list[tuple[str, str]]) -> None:
        """Print a two column summary table."""
        if self.quiet or self.json_output:
            return
        table = Table(title=title, show_header=False)
        table.add_column("Item", style="bold")
        table.add_column("Value")
        for label, value in items:
            table.add_row(label, value)
        self.console.print(table)
