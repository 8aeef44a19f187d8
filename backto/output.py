"""Console output formatting for the backto CLI."""

import json
import sys
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text


class OutputFormatter:
    """Formats messages for the terminal using Rich.

    Informational output is suppressed in quiet mode; warnings and errors
    always go to stderr so they never mix with JSON printed to stdout.
    """

    def __init__(
        self,
        json_output: bool = False,
        quiet: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        """Initialize output formatter.

        Args:
            json_output: Print machine-readable JSON instead of text summaries
            quiet: Suppress non-essential output
            console: Console for regular output (stdout)
            err_console: Console for warnings and errors (stderr)
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = console or Console(highlight=False)
        self.err_console = err_console or Console(stderr=True, highlight=False)

    def print(self, message: str = "") -> None:
        """Print a plain message unless quiet."""
        if not self.quiet:
            self.console.print(message, markup=False)

    def info(self, message: str) -> None:
        """Print an informational message unless quiet or in JSON mode."""
        if not self.quiet and not self.json_output:
            self.console.print(message, markup=False)

    def success(self, message: str) -> None:
        """Print a success message in green."""
        if not self.quiet and not self.json_output:
            self.console.print(message, style="green", markup=False)

    def warning(self, message: str) -> None:
        """Print a warning in yellow to stderr."""
        if not self.quiet:
            self.err_console.print(message, style="yellow", markup=False)

    def error(self, message: str) -> None:
        """Print an error in red to stderr, even when quiet."""
        self.err_console.print(message, style="bold red", markup=False)

    def usage(self, usage_line: str) -> None:
        """Print a blue ``Usage:`` hint followed by the usage line to stderr."""
        self.err_console.print(f"[blue]Usage:[/blue] {escape(usage_line)}")

    def print_summary(self, title: str, items: list[tuple[str, Any]]) -> None:
        """Print a titled two-column summary table.

        Args:
            title: Table title
            items: (label, value) rows
        """
        if self.quiet or self.json_output:
            return
        table = Table(title=title, show_header=False, title_justify="left")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        for label, value in items:
            table.add_row(label, Text(str(value)))
        self.console.print(table)

    def output_json(self, data: Any) -> None:
        """Print data as indented JSON to stdout."""
        sys.stdout.write(json.dumps(data, indent=2) + "\n")
        sys.stdout.flush()
