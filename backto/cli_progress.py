"""CLI progress display for backup runs.

This module provides a Rich-based live display of the four running
counters of a backup (created, changed, deleted, failing).
"""

from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.live import Live
from rich.table import Table

from .sync.engine import BackupEngine, BackupStats
from .utils import DEFAULT_REFRESH_PER_SECOND


class BackupProgressDisplay:
    """Rich-based live counter display for backup runs.

    The display polls a :class:`BackupStats` from Rich's refresh thread at
    a steady rate. It only reads the counters; the engine is their sole
    writer.
    """

    def __init__(
        self,
        stats: BackupStats,
        refresh_per_second: float = DEFAULT_REFRESH_PER_SECOND,
        console: Optional[Console] = None,
    ) -> None:
        """Initialize the progress display.

        Args:
            stats: Counters to display
            refresh_per_second: Redraw rate
            console: Console to draw on (defaults to stdout)
        """
        self.stats = stats
        self.refresh_per_second = refresh_per_second
        self.console = console
        self._live: Optional[Live] = None

    def render(self) -> Table:
        """Build the counter table from the current stats."""
        failing_style = "bold red" if self.stats.failing else ""
        table = Table.grid(padding=(0, 1))
        table.add_column(style="bold")
        table.add_column(justify="right")
        table.add_row("Created:", str(self.stats.created))
        table.add_row("Changed:", str(self.stats.changed))
        table.add_row("Deleted:", str(self.stats.deleted))
        table.add_row("Failing:", str(self.stats.failing), style=failing_style)
        return table

    def __enter__(self) -> "BackupProgressDisplay":
        """Enter context manager - start the refresh thread."""
        self._live = Live(
            console=self.console,
            refresh_per_second=self.refresh_per_second,
            get_renderable=self.render,
        )
        self._live.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager - stop refreshing after a final redraw."""
        if self._live is not None:
            self._live.__exit__(exc_type, exc_val, exc_tb)
            self._live = None


def run_backup_with_progress(
    engine: BackupEngine,
    source: Union[str, Path],
    target: Union[str, Path],
    show_progress: bool = True,
    refresh_per_second: float = DEFAULT_REFRESH_PER_SECOND,
) -> BackupStats:
    """Run a backup with a live counter display.

    The display is stopped before the engine writes the state file, so the
    final counters are on screen when the run's last durable write happens.

    Args:
        engine: BackupEngine instance
        source: Directory to back up
        target: Backup target directory
        show_progress: If False, run without the live display
        refresh_per_second: Redraw rate of the display

    Returns:
        The run's counters
    """
    stats = BackupStats()

    if not show_progress:
        return engine.backup(source, target, stats=stats)

    display = BackupProgressDisplay(
        stats,
        refresh_per_second=refresh_per_second,
        console=engine.output.console,
    )
    return engine.backup(source, target, stats=stats, progress=display)
