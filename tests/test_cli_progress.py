"""Tests for the live counter display."""

import io
import tempfile
from pathlib import Path
from unittest.mock import ANY, Mock

import pytest
from rich.console import Console

from backto.cli_progress import BackupProgressDisplay, run_backup_with_progress
from backto.output import OutputFormatter
from backto.sync import BackupEngine, BackupStats


def _console() -> Console:
    return Console(file=io.StringIO(), width=60, color_system=None)


class TestBackupProgressDisplay:
    """Tests for BackupProgressDisplay."""

    def test_render_shows_all_counters(self):
        """The table holds one row per counter."""
        stats = BackupStats(created=5, changed=4, deleted=3, failing=2)
        console = _console()

        console.print(BackupProgressDisplay(stats).render())

        text = console.file.getvalue()
        for label, value in [
            ("Created:", "5"),
            ("Changed:", "4"),
            ("Deleted:", "3"),
            ("Failing:", "2"),
        ]:
            line = next(line for line in text.splitlines() if label in line)
            assert line.split()[-1] == value

    def test_context_manager_draws_final_counters(self):
        """Leaving the display draws the counters as they ended."""
        stats = BackupStats()
        console = _console()

        with BackupProgressDisplay(stats, refresh_per_second=20, console=console):
            stats.created = 7

        text = console.file.getvalue()
        line = next(line for line in text.splitlines() if "Created:" in line)
        assert line.split()[-1] == "7"

    def test_exit_without_enter(self):
        """Exiting a display that never started is harmless."""
        BackupProgressDisplay(BackupStats()).__exit__(None, None, None)


class TestRunBackupWithProgress:
    """Tests for run_backup_with_progress."""

    @pytest.fixture
    def temp_dir(self):
        """Create a temporary directory for testing."""
        with tempfile.TemporaryDirectory() as tmpdir:
            yield Path(tmpdir)

    def test_without_progress(self):
        """No display is created when progress is disabled."""
        engine = Mock(spec=BackupEngine)

        run_backup_with_progress(engine, "/src", "/dst", show_progress=False)

        engine.backup.assert_called_once_with("/src", "/dst", stats=ANY)

    def test_with_progress_passes_display(self):
        """The display wraps the engine run and shares its stats."""
        engine = Mock(spec=BackupEngine)
        engine.output = Mock(console=_console())

        run_backup_with_progress(engine, "/src", "/dst", refresh_per_second=5)

        kwargs = engine.backup.call_args.kwargs
        display = kwargs["progress"]
        assert isinstance(display, BackupProgressDisplay)
        assert display.stats is kwargs["stats"]
        assert display.refresh_per_second == 5

    def test_real_run(self, temp_dir):
        """A real run draws its final counters and returns them."""
        source = temp_dir / "source"
        target = temp_dir / "target"
        source.mkdir()
        target.mkdir()
        (source / "f.txt").write_text("f")
        console = _console()
        engine = BackupEngine(output=OutputFormatter(console=console))

        stats = run_backup_with_progress(engine, source, target)

        assert stats.created == 1
        assert "Created:" in console.file.getvalue()
