"""CLI interface for backto."""

import logging
from pathlib import Path
from typing import Any

import click

from . import __version__
from .cli_progress import run_backup_with_progress
from .exceptions import BacktoError, BacktoSourceError, BacktoTargetError
from .output import OutputFormatter
from .sync import BackupEngine
from .utils import (
    DEFAULT_REFRESH_PER_SECOND,
    MAX_REFRESH_PER_SECOND,
    MIN_REFRESH_PER_SECOND,
    format_count,
)
from .validation import validate_backup_paths

logger = logging.getLogger(__name__)

USAGE_LINE = "backto [source] [target]"


@click.command()
@click.argument("source", type=click.Path(path_type=Path))
@click.argument("target", type=click.Path(path_type=Path))
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output")
@click.option("--json", is_flag=True, help="Output run statistics in JSON format")
@click.option("--no-progress", is_flag=True, help="Disable the live counters")
@click.option(
    "--refresh-rate",
    type=click.FloatRange(MIN_REFRESH_PER_SECOND, MAX_REFRESH_PER_SECOND),
    default=DEFAULT_REFRESH_PER_SECOND,
    show_default=True,
    envvar="BACKTO_REFRESH_RATE",
    help="Redraws per second of the live counters",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose/debug logging output",
)
@click.version_option(version=__version__, prog_name="backto")
@click.pass_context
def main(
    ctx: Any,
    source: Path,
    target: Path,
    quiet: bool,
    json: bool,
    no_progress: bool,
    refresh_rate: float,
    verbose: bool,
) -> None:
    """Back up SOURCE into TARGET incrementally.

    New and changed files are copied, unchanged files are left alone, and
    files and directories deleted from SOURCE are deleted from TARGET. The
    state of the backup is kept in TARGET/BackupState.bin, so every run only
    processes what changed since the previous one.

    TARGET must already exist. A TARGET without a backup state must be empty.

    Examples:
        backto ~/Documents /mnt/backup/Documents
        backto ./photos /media/usb/photos --no-progress
    """
    out = OutputFormatter(json_output=json, quiet=quiet)

    # Configure logging based on verbose flag
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("backto").setLevel(logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING)

    try:
        updating = validate_backup_paths(source, target)
    except (BacktoSourceError, BacktoTargetError) as e:
        out.error(str(e))
        out.usage(USAGE_LINE)
        ctx.exit(2)
        return  # Unreachable, but helps type checker

    mode = "Updating existing backup" if updating else "Creating new backup"
    out.print_summary(
        f"backto {__version__}",
        [("Source", source), ("Target", target), ("Mode", mode)],
    )

    try:
        engine = BackupEngine(output=out)
        stats = run_backup_with_progress(
            engine,
            source,
            target,
            show_progress=not (no_progress or out.quiet or out.json_output),
            refresh_per_second=refresh_rate,
        )
    except KeyboardInterrupt:
        out.warning("\nBackup cancelled by user")
        ctx.exit(130)
        return
    except BacktoError as e:
        out.error(f"Backup error: {e}")
        ctx.exit(1)
        return
    except Exception as e:
        logger.debug("Backup aborted", exc_info=True)
        out.error(f"Error: {e}")
        ctx.exit(1)
        return

    if out.json_output:
        out.output_json(stats.to_dict())
    else:
        engine.display_summary(stats)

    if stats.failing > 0:
        if not out.quiet and not out.json_output:
            out.warning(f"Completed with {format_count(stats.failing, 'failure')}")
        ctx.exit(1)


if __name__ == "__main__":
    main()
