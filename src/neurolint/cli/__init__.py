"""NeuroLint CLI.

The CLI is built with Typer. Global options (verbosity, logging) are handled
by the app callback before any command runs; commands live in
``neurolint.cli.commands``.

Package structure:
    cli/
    ├── __init__.py           # App assembly and global options
    ├── helpers.py            # Output level, logging, config and backend helpers
    ├── output.py             # Rich tables, panels and progress bar
    └── commands/
        ├── fix.py            # fix command
        ├── status.py         # status command
        └── backups.py        # backups, restore commands
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from neurolint import __version__

# Re-exported so tests can reset module state
from . import helpers as helpers
from .commands import backups, fix, restore, status
from .helpers import (
    OutputLevel,
    configure_global_logging,
    set_log_file,
    set_log_format,
    set_log_level,
    set_output_level,
)
from .output import console

app = typer.Typer(
    name="neurolint",
    help="Batch code transformation with resumable progress",
    add_completion=False,
)


# =============================================================================
# Global option callbacks
# =============================================================================


def version_callback(value: bool) -> None:
    if value:
        console.print(f"NeuroLint CLI v{__version__}")
        raise typer.Exit()


def verbose_callback(value: bool) -> None:
    if value:
        set_output_level(OutputLevel.VERBOSE)


def quiet_callback(value: bool) -> None:
    if value:
        set_output_level(OutputLevel.QUIET)


def log_level_callback(value: str | None) -> str | None:
    if value:
        set_log_level(value)
    return value


def log_file_callback(value: Path | None) -> Path | None:
    if value:
        set_log_file(value)
    return value


def log_format_callback(value: str | None) -> str | None:
    if value:
        set_log_format(value)
    return value


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        callback=verbose_callback,
        is_eager=True,
        help="Show detailed output",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        callback=quiet_callback,
        is_eager=True,
        help="Show minimal output (errors only)",
    ),
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            "-L",
            callback=log_level_callback,
            help="Logging level (DEBUG, INFO, WARNING, ERROR)",
            envvar="NEUROLINT_LOG_LEVEL",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            callback=log_file_callback,
            help="Path for log file output",
            envvar="NEUROLINT_LOG_FILE",
        ),
    ] = None,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            callback=log_format_callback,
            help="Log format: json, console, or both",
            envvar="NEUROLINT_LOG_FORMAT",
        ),
    ] = None,
) -> None:
    """NeuroLint - apply transformation layers to many files safely."""
    configure_global_logging(console)


app.command()(fix)
app.command()(status)
app.command()(backups)
app.command()(restore)


__all__ = ["app", "console", "main"]
