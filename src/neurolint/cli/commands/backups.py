"""Backup commands for the NeuroLint CLI.

``neurolint backups FILE`` lists the retained backups of a file, newest
first. ``neurolint restore BACKUP`` copies a backup over its original.
"""

from __future__ import annotations

from pathlib import Path

import typer

from neurolint.core.errors import BackupError
from neurolint.execution.backup import BackupManager

from ..helpers import is_quiet, load_cli_config
from ..output import console, create_backups_table, output_error, print_json


def _manager(config_file: Path | None) -> BackupManager:
    config = load_cli_config(console, config_file)
    return BackupManager(
        directory=config.backup.directory,
        max_backups=config.backup.max_backups,
    )


def backups(
    file: Path = typer.Argument(..., help="Original file whose backups to list"),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a configuration file"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
) -> None:
    """List backups of a file, newest first."""
    found = _manager(config_file).list_backups(file.resolve())

    if json_output:
        print_json({"file": str(file), "backups": [str(p) for p in found]})
        return
    if not found:
        console.print(f"[yellow]No backups found for {file}[/yellow]")
        return
    console.print(create_backups_table(found))


def restore(
    backup: Path = typer.Argument(..., help="Backup file to restore", exists=True),
    target: Path | None = typer.Option(
        None,
        "--target",
        "-t",
        help="Restore to this path instead of the original location",
    ),
    config_file: Path | None = typer.Option(
        None, "--config", "-c", help="Path to a configuration file"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Overwrite without asking"),
) -> None:
    """Restore a file from one of its backups."""
    manager = _manager(config_file)
    destination = target or manager.original_path_for(backup.resolve())
    if destination.exists() and not yes:
        if not typer.confirm(f"Overwrite {destination}?", default=False):
            console.print("[yellow]Restore cancelled.[/yellow]")
            raise typer.Exit(1)

    try:
        restored = manager.restore_backup(backup.resolve(), destination)
    except BackupError as e:
        output_error(str(e))
        raise typer.Exit(1) from None

    if not is_quiet():
        console.print(f"[green]Restored[/green] {restored} from {backup.name}")
