"""Status command for the NeuroLint CLI.

Shows the progress snapshot of an interrupted run in the current directory,
if there is one.
"""

from __future__ import annotations

import asyncio

import typer
from rich.table import Table

from neurolint.core.checkpoint import ProgressState

from ..helpers import create_progress_store, is_verbose
from ..output import (
    StatusColors,
    console,
    create_snapshot_panel,
    display_path,
    print_json,
)


def status(
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output the snapshot as JSON",
    ),
) -> None:
    """Show the interrupted run that the next fix would offer to resume."""
    store = create_progress_store()
    state = asyncio.run(store.load())

    if state is None:
        if json_output:
            print_json({"pending": False})
        else:
            console.print("[green]No interrupted run.[/green]")
        return

    if json_output:
        snapshot = state.to_snapshot().model_dump(mode="json")
        print_json({"pending": True, **snapshot})
        return

    console.print(create_snapshot_panel(state))
    if state.failed_files:
        console.print(_files_table(state, "Failed files", failed=True))
    if is_verbose() and state.remaining_files:
        console.print(_files_table(state, "Remaining files", failed=False))
    console.print("\n[dim]Run 'neurolint fix' to resume or 'neurolint fix --fresh' to discard.[/dim]")


def _files_table(state: ProgressState, title: str, *, failed: bool) -> Table:
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("File", style="cyan")
    table.add_column("Status", width=10)
    if failed:
        table.add_column("Error", no_wrap=False)

    files = state.failed_files if failed else state.remaining_files
    for path in files:
        file_status = state.status_of(path)
        color = StatusColors.get_file_color(file_status) if file_status else "white"
        label = file_status.value if file_status else "-"
        row = [display_path(path), f"[{color}]{label}[/{color}]"]
        if failed:
            row.append(state.errors.get(path, ""))
        table.add_row(*row)
    return table
