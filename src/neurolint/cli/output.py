"""Rich output formatting for the NeuroLint CLI.

Centralizes color schemes, table builders, the fix progress bar and the
summary panels so every command renders results the same way.
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from rich.console import Console
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from neurolint.core.checkpoint import FileStatus
from neurolint.execution.backup import extract_timestamp
from neurolint.execution.progress import format_duration

if TYPE_CHECKING:
    from collections.abc import Sequence

    from neurolint.core.checkpoint import ProgressState
    from neurolint.execution.runner import FixSummary

console = Console()


class StatusColors:
    """Color mappings for status values."""

    FILE_STATUS: dict[FileStatus, str] = {
        FileStatus.PENDING: "yellow",
        FileStatus.COMPLETED: "green",
        FileStatus.FAILED: "red",
    }

    RESULT: dict[str, str] = {
        "changed": "green",
        "unchanged": "dim",
        "failed": "red",
    }

    @classmethod
    def get_file_color(cls, status: FileStatus) -> str:
        return cls.FILE_STATUS.get(status, "white")


# =============================================================================
# Formatters
# =============================================================================


def format_bytes(num_bytes: int) -> str:
    """Format a byte count as B, KB or MB."""
    if num_bytes < 1024:
        return f"{num_bytes}B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.1f}KB"
    return f"{num_bytes / (1024 * 1024):.1f}MB"


def format_timestamp(dt: datetime | None) -> str:
    if dt is None:
        return "-"
    return dt.strftime("%Y-%m-%d %H:%M:%S UTC")


def display_path(path: str | Path, base: Path | None = None) -> str:
    """Path relative to ``base`` (default cwd) when it lies below it."""
    base = base or Path.cwd()
    try:
        return Path(path).relative_to(base).as_posix()
    except ValueError:
        return str(path)


# =============================================================================
# Progress bar
# =============================================================================


def create_fix_progress(console_instance: Console | None = None) -> Progress:
    """Progress bar for a fix run with percentage, count, elapsed time and ETA.

    The task carries an ``eta`` field updated from ProgressInfo.
    """
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(bar_width=30),
        TextColumn("[progress.percentage]{task.percentage:>3.0f}%"),
        TextColumn("•"),
        TextColumn("{task.completed}/{task.total} files"),
        TextColumn("•"),
        TimeElapsedColumn(),
        TextColumn("•"),
        TextColumn("ETA: {task.fields[eta]}"),
        console=console_instance or console,
        transient=False,
    )


# =============================================================================
# Tables
# =============================================================================


def create_results_table(summary: FixSummary, show_unchanged: bool = False) -> Table:
    """Per-file results; unchanged files only in verbose mode."""
    table = Table(title="Results", show_header=True, header_style="bold")
    table.add_column("File", style="cyan", no_wrap=False)
    table.add_column("Result", width=10)
    table.add_column("Duration", justify="right", width=9)
    table.add_column("Details", no_wrap=False)

    for result in summary.results:
        if result.success and result.changed:
            label, details = "changed", ""
            if result.backup_path:
                details = f"backup: {result.backup_path.name}"
        elif result.success:
            if not show_unchanged:
                continue
            label, details = "unchanged", ""
        else:
            label, details = "failed", result.error or ""
        color = StatusColors.RESULT[label]
        table.add_row(
            display_path(result.file_path),
            f"[{color}]{label}[/{color}]",
            format_duration(result.duration_seconds),
            details,
        )
    return table


def create_layer_stats_table(summary: FixSummary) -> Table:
    table = Table(title="Layers", show_header=True, header_style="bold")
    table.add_column("Layer", justify="right", width=5)
    table.add_column("Name", style="cyan")
    table.add_column("Files changed", justify="right")
    table.add_column("Changes", justify="right")
    table.add_column("Errors", justify="right")
    for layer_id, stats in summary.layer_stats.items():
        errors = f"[red]{stats.errors}[/red]" if stats.errors else "0"
        table.add_row(
            str(layer_id), stats.name, str(stats.files_changed), str(stats.changes), errors
        )
    return table


def create_backups_table(backups: Sequence[Path]) -> Table:
    table = Table(title="Backups (newest first)", show_header=True, header_style="bold")
    table.add_column("#", justify="right", width=3)
    table.add_column("Backup", style="cyan")
    table.add_column("Created")
    table.add_column("Size", justify="right")
    for index, backup in enumerate(backups, start=1):
        created = datetime.fromtimestamp(extract_timestamp(backup) / 1000).strftime(
            "%Y-%m-%d %H:%M:%S"
        )
        size = format_bytes(backup.stat().st_size) if backup.exists() else "-"
        table.add_row(str(index), str(backup), created, size)
    return table


# =============================================================================
# Panels
# =============================================================================


def create_summary_panel(summary: FixSummary) -> Panel:
    """Final summary of a fix run."""
    total = len(summary.results)
    lines = [
        f"[bold]Job[/bold] {summary.job_id}",
        "",
        f"  Changed:   [green]{len(summary.changed)}[/green]",
        f"  Unchanged: {len(summary.unchanged)}",
        f"  Failed:    [red]{len(summary.failed)}[/red]" if summary.failed else "  Failed:    0",
        f"  Total:     {total}",
        "",
        f"Duration: {format_duration(summary.duration_seconds)}",
    ]
    if summary.dry_run:
        lines.append("[yellow]Dry run: no files were written[/yellow]")
    if summary.resumed:
        lines.append("[dim]Resumed from an interrupted run[/dim]")

    border = "green" if summary.success else "yellow"
    return Panel("\n".join(lines), title="Fix Summary", border_style=border)


def create_snapshot_panel(state: ProgressState) -> Panel:
    """Pending snapshot of an interrupted run."""
    percentage = (state.processed / state.total * 100) if state.total else 0.0
    lines = [
        f"[bold]{state.id}[/bold]",
        f"Operation: {state.operation}",
        "",
        f"  Completed: [green]{state.completed}[/green]",
        f"  Failed:    [red]{state.failed}[/red]",
        f"  Remaining: [yellow]{len(state.remaining_files)}[/yellow]",
        f"  Progress:  {percentage:.1f}%",
        "",
        f"Started:      {format_timestamp(state.start_time)}",
        f"Last update:  {format_timestamp(state.last_update)}",
    ]
    return Panel("\n".join(lines), title="Interrupted Run", border_style="yellow")


# =============================================================================
# JSON and errors
# =============================================================================


def print_json(data: object, console_instance: Console | None = None) -> None:
    """Print ``data`` as indented JSON without Rich wrapping or markup."""
    out = console_instance or console
    out.print(
        json.dumps(data, indent=2, default=str),
        soft_wrap=True,
        highlight=False,
        markup=False,
    )


def output_error(
    message: str,
    *,
    hints: list[str] | None = None,
    severity: Literal["error", "warning"] = "error",
    json_output: bool = False,
    console_instance: Console | None = None,
) -> None:
    """Print an error or warning with optional hints, or as JSON."""
    out = console_instance or console
    if json_output:
        payload: dict[str, object] = {"success": False, "message": message}
        if hints:
            payload["hints"] = hints
        print_json(payload, out)
        return

    color = "red" if severity == "error" else "yellow"
    label = "Error" if severity == "error" else "Warning"
    out.print(f"[{color}]{label}:[/{color}] {message}")
    if hints:
        out.print()
        out.print("[dim]Hints:[/dim]")
        for hint in hints:
            out.print(f"  - {hint}")


__all__ = [
    "StatusColors",
    "console",
    "create_backups_table",
    "create_fix_progress",
    "create_layer_stats_table",
    "create_results_table",
    "create_snapshot_panel",
    "create_summary_panel",
    "display_path",
    "format_bytes",
    "format_timestamp",
    "output_error",
    "print_json",
]
