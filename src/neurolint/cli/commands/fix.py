"""Fix command for the NeuroLint CLI.

Implements ``neurolint fix``: resolve and validate files, then hand them to
the FixRunner with a rich progress bar attached. Setup failures (bad config,
missing API key, no files, validation errors) exit with status 1. Per-file
failures are reported and only change the exit status with --fail-on-error.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.progress import Progress, TaskID

from neurolint.backends.base import TransformBackend
from neurolint.core.checkpoint import ProgressState
from neurolint.core.config import NeuroLintConfig, parse_layers
from neurolint.core.errors import ConfigurationError, FileValidationError, NoFilesFoundError
from neurolint.execution.progress import ProgressInfo, format_duration
from neurolint.execution.runner import FixOptions, FixRunner, FixSummary
from neurolint.validation.files import discover_files, validate_files

from ..helpers import (
    ErrorMessages,
    create_backend_from_config,
    create_progress_store,
    is_quiet,
    is_verbose,
    load_cli_config,
)
from ..output import (
    console,
    create_fix_progress,
    create_layer_stats_table,
    create_results_table,
    create_snapshot_panel,
    create_summary_panel,
    output_error,
    print_json,
)


def fix(
    files: list[str] | None = typer.Argument(
        None,
        help="Files, directories or glob patterns (default: files.include from config)",
    ),
    layers: str | None = typer.Option(
        None,
        "--layers",
        "-l",
        help="Comma separated layers to apply, e.g. 1,2,3,4",
    ),
    recursive: bool = typer.Option(
        False,
        "--recursive",
        "-r",
        help="Search directory arguments recursively",
    ),
    include: list[str] | None = typer.Option(
        None,
        "--include",
        help="Additional glob pattern to include (repeatable)",
    ),
    exclude: list[str] | None = typer.Option(
        None,
        "--exclude",
        help="Glob pattern to exclude (repeatable)",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Transform without writing any file",
    ),
    backup: bool = typer.Option(
        False,
        "--backup/--no-backup",
        help="Back up each changed file before it is replaced",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a configuration file",
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Resume an interrupted run without asking",
    ),
    fresh: bool = typer.Option(
        False,
        "--fresh",
        help="Discard any interrupted run and start over",
    ),
    fail_on_error: bool = typer.Option(
        False,
        "--fail-on-error",
        help="Exit with status 1 if any file failed",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output the summary as JSON",
    ),
) -> None:
    """Apply transformation layers to a set of files."""
    config = load_cli_config(console, config_file)

    try:
        layer_ids = parse_layers(layers) if layers else list(config.layers.enabled)
        backend = create_backend_from_config(config)
    except ConfigurationError as e:
        output_error(str(e), json_output=json_output)
        raise typer.Exit(1) from None

    resolved = _resolve_files(config, files, include, exclude, recursive, json_output)

    if not is_quiet() and not json_output:
        mode = "[yellow]dry run[/yellow]" if dry_run else "[green]writing changes[/green]"
        names = ", ".join(config.layer_name(layer) for layer in layer_ids)
        console.print(f"Fixing [bold]{len(resolved)}[/bold] files with layers {names} ({mode})")

    options = FixOptions(layers=layer_ids, dry_run=dry_run, backup=backup)
    summary = asyncio.run(
        _run_fix(config, backend, resolved, options, yes=yes, fresh=fresh, json_output=json_output)
    )

    if json_output:
        print_json(summary.to_dict())
    else:
        _print_summary(summary)

    if fail_on_error and summary.failed:
        raise typer.Exit(1)


def _resolve_files(
    config: NeuroLintConfig,
    files: list[str] | None,
    include: list[str] | None,
    exclude: list[str] | None,
    recursive: bool,
    json_output: bool,
) -> list[str]:
    """Discover and validate files, exiting with status 1 on setup errors."""
    patterns = files or config.files.include
    try:
        discovered = discover_files(
            patterns,
            include=include or [],
            exclude=[*config.files.exclude, *(exclude or [])],
            recursive=recursive,
            extensions=config.validation.allowed_extensions,
        )
        result = validate_files(discovered, config.validation)
    except NoFilesFoundError as e:
        output_error(
            str(e),
            hints=["Check the file patterns", "Use --recursive for directories"],
            json_output=json_output,
        )
        raise typer.Exit(1) from None
    except FileValidationError as e:
        if json_output:
            print_json(
                {"success": False, "message": ErrorMessages.VALIDATION_FAILED, "errors": e.errors}
            )
        else:
            console.print(f"[red]{ErrorMessages.VALIDATION_FAILED}:[/red]")
            for error in e.errors:
                console.print(f"  - {error}")
        raise typer.Exit(1) from None

    if result.warnings and not is_quiet() and not json_output:
        for warning in result.warnings:
            console.print(f"[yellow]Warning:[/yellow] {warning.format_short()}")
    return discovered


async def _run_fix(
    config: NeuroLintConfig,
    backend: TransformBackend,
    files: list[str],
    options: FixOptions,
    *,
    yes: bool = False,
    fresh: bool = False,
    json_output: bool = False,
) -> FixSummary:
    """Run the fix job with progress display."""
    store = create_progress_store()
    if fresh and await store.delete() and not is_quiet() and not json_output:
        console.print("[yellow]--fresh: discarded interrupted run[/yellow]")

    def confirm_resume(state: ProgressState) -> bool:
        if yes:
            return True
        if json_output:
            return False
        console.print(create_snapshot_panel(state))
        return typer.confirm(
            f"Resume and process the {len(state.remaining_files)} remaining files?",
            default=True,
        )

    progress: Progress | None = None
    task_id: TaskID | None = None
    if not is_quiet() and not json_output:
        progress = create_fix_progress(console)

    def update_progress(info: ProgressInfo) -> None:
        nonlocal task_id
        if progress is None:
            return
        eta = format_duration(info.eta_seconds) if info.eta_seconds else "calculating..."
        if task_id is None:
            # Started on first report so a resume prompt is not drawn over
            progress.start()
            task_id = progress.add_task(
                f"[cyan]{info.operation}[/cyan]", total=info.total, eta=eta
            )
        progress.update(task_id, completed=info.processed, total=info.total, eta=eta)

    runner = FixRunner(backend, config, store=store, progress_callback=update_progress)
    try:
        return await runner.run(files, options, confirm_resume=confirm_resume)
    finally:
        if progress is not None:
            progress.stop()
        await backend.close()


def _print_summary(summary: FixSummary) -> None:
    if is_quiet():
        for result in summary.failed:
            console.print(f"[red]Failed:[/red] {result.file_path}: {result.error}")
        return

    if summary.failed or summary.changed or is_verbose():
        console.print(create_results_table(summary, show_unchanged=is_verbose()))
    if summary.layer_stats:
        console.print(create_layer_stats_table(summary))
    console.print(create_summary_panel(summary))
