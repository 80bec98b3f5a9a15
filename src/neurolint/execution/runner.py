"""Fix runner: applies the remote transform to a file set in batches.

Flow for one run:
1. select_files() decides between the resolved file list and the remaining
   files of an interrupted run with the same operation.
2. A ProgressTracker is started over the working list.
3. Files are processed in sequential batches. Within a batch every file is
   a task; the ConcurrencyGate bounds how many run at once.
4. Each task reads the file, calls the backend under retry (and the rate
   limiter when configured), and, when the content changed and this is not
   a dry run, backs the file up when requested and replaces it atomically.
5. A failing file becomes a failed FileResult. The rest of the batch and all
   later batches still run.
6. The tracker is completed, which clears the snapshot, and a FixSummary is
   returned.

Interrupting a run leaves the snapshot in place; the next invocation offers
to resume with exactly the files that were still pending.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from neurolint.backends.base import (
    LayerResult,
    TransformBackend,
    TransformRequest,
    TransformResponse,
)
from neurolint.core.checkpoint import ProgressState
from neurolint.core.config import NeuroLintConfig
from neurolint.core.constants import FIX_OPERATION
from neurolint.core.logging import ExecutionContext, get_logger, with_context
from neurolint.execution.backup import BackupManager
from neurolint.execution.gate import ConcurrencyGate
from neurolint.execution.progress import ProgressCallback, ProgressTracker, resume_operation
from neurolint.execution.rate_limiter import SlidingWindowRateLimiter, with_rate_limit
from neurolint.execution.retry_strategy import (
    ExponentialBackoffStrategy,
    RetryExecutor,
    RetryPolicy,
    SleepFn,
)
from neurolint.state.base import ProgressStore
from neurolint.state.json_backend import JsonProgressStore
from neurolint.utils.fs import atomic_write_text

_logger = get_logger("runner")

ConfirmResume = Callable[[ProgressState], bool]
"""Asked whether to resume an interrupted run; False abandons it."""


@dataclass
class FixOptions:
    """Per-invocation options for a fix run.

    Attributes:
        layers: Layer ids sent with every transform request.
        dry_run: Transform but never write files or create backups.
        backup: Back each changed file up before replacing it (opt-in).
        check_health: Probe the backend before the first batch.
    """

    layers: list[int]
    dry_run: bool = False
    backup: bool = False
    check_health: bool = True


@dataclass
class FileResult:
    """Outcome of one file.

    Attributes:
        file_path: Absolute path of the file.
        success: Whether the transform (and write, if any) succeeded.
        changed: Whether the transformed content differs from the original.
        error: Failure reason for failed files.
        backup_path: Backup created before the write, if any.
        layers: Per-layer results reported by the service.
        duration_seconds: Wall time spent on this file, gate wait excluded.
    """

    file_path: str
    success: bool
    changed: bool = False
    error: str | None = None
    backup_path: Path | None = None
    layers: list[LayerResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_path": self.file_path,
            "success": self.success,
            "changed": self.changed,
            "error": self.error,
            "backup_path": str(self.backup_path) if self.backup_path else None,
            "layers": [layer.model_dump() for layer in self.layers],
            "duration_seconds": round(self.duration_seconds, 3),
        }


@dataclass
class LayerStats:
    """Aggregated results of one layer across a run."""

    layer_id: int
    name: str
    files_changed: int = 0
    changes: int = 0
    errors: int = 0
    skipped: int = 0


@dataclass
class FixSummary:
    """Result of a whole fix run."""

    job_id: str
    results: list[FileResult] = field(default_factory=list)
    dry_run: bool = False
    resumed: bool = False
    duration_seconds: float = 0.0

    @property
    def changed(self) -> list[FileResult]:
        return [r for r in self.results if r.success and r.changed]

    @property
    def unchanged(self) -> list[FileResult]:
        return [r for r in self.results if r.success and not r.changed]

    @property
    def failed(self) -> list[FileResult]:
        return [r for r in self.results if not r.success]

    @property
    def success(self) -> bool:
        """True if no file failed."""
        return not self.failed

    @property
    def layer_stats(self) -> dict[int, LayerStats]:
        stats: dict[int, LayerStats] = {}
        for result in self.results:
            for layer in result.layers:
                entry = stats.setdefault(layer.id, LayerStats(layer.id, layer.name))
                if layer.status == "error":
                    entry.errors += 1
                elif layer.status == "skipped":
                    entry.skipped += 1
                elif layer.changes > 0:
                    entry.files_changed += 1
                    entry.changes += layer.changes
        return dict(sorted(stats.items()))

    def to_dict(self) -> dict[str, Any]:
        return {
            "job_id": self.job_id,
            "dry_run": self.dry_run,
            "resumed": self.resumed,
            "duration_seconds": round(self.duration_seconds, 3),
            "total": len(self.results),
            "changed": len(self.changed),
            "unchanged": len(self.unchanged),
            "failed": len(self.failed),
            "errors": {r.file_path: r.error for r in self.failed},
            "layers": {
                layer_id: {
                    "name": s.name,
                    "files_changed": s.files_changed,
                    "changes": s.changes,
                    "errors": s.errors,
                    "skipped": s.skipped,
                }
                for layer_id, s in self.layer_stats.items()
            },
            "results": [r.to_dict() for r in self.results],
        }


class FixRunner:
    """Orchestrates one batch fix run.

    Attributes:
        backend: Remote transform service.
        config: Loaded configuration (batch, retry, backup, api sections).
        store: Where the progress snapshot lives.
        backup_manager: Creates backups before files are replaced.
        gate: Bounds in-flight file tasks.
        rate_limiter: Client-side limit on transform calls, if configured.
    """

    def __init__(
        self,
        backend: TransformBackend,
        config: NeuroLintConfig | None = None,
        *,
        store: ProgressStore | None = None,
        backup_manager: BackupManager | None = None,
        progress_callback: ProgressCallback | None = None,
        cwd: Path | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.backend = backend
        self.config = config or NeuroLintConfig()
        self.cwd = (cwd or Path.cwd()).resolve()
        self.store = store if store is not None else JsonProgressStore(self.cwd)
        self.backup_manager = backup_manager or BackupManager(
            directory=self.config.backup.directory,
            max_backups=self.config.backup.max_backups,
        )
        self.progress_callback = progress_callback
        self.gate = ConcurrencyGate(self.config.batch.max_concurrent)

        policy = RetryPolicy.from_config(self.config.retry, on_retry=self._on_retry)
        self._executor = RetryExecutor(
            ExponentialBackoffStrategy(policy),
            on_retry=policy.on_retry,
            sleep=sleep,
        )
        self.rate_limiter: SlidingWindowRateLimiter | None = None
        if self.config.api.requests_per_minute:
            self.rate_limiter = SlidingWindowRateLimiter(
                self.config.api.requests_per_minute, 60.0, sleep=sleep
            )

    # ------------------------------------------------------------------
    # File selection
    # ------------------------------------------------------------------

    async def select_files(
        self,
        resolved: list[str],
        confirm_resume: ConfirmResume | None = None,
    ) -> tuple[list[str], bool]:
        """Choose the working list for this run.

        Args:
            resolved: Files resolved from the current arguments.
            confirm_resume: Asked when an interrupted run exists. None means
                never resume.

        Returns:
            (working files, whether this run resumes an earlier one)
        """
        state = await resume_operation(FIX_OPERATION, self.store)
        if state is None:
            return resolved, False

        if confirm_resume is not None and confirm_resume(state):
            _logger.info(
                "runner.resuming",
                job_id=state.id,
                remaining=len(state.remaining_files),
            )
            return state.remaining_files, True

        _logger.info("runner.resume_declined", job_id=state.id)
        await self.store.delete()
        return resolved, False

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(
        self,
        files: list[str],
        options: FixOptions,
        *,
        confirm_resume: ConfirmResume | None = None,
    ) -> FixSummary:
        """Process ``files`` and return the summary.

        Setup errors are raised before this point (discovery, validation);
        per-file errors end up in the summary.
        """
        start = time.monotonic()
        working, resumed = await self.select_files(files, confirm_resume)
        tracker = ProgressTracker(
            FIX_OPERATION,
            working,
            self.store,
            callback=self.progress_callback,
        )
        summary = FixSummary(job_id=tracker.state.id, dry_run=options.dry_run, resumed=resumed)
        context = ExecutionContext(job_id=tracker.state.id, component="runner")

        with with_context(context):
            if options.check_health and not await self.backend.health_check():
                _logger.warning("runner.backend_unhealthy", backend=self.backend.name)

            await tracker.start()
            batch_size = self.config.batch.batch_size
            batches = [
                tracker.state.remaining_files[i:i + batch_size]
                for i in range(0, tracker.total_files, batch_size)
            ]
            for number, batch in enumerate(batches, start=1):
                _logger.info(
                    "runner.batch_start",
                    batch=number,
                    batches=len(batches),
                    files=len(batch),
                )
                summary.results.extend(await self._run_batch(batch, options, tracker, context))

            summary.duration_seconds = time.monotonic() - start
            await tracker.complete(success=summary.success)

        _logger.info(
            "runner.finished",
            job_id=summary.job_id,
            changed=len(summary.changed),
            unchanged=len(summary.unchanged),
            failed=len(summary.failed),
            dry_run=options.dry_run,
        )
        return summary

    async def _run_batch(
        self,
        batch: list[str],
        options: FixOptions,
        tracker: ProgressTracker,
        context: ExecutionContext,
    ) -> list[FileResult]:
        outcomes = await asyncio.gather(
            *(self._run_task(path, options, tracker, context) for path in batch),
            return_exceptions=True,
        )
        results: list[FileResult] = []
        for path, outcome in zip(batch, outcomes, strict=True):
            if isinstance(outcome, FileResult):
                results.append(outcome)
                continue
            if not isinstance(outcome, Exception):
                # Cancellation and interrupts end the run with the snapshot intact
                raise outcome
            # Bookkeeping itself failed; keep the batch going
            _logger.error(
                "runner.task_crashed",
                file_path=path,
                error_type=type(outcome).__name__,
                error=str(outcome),
            )
            await tracker.mark_failed(path, str(outcome))
            results.append(FileResult(file_path=path, success=False, error=str(outcome)))
        return results

    async def _run_task(
        self,
        file_path: str,
        options: FixOptions,
        tracker: ProgressTracker,
        context: ExecutionContext,
    ) -> FileResult:
        with with_context(context.with_file(file_path)):
            async with self.gate:
                result = await self.process_file(file_path, options)
            if result.success:
                await tracker.mark_completed(file_path)
            else:
                await tracker.mark_failed(file_path, result.error)
        return result

    async def process_file(self, file_path: str, options: FixOptions) -> FileResult:
        """Transform one file. Never raises for per-file failures."""
        start = time.monotonic()
        path = Path(file_path)
        try:
            # Decoded from bytes so line endings reach the service untranslated
            code = path.read_bytes().decode("utf-8")
            request = TransformRequest(
                code=code,
                file_path=self._display_path(path),
                layers=options.layers,
            )
            response = await self._executor.run(lambda: self._call_backend(request))
            changed = response.transformed != code

            backup_path: Path | None = None
            if changed and not options.dry_run:
                if options.backup:
                    backup_path = self.backup_manager.create_backup(path)
                atomic_write_text(path, response.transformed)
        except Exception as e:
            _logger.warning(
                "runner.file_failed",
                file_path=file_path,
                error_type=type(e).__name__,
                error=str(e),
            )
            return FileResult(
                file_path=file_path,
                success=False,
                error=str(e),
                duration_seconds=time.monotonic() - start,
            )

        _logger.debug("runner.file_done", file_path=file_path, changed=changed)
        return FileResult(
            file_path=file_path,
            success=True,
            changed=changed,
            backup_path=backup_path,
            layers=response.layers,
            duration_seconds=time.monotonic() - start,
        )

    async def _call_backend(self, request: TransformRequest) -> TransformResponse:
        if self.rate_limiter is None:
            return await self.backend.transform(request)
        return await with_rate_limit(lambda: self.backend.transform(request), self.rate_limiter)

    def _display_path(self, path: Path) -> str:
        try:
            return path.resolve().relative_to(self.cwd).as_posix()
        except ValueError:
            return str(path)

    def _on_retry(self, error: BaseException, attempt: int) -> None:
        _logger.info("runner.retrying", attempt=attempt, error=str(error))


__all__ = [
    "ConfirmResume",
    "FileResult",
    "FixOptions",
    "FixRunner",
    "FixSummary",
    "LayerStats",
]
