"""Progress tracking for batch fix jobs.

The ProgressTracker owns the mutable ProgressState of an in-flight job,
persists it through a ProgressStore after every transition, and reports
percentage and ETA to an optional callback (the CLI drives a rich progress
bar from it).

Persistence is best effort: stores swallow write errors, so a disk hiccup
degrades resumability but never interrupts the job itself.

Example:
    tracker = ProgressTracker("Fix", files, store=JsonProgressStore())
    await tracker.start()
    await tracker.mark_completed(files[0])
    await tracker.mark_failed(files[1], "HTTP 401")
    await tracker.complete(success=True)  # clears the snapshot
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from neurolint.core.checkpoint import JobStatus, ProgressState
from neurolint.core.logging import get_logger
from neurolint.state.base import ProgressStore
from neurolint.state.json_backend import JsonProgressStore

_logger = get_logger("progress")


def format_duration(seconds: float) -> str:
    """Format a duration as "0s", "42s", "3m 12s" or "1h 30m"."""
    if seconds < 1:
        return "0s"
    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


@dataclass
class ProgressInfo:
    """Point-in-time view of a job's progress.

    Attributes:
        operation: Job operation name.
        processed: Files that reached a terminal state.
        total: Files in the job.
        failed: Files that failed.
        percentage: processed / total, rounded to two decimals.
        elapsed_seconds: Time since start() was called.
        eta_seconds: Remaining time at the observed throughput (None until
            at least one file has been processed).
    """

    operation: str
    processed: int
    total: int
    failed: int
    percentage: float
    elapsed_seconds: float
    eta_seconds: float | None

    def format_status(self) -> str:
        """Status line such as ``Fix (4/10) 40.0% - ETA: 12s - 1 failed``."""
        text = f"{self.operation} ({self.processed}/{self.total}) {self.percentage:.1f}%"
        if self.eta_seconds and self.processed > 0:
            eta = format_duration(self.eta_seconds)
            if eta != "0s":
                text += f" - ETA: {eta}"
        if self.failed > 0:
            text += f" - {self.failed} failed"
        return text

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "processed": self.processed,
            "total": self.total,
            "failed": self.failed,
            "percentage": self.percentage,
            "elapsed_seconds": self.elapsed_seconds,
            "eta_seconds": self.eta_seconds,
        }


ProgressCallback = Callable[[ProgressInfo], None]


class ProgressTracker:
    """Tracks and persists the per-file progress of one batch job.

    Attributes:
        state: The underlying ProgressState.
        status: Job-level status (not_started -> running -> completed/failed).
        auto_save: Persist after every transition and clear the snapshot on
            completion.
        callback: Optional function called after every progress change.
    """

    def __init__(
        self,
        operation: str,
        files: list[str],
        store: ProgressStore | None = None,
        *,
        auto_save: bool = True,
        callback: ProgressCallback | None = None,
    ) -> None:
        self.state = ProgressState(operation, files)
        self.store = store if store is not None else JsonProgressStore()
        self.auto_save = auto_save
        self.callback = callback
        self.status = JobStatus.NOT_STARTED
        self._started_monotonic: float | None = None
        self._logger = _logger.bind(job_id=self.state.id, operation=operation)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Persist the initial snapshot and begin reporting progress."""
        self.status = JobStatus.RUNNING
        self._started_monotonic = time.monotonic()
        if self.auto_save:
            await self.save_state()
        self._logger.info("progress.started", total=self.state.total)
        self._notify()

    async def mark_completed(self, file: str) -> bool:
        """Record a successful file. No-op unless the file is still pending."""
        if not self.state.mark_completed(file):
            return False
        await self._after_transition()
        return True

    async def mark_failed(self, file: str, error: str | None = None) -> bool:
        """Record a failed file. No-op unless the file is still pending."""
        if not self.state.mark_failed(file, error):
            return False
        self._logger.debug("progress.file_failed", file_path=file, error=error)
        await self._after_transition()
        return True

    async def complete(self, success: bool = True) -> None:
        """Finish the job, log a summary, and clear the resume point."""
        self.status = JobStatus.COMPLETED if success else JobStatus.FAILED
        info = self.get_progress()
        self._logger.info(
            "progress.finished",
            success=success,
            duration=format_duration(info.elapsed_seconds),
            completed=self.state.completed,
            failed=self.state.failed,
            remaining=len(self.state.remaining_files),
        )
        self._notify()
        if self.auto_save:
            await self.cleanup()

    async def _after_transition(self) -> None:
        if self.auto_save:
            await self.save_state()
        self._notify()

    def _notify(self) -> None:
        if self.callback is not None:
            self.callback(self.get_progress())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def save_state(self) -> None:
        await self.store.save(self.state)

    async def load_state(self) -> ProgressState | None:
        return await self.store.load()

    async def cleanup(self) -> None:
        await self.store.delete()

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_progress(self) -> ProgressInfo:
        """Percentage and ETA derived from elapsed time and throughput."""
        state = self.state
        processed = state.processed
        percentage = (processed / state.total) * 100 if state.total else 0.0

        elapsed = 0.0
        if self._started_monotonic is not None:
            elapsed = time.monotonic() - self._started_monotonic

        eta: float | None = None
        if processed > 0 and elapsed > 0:
            rate = processed / elapsed
            eta = (state.total - processed) / rate

        return ProgressInfo(
            operation=state.operation,
            processed=processed,
            total=state.total,
            failed=state.failed,
            percentage=round(percentage, 2),
            elapsed_seconds=elapsed,
            eta_seconds=eta,
        )

    @property
    def total_files(self) -> int:
        return self.state.total

    @property
    def completed_files(self) -> list[str]:
        return self.state.completed_files

    @property
    def failed_files(self) -> list[str]:
        return self.state.failed_files

    @property
    def remaining_files(self) -> list[str]:
        return self.state.remaining_files


async def resume_operation(
    operation: str,
    store: ProgressStore | None = None,
) -> ProgressState | None:
    """Return a stored state that can seed a resumed run of ``operation``.

    Pure read with no side effects; deciding to resume is the caller's job.
    """
    store = store if store is not None else JsonProgressStore()
    state = await store.find_resumable(operation)
    if state is not None:
        _logger.info(
            "progress.resumable_found",
            job_id=state.id,
            operation=operation,
            completed=state.completed,
            failed=state.failed,
            remaining=len(state.remaining_files),
        )
    return state


__all__ = [
    "ProgressCallback",
    "ProgressInfo",
    "ProgressTracker",
    "format_duration",
    "resume_operation",
]
