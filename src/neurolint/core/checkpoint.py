"""Checkpoint and state management models.

Defines the progress state that gets persisted between runs so an
interrupted fix can resume where it stopped.

File status is a single ordered mapping from path to FileStatus, so the
pending/completed/failed views are disjoint and exhaustive by construction.
The on-disk snapshot keeps the three-list shape (``files.completed``,
``files.failed``, ``files.remaining``) and is validated when loaded.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field, model_validator

from neurolint.core.logging import get_logger
from neurolint.utils.time import utc_now

_logger = get_logger("checkpoint")


class FileStatus(str, Enum):
    """Status of a single file within a job."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class JobStatus(str, Enum):
    """Status of an entire job run."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class SnapshotFiles(BaseModel):
    completed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    remaining: list[str] = Field(default_factory=list)


class ProgressSnapshot(BaseModel):
    """Wire shape of the persisted progress file."""

    id: str
    operation: str
    total: int = Field(ge=0)
    completed: int = Field(ge=0)
    failed: int = Field(ge=0)
    start_time: datetime
    last_update: datetime
    files: SnapshotFiles
    errors: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_invariants(self) -> ProgressSnapshot:
        files = self.files
        all_paths = files.completed + files.failed + files.remaining
        if len(all_paths) != self.total:
            raise ValueError(
                f"file lists hold {len(all_paths)} entries but total is {self.total}"
            )
        if len(set(all_paths)) != len(all_paths):
            raise ValueError("a file appears in more than one collection")
        if self.completed != len(files.completed) or self.failed != len(files.failed):
            raise ValueError("counters disagree with file lists")
        return self


class ProgressState:
    """Mutable state of one batch job.

    Attributes:
        id: Unique job identifier (operation + creation epoch millis).
        operation: Logical job name used to match a resumable state.
        start_time: When the job was created.
        last_update: When a file last changed status.
        errors: Failure reason per failed file.
    """

    def __init__(
        self,
        operation: str,
        files: list[str],
        *,
        job_id: str | None = None,
        start_time: datetime | None = None,
    ) -> None:
        now = start_time or utc_now()
        self.id = job_id or f"{operation}-{int(now.timestamp() * 1000)}"
        self.operation = operation
        self.start_time = now
        self.last_update = now
        # dict.fromkeys de-duplicates while keeping input order
        self._status: dict[str, FileStatus] = dict.fromkeys(files, FileStatus.PENDING)
        self.errors: dict[str, str] = {}

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def total(self) -> int:
        return len(self._status)

    @property
    def completed(self) -> int:
        return len(self.completed_files)

    @property
    def failed(self) -> int:
        return len(self.failed_files)

    @property
    def processed(self) -> int:
        return self.total - len(self.remaining_files)

    def _with_status(self, status: FileStatus) -> list[str]:
        return [path for path, s in self._status.items() if s is status]

    @property
    def completed_files(self) -> list[str]:
        return self._with_status(FileStatus.COMPLETED)

    @property
    def failed_files(self) -> list[str]:
        return self._with_status(FileStatus.FAILED)

    @property
    def remaining_files(self) -> list[str]:
        return self._with_status(FileStatus.PENDING)

    @property
    def is_finished(self) -> bool:
        return FileStatus.PENDING not in self._status.values()

    def status_of(self, file: str) -> FileStatus | None:
        return self._status.get(file)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def mark_completed(self, file: str) -> bool:
        """Move a pending file to completed.

        Returns:
            True if the state changed, False for unknown or already terminal files.
        """
        return self._transition(file, FileStatus.COMPLETED)

    def mark_failed(self, file: str, reason: str | None = None) -> bool:
        """Move a pending file to failed, recording the reason."""
        changed = self._transition(file, FileStatus.FAILED)
        if changed:
            self.errors[file] = reason or "Unknown error"
        return changed

    def _transition(self, file: str, status: FileStatus) -> bool:
        if self._status.get(file) is not FileStatus.PENDING:
            _logger.debug(
                "transition_ignored",
                job_id=self.id,
                file_path=file,
                current=getattr(self._status.get(file), "value", None),
                requested=status.value,
            )
            return False
        self._status[file] = status
        self.last_update = utc_now()
        return True

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            id=self.id,
            operation=self.operation,
            total=self.total,
            completed=self.completed,
            failed=self.failed,
            start_time=self.start_time,
            last_update=self.last_update,
            files=SnapshotFiles(
                completed=self.completed_files,
                failed=self.failed_files,
                remaining=self.remaining_files,
            ),
            errors=dict(self.errors),
        )

    @classmethod
    def from_snapshot(cls, snapshot: ProgressSnapshot) -> ProgressState:
        """Rebuild state from a validated snapshot.

        Original input order is not stored; terminal files come first,
        followed by the remaining files in their recorded order.
        """
        files = snapshot.files
        state = cls(
            snapshot.operation,
            files.completed + files.failed + files.remaining,
            job_id=snapshot.id,
            start_time=snapshot.start_time,
        )
        for path in files.completed:
            state._status[path] = FileStatus.COMPLETED
        for path in files.failed:
            state._status[path] = FileStatus.FAILED
        state.errors = {p: r for p, r in snapshot.errors.items() if p in files.failed}
        state.last_update = snapshot.last_update
        return state


__all__ = [
    "FileStatus",
    "JobStatus",
    "ProgressSnapshot",
    "ProgressState",
    "SnapshotFiles",
]
