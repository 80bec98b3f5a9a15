"""Tests for neurolint.core.checkpoint module."""

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from neurolint.core.checkpoint import (
    FileStatus,
    JobStatus,
    ProgressSnapshot,
    ProgressState,
)


def _assert_partition(state: ProgressState) -> None:
    completed = state.completed_files
    failed = state.failed_files
    remaining = state.remaining_files
    assert len(completed) + len(failed) + len(remaining) == state.total
    assert not set(completed) & set(failed)
    assert not set(completed) & set(remaining)
    assert not set(failed) & set(remaining)
    assert state.completed == len(completed)
    assert state.failed == len(failed)


class TestStatusEnums:
    """Tests for FileStatus and JobStatus enums."""

    def test_file_status_values(self):
        assert FileStatus.PENDING == "pending"
        assert FileStatus.COMPLETED == "completed"
        assert FileStatus.FAILED == "failed"

    def test_job_status_values(self):
        assert JobStatus.NOT_STARTED == "not_started"
        assert JobStatus.RUNNING == "running"
        assert JobStatus.COMPLETED == "completed"
        assert JobStatus.FAILED == "failed"


class TestProgressState:
    """Tests for ProgressState transitions and views."""

    def test_initial_state_all_pending(self):
        state = ProgressState("Fix", ["a", "b", "c"])
        assert state.total == 3
        assert state.completed == 0
        assert state.failed == 0
        assert state.remaining_files == ["a", "b", "c"]
        assert state.id.startswith("Fix-")
        assert state.start_time.tzinfo is not None

    def test_duplicate_inputs_collapsed(self):
        state = ProgressState("Fix", ["a", "b", "a"])
        assert state.total == 2
        assert state.remaining_files == ["a", "b"]

    def test_id_uses_epoch_millis(self):
        start = datetime(2024, 1, 1, tzinfo=UTC)
        state = ProgressState("Fix", ["a"], start_time=start)
        assert state.id == f"Fix-{int(start.timestamp() * 1000)}"

    def test_partition_holds_after_every_mutation(self):
        files = [f"f{i}" for i in range(6)]
        state = ProgressState("Fix", files)
        _assert_partition(state)
        for i, path in enumerate(files):
            if i % 2:
                state.mark_failed(path, "boom")
            else:
                state.mark_completed(path)
            _assert_partition(state)
        assert state.is_finished

    def test_remaining_preserves_input_order(self):
        state = ProgressState("Fix", ["c", "a", "b"])
        state.mark_completed("a")
        assert state.remaining_files == ["c", "b"]

    def test_mark_completed_is_idempotent(self):
        state = ProgressState("Fix", ["a", "b"])
        assert state.mark_completed("a") is True
        assert state.mark_completed("a") is False
        assert state.completed == 1
        assert state.completed_files == ["a"]

    def test_mark_failed_after_completed_is_noop(self):
        state = ProgressState("Fix", ["a"])
        state.mark_completed("a")
        assert state.mark_failed("a", "late failure") is False
        assert state.failed == 0
        assert "a" not in state.errors
        assert state.status_of("a") == FileStatus.COMPLETED

    def test_unknown_file_is_noop(self):
        state = ProgressState("Fix", ["a"])
        assert state.mark_completed("zzz") is False
        assert state.total == 1

    def test_failure_reason_recorded(self):
        state = ProgressState("Fix", ["a"])
        state.mark_failed("a", "HTTP 401")
        assert state.errors == {"a": "HTTP 401"}

    def test_failure_without_reason(self):
        state = ProgressState("Fix", ["a"])
        state.mark_failed("a")
        assert state.errors["a"] == "Unknown error"

    def test_last_update_advances(self):
        start = datetime(2024, 1, 1, tzinfo=UTC)
        state = ProgressState("Fix", ["a"], start_time=start)
        state.mark_completed("a")
        assert state.last_update > start


class TestSnapshot:
    """Tests for the persisted snapshot shape."""

    def test_snapshot_shape(self):
        state = ProgressState("Fix", ["a", "b", "c"])
        state.mark_completed("a")
        state.mark_failed("b", "HTTP 401")

        data = state.to_snapshot().model_dump(mode="json")

        assert set(data) == {
            "id", "operation", "total", "completed", "failed",
            "start_time", "last_update", "files", "errors",
        }
        assert data["files"] == {"completed": ["a"], "failed": ["b"], "remaining": ["c"]}
        assert data["errors"] == {"b": "HTTP 401"}
        assert data["total"] == 3
        assert data["completed"] == 1
        assert data["failed"] == 1

    def test_from_snapshot_restores_state(self):
        state = ProgressState("Fix", ["a", "b", "c"])
        state.mark_completed("a")
        state.mark_failed("b", "boom")

        restored = ProgressState.from_snapshot(state.to_snapshot())

        assert restored.id == state.id
        assert restored.operation == "Fix"
        assert restored.completed_files == ["a"]
        assert restored.failed_files == ["b"]
        assert restored.remaining_files == ["c"]
        assert restored.errors == {"b": "boom"}
        _assert_partition(restored)

    def test_overlapping_lists_rejected(self):
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            ProgressSnapshot(
                id="Fix-1",
                operation="Fix",
                total=2,
                completed=1,
                failed=0,
                start_time=now,
                last_update=now,
                files={"completed": ["a"], "failed": [], "remaining": ["a"]},
            )

    def test_counter_mismatch_rejected(self):
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            ProgressSnapshot(
                id="Fix-1",
                operation="Fix",
                total=2,
                completed=2,
                failed=0,
                start_time=now,
                last_update=now,
                files={"completed": ["a"], "failed": [], "remaining": ["b"]},
            )

    def test_total_mismatch_rejected(self):
        now = datetime.now(UTC)
        with pytest.raises(ValidationError):
            ProgressSnapshot(
                id="Fix-1",
                operation="Fix",
                total=5,
                completed=0,
                failed=0,
                start_time=now,
                last_update=now,
                files={"completed": [], "failed": [], "remaining": ["a"]},
            )
