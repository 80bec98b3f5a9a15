"""Tests for progress snapshot stores."""

import json
from pathlib import Path

import pytest

from neurolint.core.checkpoint import ProgressState
from neurolint.core.constants import PROGRESS_FILE_NAME
from neurolint.state import InMemoryProgressStore, JsonProgressStore


@pytest.fixture
def store(tmp_path: Path) -> JsonProgressStore:
    return JsonProgressStore(tmp_path)


@pytest.mark.asyncio
class TestJsonProgressStore:
    """Tests for JsonProgressStore."""

    async def test_load_missing_returns_none(self, store: JsonProgressStore):
        assert await store.load() is None

    async def test_save_and_load(self, store: JsonProgressStore):
        state = ProgressState("Fix", ["a", "b"])
        state.mark_failed("a", "HTTP 401")
        await store.save(state)

        assert store.state_file.name == PROGRESS_FILE_NAME
        loaded = await store.load()
        assert loaded is not None
        assert loaded.id == state.id
        assert loaded.failed_files == ["a"]
        assert loaded.remaining_files == ["b"]
        assert loaded.errors == {"a": "HTTP 401"}

    async def test_saved_file_is_snake_case_json(self, store: JsonProgressStore):
        await store.save(ProgressState("Fix", ["a"]))
        data = json.loads(store.state_file.read_text())
        assert "start_time" in data
        assert "last_update" in data
        assert data["files"]["remaining"] == ["a"]

    async def test_no_temp_files_left_behind(self, store: JsonProgressStore, tmp_path: Path):
        await store.save(ProgressState("Fix", ["a"]))
        await store.save(ProgressState("Fix", ["a", "b"]))
        assert [p.name for p in tmp_path.iterdir()] == [PROGRESS_FILE_NAME]

    async def test_corrupt_json_treated_as_absent(self, store: JsonProgressStore):
        store.state_file.write_text("{not json")
        assert await store.load() is None

    async def test_invariant_violation_treated_as_absent(self, store: JsonProgressStore):
        await store.save(ProgressState("Fix", ["a", "b"]))
        data = json.loads(store.state_file.read_text())
        data["files"]["completed"] = ["a"]  # "a" now also remains
        data["completed"] = 1
        data["total"] = 3
        store.state_file.write_text(json.dumps(data))

        assert await store.load() is None

    async def test_delete(self, store: JsonProgressStore):
        await store.save(ProgressState("Fix", ["a"]))
        assert await store.delete() is True
        assert not store.state_file.exists()
        assert await store.delete() is False

    async def test_save_error_is_swallowed(self, tmp_path: Path):
        store = JsonProgressStore(tmp_path / "does-not-exist")
        await store.save(ProgressState("Fix", ["a"]))
        assert await store.load() is None


@pytest.mark.asyncio
class TestFindResumable:
    """Tests for ProgressStore.find_resumable."""

    async def test_matching_operation_with_remaining(self):
        store = InMemoryProgressStore()
        state = ProgressState("Fix", ["a", "b"])
        state.mark_completed("a")
        await store.save(state)

        found = await store.find_resumable("Fix")
        assert found is not None
        assert found.remaining_files == ["b"]

    async def test_other_operation_ignored(self):
        store = InMemoryProgressStore()
        await store.save(ProgressState("Lint", ["a"]))
        assert await store.find_resumable("Fix") is None

    async def test_finished_state_not_resumable(self):
        store = InMemoryProgressStore()
        state = ProgressState("Fix", ["a"])
        state.mark_completed("a")
        await store.save(state)
        assert await store.find_resumable("Fix") is None

    async def test_lookup_has_no_side_effects(self):
        store = InMemoryProgressStore()
        await store.save(ProgressState("Lint", ["a"]))
        await store.find_resumable("Fix")
        assert store.snapshot is not None
        assert store.save_count == 1
