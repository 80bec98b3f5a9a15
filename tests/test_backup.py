"""Tests for the backup manager."""

import os
from pathlib import Path

import pytest

from neurolint.core.constants import BACKUP_DIR_NAME
from neurolint.core.errors import BackupError
from neurolint.execution.backup import BackupManager, extract_timestamp


@pytest.fixture
def source(tmp_path: Path) -> Path:
    path = tmp_path / "app.ts"
    path.write_text("const x = 1;\n")
    return path


class TestCreateBackup:
    def test_copies_verbatim_into_quarantine(self, source: Path):
        manager = BackupManager()
        backup = manager.create_backup(source)

        assert backup.parent == source.parent / BACKUP_DIR_NAME
        assert backup.name.startswith("app.ts.backup.")
        assert backup.read_text() == "const x = 1;\n"
        assert extract_timestamp(backup) > 0

    def test_names_are_unique_and_increasing(self, source: Path):
        manager = BackupManager()
        first = manager.create_backup(source)
        second = manager.create_backup(source)

        assert first != second
        assert extract_timestamp(second) > extract_timestamp(first)

    def test_shared_directory(self, source: Path, tmp_path: Path):
        shared = tmp_path / "backups"
        backup = BackupManager(directory=shared).create_backup(source)
        assert backup.parent == shared

    def test_missing_source_raises(self, tmp_path: Path):
        with pytest.raises(BackupError):
            BackupManager().create_backup(tmp_path / "missing.ts")

    def test_invalid_max_backups(self):
        with pytest.raises(ValueError):
            BackupManager(max_backups=0)


class TestRetention:
    def test_keeps_newest_max_backups(self, source: Path):
        manager = BackupManager(max_backups=3)
        created = [manager.create_backup(source) for _ in range(6)]

        remaining = manager.list_backups(source)

        assert remaining == list(reversed(created[-3:]))
        for old in created[:3]:
            assert not old.exists()

    def test_other_files_untouched(self, source: Path, tmp_path: Path):
        other = tmp_path / "app.tsx"
        other.write_text("other")
        manager = BackupManager(max_backups=1)

        other_backup = manager.create_backup(other)
        manager.create_backup(source)
        manager.create_backup(source)

        assert other_backup.exists()
        assert len(manager.list_backups(source)) == 1
        assert manager.list_backups(other) == [other_backup]

    def test_cleanup_failure_is_not_raised(self, source: Path, monkeypatch: pytest.MonkeyPatch):
        manager = BackupManager(max_backups=1)
        manager.create_backup(source)

        def failing_unlink(self, missing_ok=False):
            raise PermissionError("read-only")

        monkeypatch.setattr(Path, "unlink", failing_unlink)
        backup = manager.create_backup(source)

        assert backup.exists()
        assert len(manager.list_backups(source)) == 2

    def test_cleanup_returns_removed(self, source: Path):
        manager = BackupManager(max_backups=5)
        for _ in range(3):
            manager.create_backup(source)
        manager.max_backups = 1

        removed = manager.cleanup_old_backups(source.parent / BACKUP_DIR_NAME, source.name)

        assert len(removed) == 2


class TestListAndRestore:
    def test_list_without_backups(self, source: Path):
        assert BackupManager().list_backups(source) == []

    def test_restore_to_original(self, source: Path):
        manager = BackupManager()
        backup = manager.create_backup(source)
        source.write_text("broken")

        restored = manager.restore_backup(backup)

        assert restored == source
        assert source.read_text() == "const x = 1;\n"

    def test_restore_to_target(self, source: Path, tmp_path: Path):
        manager = BackupManager()
        backup = manager.create_backup(source)
        target = tmp_path / "copy.ts"

        manager.restore_backup(backup, target)

        assert target.read_text() == "const x = 1;\n"

    def test_restore_missing_backup_raises(self, tmp_path: Path):
        with pytest.raises(BackupError):
            BackupManager().restore_backup(tmp_path / BACKUP_DIR_NAME / "x.ts.backup.1")

    def test_original_path_for(self, tmp_path: Path):
        backup = tmp_path / "src" / BACKUP_DIR_NAME / "a.ts.backup.1700000000000"
        assert BackupManager().original_path_for(backup) == tmp_path / "src" / "a.ts"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permissions")
    def test_backup_preserves_mode(self, source: Path):
        source.chmod(0o640)
        backup = BackupManager().create_backup(source)
        assert backup.stat().st_mode & 0o777 == 0o640
