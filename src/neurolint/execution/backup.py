"""Backup management for files rewritten by a fix run.

Before a file is overwritten, it is copied verbatim into a quarantine
directory (``.neurolint-backups`` beside the file unless a shared directory
is configured) as ``<file-name>.backup.<epoch-millis>``. After each copy the
backups for that exact file name are rotated so that only the newest
``max_backups`` remain.

A failed copy raises BackupError: the caller must not overwrite the
original without its safety net. A failed rotation only logs a warning.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

from neurolint.core.constants import BACKUP_DIR_NAME, MAX_BACKUPS
from neurolint.core.errors import BackupError
from neurolint.core.logging import get_logger
from neurolint.utils.time import epoch_millis

_logger = get_logger("backup")

BACKUP_MARKER = ".backup."
_TIMESTAMP_RE = re.compile(r"\.backup\.(\d+)$")


def extract_timestamp(backup_path: Path | str) -> int:
    """Epoch millis embedded in a backup file name (0 when absent)."""
    match = _TIMESTAMP_RE.search(Path(backup_path).name)
    return int(match.group(1)) if match else 0


def _is_backup_of(candidate: str, file_name: str) -> bool:
    prefix = f"{file_name}{BACKUP_MARKER}"
    return candidate.startswith(prefix) and candidate[len(prefix):].isdigit()


class BackupManager:
    """Creates, rotates, lists and restores file backups.

    Attributes:
        directory: Shared backup directory, or None for per-directory quarantine.
        max_backups: Backups retained per original file name.
    """

    def __init__(self, directory: Path | None = None, max_backups: int = MAX_BACKUPS) -> None:
        if max_backups < 1:
            raise ValueError(f"max_backups must be >= 1, got {max_backups}")
        self.directory = Path(directory) if directory is not None else None
        self.max_backups = max_backups

    def backup_dir_for(self, file_path: Path) -> Path:
        """Quarantine directory used for ``file_path``."""
        if self.directory is not None:
            return self.directory
        return Path(file_path).parent / BACKUP_DIR_NAME

    def create_backup(self, file_path: Path) -> Path:
        """Copy ``file_path`` into its quarantine directory and rotate old copies.

        Returns:
            Path of the new backup.

        Raises:
            BackupError: If the backup could not be written.
        """
        file_path = Path(file_path)
        backup_dir = self.backup_dir_for(file_path)
        try:
            backup_dir.mkdir(parents=True, exist_ok=True)
            backup_path = self._unique_backup_path(backup_dir, file_path.name)
            shutil.copy2(file_path, backup_path)
        except OSError as e:
            raise BackupError(f"Failed to create backup for {file_path}: {e}") from e

        _logger.debug("backup.created", file_path=str(file_path), backup_path=str(backup_path))
        self.cleanup_old_backups(backup_dir, file_path.name)
        return backup_path

    def _unique_backup_path(self, backup_dir: Path, file_name: str) -> Path:
        # Two backups of one file within the same millisecond get distinct names
        stamp = epoch_millis()
        latest = max(
            (extract_timestamp(p) for p in self._backups_in(backup_dir, file_name)),
            default=0,
        )
        stamp = max(stamp, latest + 1)
        candidate = backup_dir / f"{file_name}{BACKUP_MARKER}{stamp}"
        while candidate.exists():
            stamp += 1
            candidate = backup_dir / f"{file_name}{BACKUP_MARKER}{stamp}"
        return candidate

    @staticmethod
    def _backups_in(backup_dir: Path, file_name: str) -> list[Path]:
        if not backup_dir.is_dir():
            return []
        backups = [
            entry for entry in backup_dir.iterdir()
            if entry.is_file() and _is_backup_of(entry.name, file_name)
        ]
        return sorted(backups, key=extract_timestamp, reverse=True)

    def cleanup_old_backups(self, backup_dir: Path, file_name: str) -> list[Path]:
        """Delete backups of ``file_name`` beyond the newest ``max_backups``.

        Never raises; failures are logged as warnings.

        Returns:
            Backups that were removed.
        """
        removed: list[Path] = []
        try:
            stale = self._backups_in(Path(backup_dir), file_name)[self.max_backups:]
            for path in stale:
                path.unlink()
                removed.append(path)
        except OSError as e:
            _logger.warning(
                "backup.cleanup_failed",
                backup_dir=str(backup_dir),
                file_name=file_name,
                error=str(e),
            )
        if removed:
            _logger.debug("backup.rotated", file_name=file_name, removed=len(removed))
        return removed

    def list_backups(self, file_path: Path) -> list[Path]:
        """Backups of ``file_path``, newest first."""
        file_path = Path(file_path)
        try:
            return self._backups_in(self.backup_dir_for(file_path), file_path.name)
        except OSError:
            return []

    def restore_backup(self, backup_path: Path, target: Path | None = None) -> Path:
        """Copy a backup back over its original location.

        Args:
            backup_path: Backup file to restore.
            target: Destination; defaults to the original path derived from
                the backup's name and location.

        Returns:
            The path that was restored.

        Raises:
            BackupError: If the backup is missing or cannot be copied.
        """
        backup_path = Path(backup_path)
        if target is None:
            target = self.original_path_for(backup_path)
        try:
            shutil.copy2(backup_path, target)
        except OSError as e:
            raise BackupError(f"Failed to restore backup {backup_path}: {e}") from e
        _logger.info("backup.restored", backup_path=str(backup_path), target=str(target))
        return Path(target)

    def original_path_for(self, backup_path: Path) -> Path:
        """Derive the original file path from a backup path."""
        backup_path = Path(backup_path)
        original_name = _TIMESTAMP_RE.sub("", backup_path.name)
        parent = backup_path.parent
        if self.directory is None and parent.name == BACKUP_DIR_NAME:
            parent = parent.parent
        return parent / original_name


__all__ = ["BACKUP_MARKER", "BackupManager", "extract_timestamp"]
