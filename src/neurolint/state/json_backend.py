"""JSON file-based progress store.

Keeps the progress snapshot in a single JSON file at a fixed,
job-independent path in the working directory.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from neurolint.core.checkpoint import ProgressSnapshot, ProgressState
from neurolint.core.constants import PROGRESS_FILE_NAME
from neurolint.core.logging import get_logger
from neurolint.state.base import ProgressStore
from neurolint.utils.fs import atomic_write_json

_logger = get_logger("state.json")


class JsonProgressStore(ProgressStore):
    """JSON file-based progress storage.

    File location: {base_dir}/.neurolint-progress.json
    """

    def __init__(self, base_dir: Path | None = None, file_name: str = PROGRESS_FILE_NAME):
        """Initialize JSON store.

        Args:
            base_dir: Directory holding the snapshot (default: current directory)
            file_name: Snapshot file name
        """
        self.base_dir = Path(base_dir) if base_dir is not None else Path.cwd()
        self.state_file = self.base_dir / file_name

    async def load(self) -> ProgressState | None:
        """Load state from the snapshot file.

        A missing, unreadable, or corrupt snapshot is treated as absent.
        """
        if not self.state_file.exists():
            return None

        try:
            with open(self.state_file, encoding="utf-8") as f:
                data = json.load(f)
            snapshot = ProgressSnapshot.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            _logger.warning(
                "snapshot_load_failed",
                path=str(self.state_file),
                error=str(e),
            )
            return None
        return ProgressState.from_snapshot(snapshot)

    async def save(self, state: ProgressState) -> None:
        """Save state atomically (temp file + rename).

        Write errors are logged and swallowed.
        """
        try:
            atomic_write_json(self.state_file, state.to_snapshot().model_dump(mode="json"))
        except OSError as e:
            _logger.warning(
                "snapshot_save_failed",
                path=str(self.state_file),
                job_id=state.id,
                error=str(e),
            )

    async def delete(self) -> bool:
        """Delete the snapshot file. Errors are logged and swallowed."""
        try:
            self.state_file.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            _logger.warning("snapshot_delete_failed", path=str(self.state_file), error=str(e))
            return False
        return True
