"""Atomic file writes.

New content is written to a sibling temporary file and renamed over the
target, so an interrupted write never leaves a partially written target.
The rename is the only step that makes the new content visible.
"""

from __future__ import annotations

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any


def atomic_write_text(path: Path, content: str, encoding: str = "utf-8") -> None:
    """Atomically replace ``path`` with ``content``.

    The target's permission bits are preserved when it already exists.

    Raises:
        OSError: If the temporary file cannot be written or renamed. The
            temporary file is removed and the target is left untouched.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def atomic_write_json(path: Path, data: Any) -> None:
    """Atomically write ``data`` as indented JSON."""
    atomic_write_text(path, json.dumps(data, indent=2, default=str) + "\n")


__all__ = ["atomic_write_json", "atomic_write_text"]
