"""In-memory progress store for testing.

Round-trips through the snapshot model, like the JSON store does, so tests
see the same view a resumed run would.
"""

from neurolint.core.checkpoint import ProgressSnapshot, ProgressState
from neurolint.state.base import ProgressStore


class InMemoryProgressStore(ProgressStore):
    """In-memory progress store for testing.

    Attributes:
        snapshot: The last saved snapshot, if any.
        save_count: Number of save() calls, for asserting persistence frequency.
    """

    def __init__(self) -> None:
        self.snapshot: ProgressSnapshot | None = None
        self.save_count = 0

    async def load(self) -> ProgressState | None:
        if self.snapshot is None:
            return None
        return ProgressState.from_snapshot(self.snapshot)

    async def save(self, state: ProgressState) -> None:
        self.snapshot = state.to_snapshot()
        self.save_count += 1

    async def delete(self) -> bool:
        existed = self.snapshot is not None
        self.snapshot = None
        return existed
