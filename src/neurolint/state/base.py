"""Abstract base for progress stores."""

from abc import ABC, abstractmethod

from neurolint.core.checkpoint import ProgressState


class ProgressStore(ABC):
    """Abstract base class for progress snapshot storage.

    A store holds at most one snapshot: the job currently running (or the
    last one interrupted) in the working directory. Implementations must
    never raise from ``save`` or ``delete`` because a persistence hiccup
    should not abort the batch job it is tracking.
    """

    @abstractmethod
    async def load(self) -> ProgressState | None:
        """Load the stored state.

        Returns:
            ProgressState if a valid snapshot exists, None otherwise
        """
        ...

    @abstractmethod
    async def save(self, state: ProgressState) -> None:
        """Persist state, replacing any previous snapshot.

        Args:
            state: Progress state to persist
        """
        ...

    @abstractmethod
    async def delete(self) -> bool:
        """Delete the stored snapshot.

        Returns:
            True if deleted, False if nothing was stored
        """
        ...

    async def find_resumable(self, operation: str) -> ProgressState | None:
        """Return the stored state if it can seed a resumed run.

        Pure read: a state qualifies when its operation matches and it still
        has remaining files. Nothing is modified either way.

        Args:
            operation: Operation name of the new invocation (e.g. "Fix")

        Returns:
            The resumable state, or None
        """
        state = await self.load()
        if state is None or state.operation != operation:
            return None
        if not state.remaining_files:
            return None
        return state
