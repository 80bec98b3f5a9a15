"""Progress snapshot stores."""

from neurolint.state.base import ProgressStore
from neurolint.state.json_backend import JsonProgressStore
from neurolint.state.memory import InMemoryProgressStore

__all__ = ["InMemoryProgressStore", "JsonProgressStore", "ProgressStore"]
