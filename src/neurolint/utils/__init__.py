"""Utility modules for NeuroLint."""

from neurolint.utils.fs import atomic_write_json, atomic_write_text
from neurolint.utils.time import epoch_millis, utc_now

__all__ = ["atomic_write_json", "atomic_write_text", "epoch_millis", "utc_now"]
