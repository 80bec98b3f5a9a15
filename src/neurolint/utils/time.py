"""Time utilities for NeuroLint."""

import time
from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time as timezone-aware datetime.

    Replacement for the deprecated datetime.utcnow().
    """
    return datetime.now(UTC)


def epoch_millis() -> int:
    """Current wall-clock time in integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000
