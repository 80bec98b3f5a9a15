"""Execution layer: batching, concurrency, retry, backups and progress."""

from neurolint.execution.backup import BackupManager
from neurolint.execution.gate import ConcurrencyGate
from neurolint.execution.progress import (
    ProgressInfo,
    ProgressTracker,
    format_duration,
    resume_operation,
)
from neurolint.execution.rate_limiter import SlidingWindowRateLimiter, with_rate_limit
from neurolint.execution.retry_strategy import (
    ExponentialBackoffStrategy,
    RetryExecutor,
    RetryPolicy,
    RetryStrategy,
    with_retry,
)
from neurolint.execution.runner import (
    FileResult,
    FixOptions,
    FixRunner,
    FixSummary,
    LayerStats,
)

__all__ = [
    "BackupManager",
    "ConcurrencyGate",
    "ExponentialBackoffStrategy",
    "FileResult",
    "FixOptions",
    "FixRunner",
    "FixSummary",
    "LayerStats",
    "ProgressInfo",
    "ProgressTracker",
    "RetryExecutor",
    "RetryPolicy",
    "RetryStrategy",
    "SlidingWindowRateLimiter",
    "format_duration",
    "resume_operation",
    "with_retry",
    "with_rate_limit",
]
