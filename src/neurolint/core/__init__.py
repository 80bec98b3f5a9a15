"""Core domain models and configuration."""

from neurolint.core.checkpoint import FileStatus, JobStatus, ProgressSnapshot, ProgressState
from neurolint.core.config import NeuroLintConfig, RetryConfig, load_config
from neurolint.core.errors import (
    BackupError,
    ConfigurationError,
    FileValidationError,
    NeuroLintError,
    NoFilesFoundError,
    SetupError,
    TransformError,
    is_retryable_error,
)

__all__ = [
    "BackupError",
    "ConfigurationError",
    "FileStatus",
    "FileValidationError",
    "JobStatus",
    "NeuroLintConfig",
    "NeuroLintError",
    "NoFilesFoundError",
    "ProgressSnapshot",
    "ProgressState",
    "RetryConfig",
    "SetupError",
    "TransformError",
    "is_retryable_error",
    "load_config",
]
