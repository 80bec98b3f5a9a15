"""Exception hierarchy for NeuroLint.

Setup errors abort a run before any file is touched. Per-file errors
(TransformError, BackupError) are caught by the runner and turned into a
failed FileResult so the rest of the batch keeps going.
"""

from __future__ import annotations

from neurolint.core.constants import RETRYABLE_ERROR_CODES, RETRYABLE_STATUS_CODES


class NeuroLintError(Exception):
    """Base exception for all NeuroLint errors."""


class SetupError(NeuroLintError):
    """Raised when a run cannot start. Fatal to the whole job."""


class ConfigurationError(SetupError):
    """Raised for unreadable or invalid configuration, or missing credentials."""


class FileValidationError(SetupError):
    """Raised when the resolved file set fails validation.

    Attributes:
        errors: Every validation error found, not only the first.
        warnings: Warnings collected alongside the errors.
    """

    def __init__(self, errors: list[str], warnings: list[str] | None = None) -> None:
        self.errors = list(errors)
        self.warnings = list(warnings or [])
        summary = errors[0] if errors else "File validation failed"
        if len(errors) > 1:
            summary += f" (and {len(errors) - 1} more)"
        super().__init__(summary)


class NoFilesFoundError(SetupError):
    """Raised when the file patterns match nothing."""


class TransformError(NeuroLintError):
    """Raised when the remote transform call fails.

    Attributes:
        status_code: HTTP status of a non-2xx response, if any.
        code: Transport failure code (ECONNRESET, ETIMEDOUT, ...), if any.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.code = code
        super().__init__(message)


class BackupError(NeuroLintError):
    """Raised when a backup cannot be created or restored."""


def is_retryable_error(
    error: BaseException | None,
    retryable_statuses: frozenset[int] = RETRYABLE_STATUS_CODES,
) -> bool:
    """Default retry predicate.

    True for transient transport codes and for HTTP 408/429/5xx gateway
    statuses. Authentication failures (401/403) and other client errors are
    not retryable.

    Args:
        error: The failure raised by the operation.
        retryable_statuses: Status codes considered transient.

    Returns:
        Whether another attempt may succeed.
    """
    if error is None:
        return False

    code = getattr(error, "code", None)
    if isinstance(code, str) and code in RETRYABLE_ERROR_CODES:
        return True

    status = getattr(error, "status_code", None)
    return isinstance(status, int) and status in retryable_statuses


__all__ = [
    "BackupError",
    "ConfigurationError",
    "FileValidationError",
    "NeuroLintError",
    "NoFilesFoundError",
    "SetupError",
    "TransformError",
    "is_retryable_error",
]
