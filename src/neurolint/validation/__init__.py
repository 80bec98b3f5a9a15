"""Pre-flight discovery and validation of the files a fix run will touch.

Example usage:
    from neurolint.validation import discover_files, validate_files

    files = discover_files(["src"], recursive=True)
    result = validate_files(files)
    for issue in result.warnings:
        print(issue.format_short())
"""

from neurolint.validation.base import (
    ValidationIssue,
    ValidationResult,
    ValidationSeverity,
)
from neurolint.validation.files import (
    discover_files,
    expand_braces,
    is_excluded,
    validate_files,
    validate_single_file,
)

__all__ = [
    "ValidationIssue",
    "ValidationResult",
    "ValidationSeverity",
    "discover_files",
    "expand_braces",
    "is_excluded",
    "validate_files",
    "validate_single_file",
]
