"""Base types for file validation.

Defines the core abstractions:
- ValidationSeverity: Error/Warning classification
- ValidationIssue: A single issue found for one file (or the whole set)
- ValidationResult: All issues for a resolved file set
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ValidationSeverity(str, Enum):
    """Severity level for validation issues.

    - ERROR: Blocks the run before any file is processed
    - WARNING: Reported, the file is still processed
    """

    ERROR = "error"
    WARNING = "warning"


@dataclass
class ValidationIssue:
    """A single validation issue.

    Attributes:
        check_id: Short identifier of the check (e.g. F001)
        severity: ERROR or WARNING
        message: Human-readable description of the issue
        file_path: File the issue refers to (None for set-wide issues)
        suggestion: How to fix the issue
    """

    check_id: str
    severity: ValidationSeverity
    message: str
    file_path: str | None = None
    suggestion: str | None = None

    def format_short(self) -> str:
        """Format as a single-line summary."""
        loc = f"{self.file_path}: " if self.file_path else ""
        return f"[{self.check_id}] {loc}{self.message}"


@dataclass
class ValidationResult:
    """Issues found while validating a file set."""

    files: list[str] = field(default_factory=list)
    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.ERROR]

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [i for i in self.issues if i.severity == ValidationSeverity.WARNING]

    @property
    def is_valid(self) -> bool:
        return not self.errors
