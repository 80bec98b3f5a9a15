"""File discovery and pre-flight validation for fix runs.

Discovery turns CLI arguments and configured patterns into a de-duplicated,
ordered list of absolute paths. Validation checks the whole set up front so
that a bad selection fails before the first remote call.

Checks:
    F001  too many files (error)
    F002  file not found or not a regular file (error)
    F003  file larger than the size ceiling (error)
    F004  file not readable (error)
    F101  unsupported extension (warning, error with extension_errors)
    F102  binary content (warning)
    F103  minified or generated code (warning)
"""

from __future__ import annotations

import glob
import re
from collections.abc import Iterable, Sequence
from fnmatch import fnmatch
from pathlib import Path

from neurolint.core.config import ValidationConfig
from neurolint.core.constants import (
    BINARY_SNIFF_CHARS,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_EXTENSIONS,
)
from neurolint.core.errors import FileValidationError, NoFilesFoundError
from neurolint.core.logging import get_logger
from neurolint.validation.base import ValidationIssue, ValidationResult, ValidationSeverity

_logger = get_logger("validation.files")

_BRACE_RE = re.compile(r"\{([^{}]*)\}")
# C0 controls outside \t..\r, plus DEL
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0E-\x1F\x7F]")


def expand_braces(pattern: str) -> list[str]:
    """Expand shell-style alternatives: ``*.{ts,tsx}`` -> ``*.ts``, ``*.tsx``.

    Nested groups are expanded from the innermost outwards.
    """
    match = _BRACE_RE.search(pattern)
    if match is None or "," not in match.group(1):
        return [pattern]
    head, tail = pattern[: match.start()], pattern[match.end():]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


def _extension_pattern(directory: str, extensions: Sequence[str], recursive: bool) -> str:
    exts = ",".join(ext.lstrip(".") for ext in extensions)
    middle = "**/" if recursive else ""
    return f"{directory.rstrip('/')}/{middle}*.{{{exts}}}"


def is_excluded(relative_path: str, exclude: Iterable[str]) -> bool:
    """Whether a project-relative POSIX path matches any exclude pattern.

    ``dist/**`` excludes ``dist`` at the project root and at any depth.
    """
    for pattern in exclude:
        for candidate in expand_braces(pattern):
            if fnmatch(relative_path, candidate) or fnmatch(relative_path, f"**/{candidate}"):
                return True
    return False


def _glob(pattern: str, cwd: Path) -> list[Path]:
    matches: list[Path] = []
    for expanded in expand_braces(pattern):
        base = Path(expanded)
        if base.is_absolute():
            found = glob.glob(expanded, recursive=True)
        else:
            found = glob.glob(expanded, root_dir=cwd, recursive=True)
        matches.extend(sorted(Path(p) if Path(p).is_absolute() else cwd / p for p in found))
    return [m for m in matches if m.is_file()]


def discover_files(
    patterns: Sequence[str],
    *,
    include: Sequence[str] = (),
    exclude: Sequence[str] = DEFAULT_EXCLUDE_PATTERNS,
    recursive: bool = False,
    extensions: Sequence[str] = DEFAULT_EXTENSIONS,
    cwd: Path | None = None,
) -> list[str]:
    """Resolve file arguments and patterns to absolute paths.

    Args:
        patterns: Files, directories, or glob patterns from the command line.
        include: Additional glob patterns to add.
        exclude: Glob patterns (relative to ``cwd``) to drop.
        recursive: Expand directory arguments to every matching file below them.
        extensions: Extensions searched when a directory is given.
        cwd: Base for relative patterns (default: process cwd).

    Returns:
        Absolute paths, first occurrence order, without duplicates.
    """
    base = (cwd or Path.cwd()).resolve()
    found: list[Path] = []

    for raw in [*patterns, *include]:
        path = Path(raw) if Path(raw).is_absolute() else base / raw
        if path.is_file():
            found.append(path)
        elif path.is_dir():
            found.extend(_glob(_extension_pattern(str(path), extensions, recursive), base))
        else:
            found.extend(_glob(raw, base))

    seen: set[str] = set()
    resolved: list[str] = []
    for path in found:
        absolute = str(path.resolve())
        if absolute in seen:
            continue
        seen.add(absolute)
        try:
            relative = Path(absolute).relative_to(base).as_posix()
        except ValueError:
            relative = Path(absolute).as_posix()
        if is_excluded(relative, exclude):
            continue
        resolved.append(absolute)

    _logger.debug("files_discovered", patterns=list(patterns), count=len(resolved))
    return resolved


def validate_single_file(path: str, config: ValidationConfig) -> list[ValidationIssue]:
    """Run the per-file checks for one path."""
    issues: list[ValidationIssue] = []
    file_path = Path(path)

    if not file_path.is_file():
        issues.append(ValidationIssue(
            check_id="F002",
            severity=ValidationSeverity.ERROR,
            message="File not found or not a regular file",
            file_path=path,
        ))
        return issues

    size = file_path.stat().st_size
    if size > config.max_file_size:
        issues.append(ValidationIssue(
            check_id="F003",
            severity=ValidationSeverity.ERROR,
            message=(
                f"File too large ({size / 1024 / 1024:.1f}MB, "
                f"max {config.max_file_size / 1024 / 1024:.1f}MB)"
            ),
            file_path=path,
        ))
        return issues

    allowed = {ext.lower() for ext in config.allowed_extensions}
    if file_path.suffix.lower() not in allowed:
        issues.append(ValidationIssue(
            check_id="F101",
            severity=(
                ValidationSeverity.ERROR if config.extension_errors else ValidationSeverity.WARNING
            ),
            message=f"Unsupported file extension: {file_path.suffix or '(none)'}",
            file_path=path,
            suggestion=f"Supported extensions: {', '.join(sorted(allowed))}",
        ))

    try:
        content = file_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        issues.append(ValidationIssue(
            check_id="F004",
            severity=ValidationSeverity.ERROR,
            message=f"Cannot read file: {e}",
            file_path=path,
        ))
        return issues

    if "\x00" in content or _CONTROL_CHARS.search(content[:BINARY_SNIFF_CHARS]):
        issues.append(ValidationIssue(
            check_id="F102",
            severity=ValidationSeverity.WARNING,
            message="File appears to be binary",
            file_path=path,
        ))
    if any(len(line) > config.long_line_threshold for line in content.splitlines()):
        issues.append(ValidationIssue(
            check_id="F103",
            severity=ValidationSeverity.WARNING,
            message="File appears to be minified or generated",
            file_path=path,
            suggestion="Exclude build output with --exclude",
        ))

    return issues


def validate_files(
    files: Sequence[str],
    config: ValidationConfig | None = None,
) -> ValidationResult:
    """Validate a resolved file set.

    Returns:
        The result with any warnings.

    Raises:
        NoFilesFoundError: If ``files`` is empty.
        FileValidationError: If any check reports an error. Every error is
            collected before raising.
    """
    config = config or ValidationConfig()
    if not files:
        raise NoFilesFoundError("No files found matching the specified patterns")

    result = ValidationResult(files=list(files))
    if len(files) > config.max_files:
        result.issues.append(ValidationIssue(
            check_id="F001",
            severity=ValidationSeverity.ERROR,
            message=f"Too many files ({len(files)}). Maximum allowed: {config.max_files}",
            suggestion="Narrow the patterns or raise validation.max_files",
        ))
    else:
        for path in files:
            result.issues.extend(validate_single_file(path, config))

    _logger.debug(
        "files_validated",
        count=len(files),
        errors=len(result.errors),
        warnings=len(result.warnings),
    )
    if not result.is_valid:
        raise FileValidationError(
            [i.format_short() for i in result.errors],
            [i.format_short() for i in result.warnings],
        )
    return result
