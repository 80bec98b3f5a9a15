"""Shared utilities for NeuroLint CLI commands.

This module contains helpers used across multiple CLI command modules:
- Output level and logging configuration set by the global options
- Config loading with user-facing error reporting
- Backend and progress store construction
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Literal

import typer
from rich.console import Console

from neurolint.backends.http import HttpTransformBackend
from neurolint.core.config import NeuroLintConfig, load_config
from neurolint.core.errors import ConfigurationError
from neurolint.core.logging import configure_logging, get_logger
from neurolint.state.json_backend import JsonProgressStore

_logger = get_logger("cli")


class ErrorMessages:
    """Constants for CLI error messages."""

    CONFIG_LOAD_ERROR = "Error loading config"
    MISSING_API_KEY = "No API key configured"
    VALIDATION_FAILED = "File validation failed"


# =============================================================================
# Output level management
# =============================================================================


class OutputLevel(str, Enum):
    """Output verbosity level."""

    QUIET = "quiet"  # Errors only
    NORMAL = "normal"
    VERBOSE = "verbose"


_output_level: OutputLevel = OutputLevel.NORMAL


def set_output_level(level: OutputLevel) -> None:
    global _output_level
    _output_level = level


def is_verbose() -> bool:
    return _output_level == OutputLevel.VERBOSE


def is_quiet() -> bool:
    return _output_level == OutputLevel.QUIET


# =============================================================================
# Logging configuration
# =============================================================================


@dataclass
class CliLoggingConfig:
    """Logging options collected from the global CLI flags."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: Path | None = None
    format: Literal["json", "console", "both"] = "console"
    configured: bool = False


_log_config = CliLoggingConfig()


def set_log_level(level: str) -> None:
    _log_config.level = level.upper()  # type: ignore[assignment]


def set_log_file(path: Path | None) -> None:
    """Set the log file path.

    Structured logs go to the file; rich output (progress bar, tables)
    still goes to the terminal.
    """
    _log_config.file = path


def set_log_format(fmt: str) -> None:
    _log_config.format = fmt  # type: ignore[assignment]


def configure_global_logging(console: Console) -> None:
    """Configure logging from the global CLI options, once per session.

    Raises:
        typer.Exit: If the logging options are inconsistent.
    """
    if _log_config.configured:
        return

    level = _log_config.level
    if is_verbose() and level == "WARNING":
        level = "INFO"

    try:
        configure_logging(
            level=level,
            format=_log_config.format,
            file_path=_log_config.file,
        )
        _log_config.configured = True
    except (ValueError, AttributeError) as e:
        console.print(f"[red]Logging configuration error:[/red] {e}")
        raise typer.Exit(1) from None


def reset_logging_state() -> None:
    """Reset CLI logging and output state (used by tests)."""
    global _output_level
    _log_config.level = "WARNING"
    _log_config.file = None
    _log_config.format = "console"
    _log_config.configured = False
    _output_level = OutputLevel.NORMAL


# =============================================================================
# Config and backend helpers
# =============================================================================


def load_cli_config(console: Console, config_path: Path | None = None) -> NeuroLintConfig:
    """Load configuration, exiting with status 1 on error."""
    try:
        return load_config(config_path)
    except ConfigurationError as e:
        console.print(f"[red]{ErrorMessages.CONFIG_LOAD_ERROR}:[/red] {e}")
        raise typer.Exit(1) from None


def create_backend_from_config(config: NeuroLintConfig) -> HttpTransformBackend:
    """Create the transform backend for a loaded configuration.

    Raises:
        ConfigurationError: If no API key is configured.
    """
    if not config.api_key:
        raise ConfigurationError(
            f"{ErrorMessages.MISSING_API_KEY}. Set NEUROLINT_API_KEY or apiKey in .neurolint.json"
        )
    return HttpTransformBackend(
        api_url=config.api.url,
        api_key=config.api_key,
        timeout=config.api.timeout,
    )


def create_progress_store(cwd: Path | None = None) -> JsonProgressStore:
    return JsonProgressStore(cwd or Path.cwd())


__all__ = [
    "CliLoggingConfig",
    "ErrorMessages",
    "OutputLevel",
    "configure_global_logging",
    "create_backend_from_config",
    "create_progress_store",
    "is_quiet",
    "is_verbose",
    "load_cli_config",
    "reset_logging_state",
    "set_log_file",
    "set_log_format",
    "set_log_level",
    "set_output_level",
]
