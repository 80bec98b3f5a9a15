"""Configuration models for NeuroLint.

Pydantic models for the project configuration file plus the loader that
finds it. Configuration is looked up in this order:

1. An explicit ``--config`` path
2. ``.neurolint.json`` in the working directory
3. ``neurolint.config.json``
4. ``.neurolint.yaml``
5. The ``neurolint`` key of ``package.json``

The first file found wins; missing sections fall back to defaults.
``NEUROLINT_API_KEY`` and ``NEUROLINT_API_URL`` override the file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from neurolint.core.constants import (
    BACKUP_DIR_NAME,
    BATCH_SIZE,
    DEFAULT_API_URL,
    DEFAULT_EXCLUDE_PATTERNS,
    DEFAULT_EXTENSIONS,
    DEFAULT_LAYERS,
    LONG_LINE_THRESHOLD,
    MAX_BACKUPS,
    MAX_CONCURRENT,
    MAX_FILE_SIZE_BYTES,
    MAX_FILES,
    MAX_LAYER,
    MIN_LAYER,
    RETRY_BACKOFF_FACTOR,
    RETRY_BASE_DELAY_SECONDS,
    RETRY_MAX_ATTEMPTS,
    RETRY_MAX_DELAY_SECONDS,
    TRANSFORM_TIMEOUT_SECONDS,
)
from neurolint.core.errors import ConfigurationError
from neurolint.core.logging import get_logger

_logger = get_logger("config")

CONFIG_FILE_NAMES = (
    ".neurolint.json",
    "neurolint.config.json",
    ".neurolint.yaml",
    "package.json",
)

API_KEY_ENV = "NEUROLINT_API_KEY"
API_URL_ENV = "NEUROLINT_API_URL"


class LayerSettings(BaseModel):
    """Display name and timeout for one transform layer."""

    name: str
    timeout: int = Field(default=30000, gt=0, description="Layer timeout (ms)")
    enabled: bool = True


def _default_layer_settings() -> dict[int, LayerSettings]:
    return {
        1: LayerSettings(name="Configuration Validation", timeout=30000),
        2: LayerSettings(name="Pattern & Entity Fixes", timeout=45000),
        3: LayerSettings(name="Component Best Practices", timeout=60000),
        4: LayerSettings(name="Hydration & SSR Guard", timeout=45000),
        5: LayerSettings(name="Next.js Optimization", timeout=30000, enabled=False),
        6: LayerSettings(name="Quality & Performance", timeout=30000, enabled=False),
    }


class LayersConfig(BaseModel):
    """Which layers run by default and how they are described."""

    enabled: list[int] = Field(default_factory=lambda: list(DEFAULT_LAYERS))
    config: dict[int, LayerSettings] = Field(default_factory=_default_layer_settings)

    @field_validator("enabled")
    @classmethod
    def _check_layers(cls, value: list[int]) -> list[int]:
        errors = validate_layer_numbers(value)
        if errors:
            raise ValueError("; ".join(errors))
        return value


class FilesConfig(BaseModel):
    """Default file patterns when none are given on the command line."""

    include: list[str] = Field(default_factory=lambda: ["**/*.{ts,tsx,js,jsx}"])
    exclude: list[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))


class OutputConfig(BaseModel):
    format: Literal["table", "json", "summary"] = "table"
    verbose: bool = False


class ApiConfig(BaseModel):
    """Remote transform service connection settings."""

    url: str = DEFAULT_API_URL
    timeout: float = Field(
        default=TRANSFORM_TIMEOUT_SECONDS, gt=0, description="Request timeout (seconds)"
    )
    requests_per_minute: int | None = Field(
        default=None,
        ge=1,
        description="Client-side rate limit for transform calls (None = unlimited)",
    )

    @field_validator("url")
    @classmethod
    def _check_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("API URL must use http or https protocol")
        if not value.split("://", 1)[1].strip("/"):
            raise ValueError("API URL must have a valid hostname")
        return value.rstrip("/")


class BatchConfig(BaseModel):
    """Batching and concurrency limits for a fix run."""

    batch_size: int = Field(default=BATCH_SIZE, ge=1)
    max_concurrent: int = Field(default=MAX_CONCURRENT, ge=1)


class RetryConfig(BaseModel):
    """Retry behaviour for transform calls."""

    max_attempts: int = Field(default=RETRY_MAX_ATTEMPTS, ge=1)
    delay_seconds: float = Field(default=RETRY_BASE_DELAY_SECONDS, ge=0)
    backoff_factor: float = Field(default=RETRY_BACKOFF_FACTOR, ge=1)
    max_delay_seconds: float = Field(default=RETRY_MAX_DELAY_SECONDS, ge=0)
    jitter: bool = Field(default=False, description="Randomize each backoff sleep")
    retry_on_server_error: bool = Field(
        default=True,
        description="Treat HTTP 500 as transient (502/503/504 always are)",
    )

    @model_validator(mode="after")
    def _validate_delay_range(self) -> RetryConfig:
        if self.delay_seconds > self.max_delay_seconds:
            raise ValueError(
                f"delay_seconds ({self.delay_seconds}) must not exceed "
                f"max_delay_seconds ({self.max_delay_seconds})"
            )
        return self


class BackupConfig(BaseModel):
    directory: Path | None = Field(
        default=None,
        description=f"Shared backup directory (default: {BACKUP_DIR_NAME} beside each file)",
    )
    max_backups: int = Field(default=MAX_BACKUPS, ge=1)


class ValidationConfig(BaseModel):
    """Limits applied to the resolved file set before a run starts."""

    max_files: int = Field(default=MAX_FILES, ge=1)
    max_file_size: int = Field(default=MAX_FILE_SIZE_BYTES, gt=0, description="Bytes")
    allowed_extensions: list[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    long_line_threshold: int = Field(default=LONG_LINE_THRESHOLD, gt=0)
    extension_errors: bool = Field(
        default=False,
        description="Reject unsupported extensions instead of warning",
    )


class NeuroLintConfig(BaseModel):
    """Top-level NeuroLint configuration."""

    version: str = "1.0.0"
    layers: LayersConfig = Field(default_factory=LayersConfig)
    files: FilesConfig = Field(default_factory=FilesConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    backup: BackupConfig = Field(default_factory=BackupConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    api_key: str | None = Field(default=None, alias="apiKey")

    model_config = {"populate_by_name": True}

    def layer_name(self, layer_id: int) -> str:
        settings = self.layers.config.get(layer_id)
        return settings.name if settings else f"Layer {layer_id}"


def validate_layer_numbers(layers: str | list[int]) -> list[str]:
    """Validate a layer selection such as ``"1,2,4"``.

    Returns:
        Error messages; empty when the selection is valid.
    """
    errors: list[str] = []
    if isinstance(layers, str):
        parsed: list[Any] = []
        for part in layers.split(","):
            part = part.strip()
            try:
                parsed.append(int(part))
            except ValueError:
                parsed.append(part)
    else:
        parsed = list(layers)

    invalid = [
        str(layer) for layer in parsed
        if not isinstance(layer, int) or not MIN_LAYER <= layer <= MAX_LAYER
    ]
    if invalid:
        errors.append(
            f"Invalid layer numbers: {', '.join(invalid)}. "
            f"Must be integers between {MIN_LAYER}-{MAX_LAYER}."
        )
    if len(set(map(str, parsed))) != len(parsed):
        errors.append("Duplicate layer numbers are not allowed")
    return errors


def parse_layers(layers: str) -> list[int]:
    """Parse and validate a comma separated layer list.

    Raises:
        ConfigurationError: If the list is invalid.
    """
    errors = validate_layer_numbers(layers)
    if errors:
        raise ConfigurationError("; ".join(errors))
    return [int(part.strip()) for part in layers.split(",")]


def _read_config_file(path: Path) -> dict[str, Any] | None:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if path.name == "package.json":
        data = data.get("neurolint") if isinstance(data, dict) else None
    if data is not None and not isinstance(data, dict):
        raise ConfigurationError(f"{path}: configuration must be a mapping")
    return data


def find_config_path(cwd: Path | None = None) -> Path | None:
    """Return the first configuration file present in the working directory."""
    base = cwd or Path.cwd()
    for name in CONFIG_FILE_NAMES:
        candidate = base / name
        if candidate.exists():
            return candidate
    return None


def load_config(config_path: Path | None = None, cwd: Path | None = None) -> NeuroLintConfig:
    """Load configuration, falling back to defaults.

    Args:
        config_path: Explicit config file; must exist when given.
        cwd: Directory searched for config files (default: process cwd).

    Returns:
        The validated configuration with environment overrides applied.

    Raises:
        ConfigurationError: If a config file is unreadable or invalid.
    """
    base = cwd or Path.cwd()
    if config_path is not None and not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    candidates = [config_path] if config_path else [base / n for n in CONFIG_FILE_NAMES]
    raw: dict[str, Any] = {}
    for candidate in candidates:
        if candidate is None or not candidate.exists():
            continue
        try:
            data = _read_config_file(candidate)
        except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to read config {candidate}: {e}") from e
        if data is None:
            # package.json without a neurolint section
            continue
        _logger.debug("config_loaded", path=str(candidate))
        raw = data
        break

    if api_key := os.environ.get(API_KEY_ENV):
        raw["api_key"] = api_key
        raw.pop("apiKey", None)
    if api_url := os.environ.get(API_URL_ENV):
        raw["api"] = {**raw.get("api", {}), "url": api_url}

    try:
        return NeuroLintConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


__all__ = [
    "ApiConfig",
    "BackupConfig",
    "BatchConfig",
    "FilesConfig",
    "LayerSettings",
    "LayersConfig",
    "NeuroLintConfig",
    "OutputConfig",
    "RetryConfig",
    "ValidationConfig",
    "find_config_path",
    "load_config",
    "parse_layers",
    "validate_layer_numbers",
]
