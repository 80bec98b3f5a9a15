"""Global constants for NeuroLint.

Centralizes magic numbers used throughout the codebase,
making them discoverable, consistent, and easy to modify.
"""

# =============================================================================
# Batch Execution Defaults
# =============================================================================

BATCH_SIZE = 3
"""Files per batch. Batch N+1 starts only after every file of batch N settled."""

MAX_CONCURRENT = 2
"""Maximum transform calls in flight at once within a batch."""

FIX_OPERATION = "Fix"
"""Operation name recorded in the progress snapshot for fix runs."""

# =============================================================================
# Retry Defaults
# =============================================================================

RETRY_MAX_ATTEMPTS = 2
"""Attempts per file (first call included) for the fix command."""

RETRY_BASE_DELAY_SECONDS = 2.0
"""Initial delay between attempts."""

RETRY_BACKOFF_FACTOR = 2.0
"""Multiplier applied to the delay after each failed attempt."""

RETRY_MAX_DELAY_SECONDS = 10.0
"""Ceiling for a single backoff sleep."""

RETRYABLE_ERROR_CODES = frozenset({
    "ECONNRESET",
    "ENOTFOUND",
    "ECONNREFUSED",
    "ETIMEDOUT",
    "TIMEOUT",
})
"""Transport failure codes treated as transient."""

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
"""HTTP status codes treated as transient."""

# =============================================================================
# File Validation Limits
# =============================================================================

MAX_FILES = 500
"""Maximum number of files accepted by a single fix run."""

MAX_FILE_SIZE_BYTES = 10 * 1024 * 1024
"""Maximum size of a single input file (10 MiB)."""

DEFAULT_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx")
"""Extensions the transform service is known to handle."""

LONG_LINE_THRESHOLD = 1000
"""Lines longer than this suggest minified content."""

BINARY_SNIFF_CHARS = 1000
"""How many leading characters are checked for control characters."""

DEFAULT_EXCLUDE_PATTERNS = (
    "node_modules/**",
    "dist/**",
    "build/**",
    ".next/**",
    "coverage/**",
)
"""Dependency and build output directories never offered to the service."""

# =============================================================================
# Layers
# =============================================================================

MIN_LAYER = 1
MAX_LAYER = 6
DEFAULT_LAYERS = (1, 2, 3, 4)

# =============================================================================
# On-disk Locations
# =============================================================================

PROGRESS_FILE_NAME = ".neurolint-progress.json"
"""Progress snapshot, relative to the working directory."""

BACKUP_DIR_NAME = ".neurolint-backups"
"""Quarantine directory created beside each backed-up file."""

MAX_BACKUPS = 10
"""Backups kept per original file name."""

# =============================================================================
# Remote Service
# =============================================================================

DEFAULT_API_URL = "http://localhost:5000"
TRANSFORM_TIMEOUT_SECONDS = 60.0
"""Transformations are slower than analysis calls."""
