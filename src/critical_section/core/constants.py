"""Constants and default values for critical-section.

This module centralizes the magic numbers and environment variable names
used throughout the package.
"""

# ==================== SLOT DEFAULTS ====================

DEFAULT_MAX_PROCESS: int = 1  # Simultaneous holders of one section
DEFAULT_POLL_INTERVAL: float = 0.1  # Seconds between wait_access attempts
WAIT_FOREVER: float = -1  # Any negative timeout waits indefinitely

# Digest algorithm for section identifiers (hashlib name)
DIGEST_ALGORITHM: str = "sha1"

# ==================== BACKENDS ====================

BACKEND_AUTO: str = "auto"
BACKEND_FCNTL: str = "fcntl"
BACKEND_MSVCRT: str = "msvcrt"

# ==================== ENVIRONMENT OVERRIDES ====================

LOCK_DIR_ENV: str = "CRITICAL_SECTION_LOCK_DIR"
POLL_INTERVAL_ENV: str = "CRITICAL_SECTION_POLL_INTERVAL"
LOCK_BACKEND_ENV: str = "CRITICAL_SECTION_LOCK_BACKEND"
LOG_LEVEL_ENV: str = "LOG_LEVEL"

# ==================== LOGGING DEFAULTS ====================

LOGGER_NAME: str = "critical_section"
VALID_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
