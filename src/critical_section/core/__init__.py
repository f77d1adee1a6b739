"""Core module - foundation components for critical sections.

This module provides the basic building blocks used throughout the package:
- Custom exceptions
- Configuration dataclass
- Constants and defaults
- Logging helpers
"""

from critical_section.core.exceptions import (
    CriticalSectionError,
    SlotFileError,
    SlotOutOfRangeError,
    WaitTimeoutError,
    CriticalSectionClosedError,
    LockBackendUnavailableError,
)

from critical_section.core.config import SectionConfig

from critical_section.core.constants import (
    DEFAULT_MAX_PROCESS,
    DEFAULT_POLL_INTERVAL,
    WAIT_FOREVER,
    DIGEST_ALGORITHM,
    LOCK_DIR_ENV,
    POLL_INTERVAL_ENV,
    LOCK_BACKEND_ENV,
)

from critical_section.core.logging import (
    JSONFormatter,
    setup_logging,
    with_log_context,
)

__all__ = [
    # Exceptions
    'CriticalSectionError',
    'SlotFileError',
    'SlotOutOfRangeError',
    'WaitTimeoutError',
    'CriticalSectionClosedError',
    'LockBackendUnavailableError',
    # Config dataclass
    'SectionConfig',
    # Constants
    'DEFAULT_MAX_PROCESS',
    'DEFAULT_POLL_INTERVAL',
    'WAIT_FOREVER',
    'DIGEST_ALGORITHM',
    'LOCK_DIR_ENV',
    'POLL_INTERVAL_ENV',
    'LOCK_BACKEND_ENV',
    # Logging
    'JSONFormatter',
    'setup_logging',
    'with_log_context',
]
