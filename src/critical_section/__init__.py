"""
critical-section - inter-process mutual exclusion on top of advisory file locks

Independent processes agree on a section identifier and at most
``max_process`` of them may hold it at once.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from critical_section.core.lazy import make_getattr

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "CriticalSection",
    "critical_section",
    "section_digest",
    "caller_location",
    "create_lock_backend",
    "SectionConfig",
    "CriticalSectionError",
    "SlotFileError",
    "SlotOutOfRangeError",
    "WaitTimeoutError",
    "CriticalSectionClosedError",
    "LockBackendUnavailableError",
    "setup_logging",
]

if TYPE_CHECKING:
    from critical_section.core.config import SectionConfig
    from critical_section.core.exceptions import (
        CriticalSectionClosedError,
        CriticalSectionError,
        LockBackendUnavailableError,
        SlotFileError,
        SlotOutOfRangeError,
        WaitTimeoutError,
    )
    from critical_section.core.locks import (
        CriticalSection,
        caller_location,
        create_lock_backend,
        critical_section,
        section_digest,
    )
    from critical_section.core.logging import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__getattr__ = make_getattr(
    __name__,
    [name for name in __all__ if name != "__version__"],
    mapping={
        "CriticalSection": "critical_section.core.locks",
        "critical_section": "critical_section.core.locks",
        "section_digest": "critical_section.core.locks",
        "caller_location": "critical_section.core.locks",
        "create_lock_backend": "critical_section.core.locks",
        "SectionConfig": "critical_section.core.config",
        "CriticalSectionError": "critical_section.core.exceptions",
        "SlotFileError": "critical_section.core.exceptions",
        "SlotOutOfRangeError": "critical_section.core.exceptions",
        "WaitTimeoutError": "critical_section.core.exceptions",
        "CriticalSectionClosedError": "critical_section.core.exceptions",
        "LockBackendUnavailableError": "critical_section.core.exceptions",
        "setup_logging": "critical_section.core.logging",
    },
)
