"""Locking subsystem for cross-process critical sections.

This package keeps OS lock acquisition/release behind backend abstractions
so ``CriticalSection`` can stay platform-neutral.
"""

from critical_section.core.locks.backends import (
    FcntlFileLockBackend,
    MsvcrtFileLockBackend,
    SlotHandle,
)
from critical_section.core.locks.identity import caller_location, section_digest, slot_file_path
from critical_section.core.locks.manager import create_lock_backend
from critical_section.core.locks.section import CriticalSection, critical_section

__all__ = [
    "CriticalSection",
    "FcntlFileLockBackend",
    "MsvcrtFileLockBackend",
    "SlotHandle",
    "caller_location",
    "create_lock_backend",
    "critical_section",
    "section_digest",
    "slot_file_path",
]
