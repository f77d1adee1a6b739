"""Lock backend selection."""

from __future__ import annotations

import logging
import os

from critical_section.core.constants import (
    BACKEND_AUTO,
    BACKEND_FCNTL,
    BACKEND_MSVCRT,
    LOCK_BACKEND_ENV,
)
from critical_section.core.exceptions import LockBackendUnavailableError
from critical_section.core.locks.backends import (
    FcntlFileLockBackend,
    LockBackend,
    MsvcrtFileLockBackend,
)


def create_lock_backend(
    backend_name: str | None = None,
    *,
    logger: logging.Logger | None = None,
) -> LockBackend:
    """Create lock backend from explicit value or environment override."""
    log = logger or logging.getLogger(__name__)
    requested = (backend_name or os.environ.get(LOCK_BACKEND_ENV, BACKEND_AUTO)).strip().lower()

    if requested == BACKEND_AUTO:
        if FcntlFileLockBackend.is_supported():
            return FcntlFileLockBackend()
        if MsvcrtFileLockBackend.is_supported():
            return MsvcrtFileLockBackend()
        raise LockBackendUnavailableError("no advisory file locking primitive available on this platform")

    if requested == BACKEND_FCNTL:
        if FcntlFileLockBackend.is_supported():
            return FcntlFileLockBackend()
        log.warning("Requested fcntl backend is unavailable; falling back to auto selection")
        return create_lock_backend(BACKEND_AUTO, logger=log)

    if requested == BACKEND_MSVCRT:
        if MsvcrtFileLockBackend.is_supported():
            return MsvcrtFileLockBackend()
        log.warning("Requested msvcrt backend is unavailable; falling back to auto selection")
        return create_lock_backend(BACKEND_AUTO, logger=log)

    log.warning("Unknown lock backend '%s'; falling back to auto selection", requested)
    return create_lock_backend(BACKEND_AUTO, logger=log)
