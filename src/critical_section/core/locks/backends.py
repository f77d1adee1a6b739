"""Slot lock backend implementations.

Design principles:
- Ownership is defined by OS advisory lock state only.
- Slot files are empty markers; backends never write to or delete them.
- Contention is a normal outcome (``None`` from ``acquire``), while an
  unusable slot file or locking primitive is raised to the caller.
"""

from __future__ import annotations

import contextlib
import errno
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from critical_section.core.exceptions import LockBackendUnavailableError, SlotFileError

try:
    import fcntl
except ImportError:  # pragma: no cover - exercised on non-POSIX only
    fcntl = None

try:
    import msvcrt
except ImportError:  # pragma: no cover - exercised on Windows only
    msvcrt = None

_FLOCK_UNSUPPORTED_ERRNOS = {
    err_no
    for err_no in (
        getattr(errno, "ENOTSUP", None),
        getattr(errno, "EOPNOTSUPP", None),
        getattr(errno, "ENOSYS", None),
    )
    if err_no is not None
}

_CONTENTION_ERRNOS = {
    err_no
    for err_no in (
        errno.EAGAIN,
        errno.EWOULDBLOCK,
        errno.EACCES,
        getattr(errno, "EDEADLOCK", None),
    )
    if err_no is not None
}

_SLOT_FILE_MODE = 0o666


@dataclass
class SlotHandle:
    """Open, exclusively locked slot file owned by one guard."""

    slot_path: Path
    fd: int
    closed: bool = False


class LockBackend(Protocol):
    """Backend abstraction for non-blocking slot locking."""

    name: str

    def acquire(self, slot_path: Path) -> SlotHandle | None:
        """Try locking the slot non-blocking. Returns handle if acquired."""

    def release(self, handle: SlotHandle) -> None:
        """Unlock and close the slot held by handle."""


def open_slot_file(slot_path: Path) -> int:
    """Create the slot file empty if missing and open it read/write."""
    try:
        return os.open(str(slot_path), os.O_CREAT | os.O_RDWR, _SLOT_FILE_MODE)
    except OSError as e:
        raise SlotFileError(
            "Semaphore cannot be created",
            slot_path=str(slot_path),
            details=f"Can not create file {slot_path} ({e.strerror or e})",
            original_error=e,
        ) from e


class FcntlFileLockBackend:
    """POSIX advisory locking backend backed by `fcntl.flock`."""

    name = "fcntl"

    @staticmethod
    def is_supported() -> bool:
        return fcntl is not None

    def acquire(self, slot_path: Path) -> SlotHandle | None:
        fd = open_slot_file(slot_path)

        try:
            assert fcntl is not None  # For type checkers.
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError:
            os.close(fd)
            return None
        except OSError as e:
            os.close(fd)
            if e.errno in (errno.EAGAIN, errno.EWOULDBLOCK):
                return None
            if e.errno in _FLOCK_UNSUPPORTED_ERRNOS:
                raise LockBackendUnavailableError(f"flock is unsupported for slot path '{slot_path}'") from e
            raise

        return SlotHandle(slot_path=slot_path, fd=fd)

    def release(self, handle: SlotHandle) -> None:
        if handle.closed:
            return
        try:
            assert fcntl is not None  # For type checkers.
            fcntl.flock(handle.fd, fcntl.LOCK_UN)
        except OSError:
            pass
        finally:
            with contextlib.suppress(OSError):
                os.close(handle.fd)
            handle.closed = True


class MsvcrtFileLockBackend:
    """Windows locking backend: locks the first byte with `msvcrt.locking`.

    The byte range may lie past end-of-file, so slot files stay empty.
    """

    name = "msvcrt"

    @staticmethod
    def is_supported() -> bool:
        return msvcrt is not None

    def acquire(self, slot_path: Path) -> SlotHandle | None:
        fd = open_slot_file(slot_path)

        try:
            assert msvcrt is not None  # For type checkers.
            os.lseek(fd, 0, os.SEEK_SET)
            msvcrt.locking(fd, msvcrt.LK_NBLCK, 1)
        except OSError as e:
            os.close(fd)
            if e.errno in _CONTENTION_ERRNOS:
                return None
            raise

        return SlotHandle(slot_path=slot_path, fd=fd)

    def release(self, handle: SlotHandle) -> None:
        if handle.closed:
            return
        try:
            assert msvcrt is not None  # For type checkers.
            os.lseek(handle.fd, 0, os.SEEK_SET)
            msvcrt.locking(handle.fd, msvcrt.LK_UNLCK, 1)
        except OSError:
            pass
        finally:
            with contextlib.suppress(OSError):
                os.close(handle.fd)
            handle.closed = True
